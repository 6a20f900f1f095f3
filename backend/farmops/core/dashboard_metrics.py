"""Dashboard Metrics — pure aggregation of raw table rows into chart-ready series.

Invariants:
    - Inputs are plain row dicts (column name → value); no IO, no ORM objects
    - Null numeric columns count as 0; rows missing a grouping date are skipped
    - Ratios never divide by zero (0 is returned instead)
    - `now` is injected wherever recency matters

Design Decisions:
    - Dates accepted as date, datetime or ISO string: rows come from both the ORM
      and JSON payloads
    - Month buckets keyed by (year, month) and labelled "Mon YYYY" only at the end,
      so ordering is chronological rather than alphabetical
    - avg_productivity divides by total quantity whenever any production data exists
"""

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable

LOW_EFFICIENCY_THRESHOLD = 60
MAX_FARMERS_PER_INPUT = 50
RECENT_WINDOW_DAYS = 30


def _num(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _to_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def month_label(key: tuple[int, int]) -> str:
    """(2024, 3) → "Mar 2024"."""
    year, month = key
    return date(year, month, 1).strftime("%b %Y")


# ─── Crops ──────────────────────────────────────────────────────

def compute_crop_performance(crops: Iterable[dict]) -> list[dict]:
    """Group harvested crops by name; sorted by total yield, highest first."""
    groups: dict[str, dict] = {}
    for crop in crops:
        if crop.get("quantity_harvested") is None:
            continue
        g = groups.setdefault(crop.get("crop_name") or "Unknown", {
            "total_yield": 0, "total_planted": 0, "total_area": 0, "count": 0,
        })
        g["total_yield"] += _num(crop.get("quantity_harvested"))
        g["total_planted"] += _num(crop.get("quantity_planted"))
        g["total_area"] += _num(crop.get("farm_area"))
        g["count"] += 1

    result = [
        {
            "crop_name": name,
            "total_yield": g["total_yield"],
            "total_planted": g["total_planted"],
            "avg_yield_per_hectare": (
                g["total_yield"] / g["total_area"] if g["total_area"] > 0 else 0
            ),
            "farms_count": g["count"],
        }
        for name, g in groups.items()
    ]
    return sorted(result, key=lambda r: r["total_yield"], reverse=True)


# ─── Finance ────────────────────────────────────────────────────

def compute_financial_overview(
    inputs: Iterable[dict],
    livestock: Iterable[dict],
    loans: Iterable[dict],
    months: int = 6,
) -> dict:
    """Monthly revenue/expense/loan series plus a summary of the kept months.

    Expenses come from input costs, revenue from livestock acquisition cost
    (the only money-in figure the schema carries), and loan disbursements
    from approved loans.
    """
    loans = list(loans)
    buckets: dict[tuple[int, int], dict] = defaultdict(
        lambda: {"revenue": 0, "expenses": 0, "loan_disbursements": 0},
    )

    for row in inputs:
        day = _to_date(row.get("date_supplied"))
        if day and row.get("total_cost") is not None:
            buckets[(day.year, day.month)]["expenses"] += _num(row["total_cost"])

    for row in livestock:
        day = _to_date(row.get("acquisition_date"))
        if day and row.get("acquisition_cost") is not None:
            buckets[(day.year, day.month)]["revenue"] += _num(row["acquisition_cost"])

    for row in loans:
        day = _to_date(row.get("disbursement_date"))
        if day and row.get("status") == "approved" and _num(row.get("amount")):
            buckets[(day.year, day.month)]["loan_disbursements"] += _num(row["amount"])

    kept = sorted(buckets.items())[-months:] if months > 0 else []
    monthly = [
        {
            "month": month_label(key),
            "revenue": data["revenue"],
            "expenses": data["expenses"],
            "profit": data["revenue"] - data["expenses"],
            "loan_disbursements": data["loan_disbursements"],
        }
        for key, data in kept
    ]

    total_revenue = sum(m["revenue"] for m in monthly)
    total_expenses = sum(m["expenses"] for m in monthly)
    net_profit = total_revenue - total_expenses
    open_loans = [loan for loan in loans if loan.get("status") != "completed"]

    return {
        "monthly": monthly,
        "summary": {
            "total_revenue": total_revenue,
            "total_expenses": total_expenses,
            "net_profit": net_profit,
            "active_loans": len(open_loans),
            "loan_value": sum(_num(loan.get("amount")) for loan in open_loans),
            "profit_margin": (
                net_profit / total_revenue * 100 if total_revenue > 0 else 0
            ),
        },
    }


# ─── Livestock ──────────────────────────────────────────────────

def production_value(productivity_data: Any) -> float:
    """Sum of the numeric values in a productivity_data JSON object."""
    if not isinstance(productivity_data, dict):
        return 0
    return sum(_num(v) for v in productivity_data.values())


def compute_livestock_analytics(livestock: Iterable[dict], now: datetime) -> dict:
    """Per-type herd figures plus organization-wide health metrics."""
    livestock = list(livestock)
    groups: dict[str, dict] = {}
    for animal in livestock:
        quantity = _num(animal.get("quantity"))
        healthy = quantity if animal.get("health_status") == "healthy" else 0
        g = groups.setdefault(animal.get("livestock_type") or "Unknown", {
            "total_quantity": 0, "healthy_count": 0,
            "production_value": 0, "has_production": False,
        })
        g["total_quantity"] += quantity
        g["healthy_count"] += healthy
        if isinstance(animal.get("productivity_data"), dict):
            g["production_value"] += production_value(animal["productivity_data"])
            g["has_production"] = True

    by_type = [
        {
            "livestock_type": kind,
            "total_quantity": g["total_quantity"],
            "healthy_count": g["healthy_count"],
            "production_value": g["production_value"],
            "avg_productivity": (
                g["production_value"] / g["total_quantity"]
                if g["has_production"] else 0
            ),
        }
        for kind, g in groups.items()
        if g["total_quantity"] > 0
    ]

    total = sum(g["total_quantity"] for g in groups.values())
    healthy = sum(g["healthy_count"] for g in groups.values())
    cutoff = now - timedelta(days=RECENT_WINDOW_DAYS)
    recent_vaccinations = 0
    for animal in livestock:
        updated = _to_datetime(animal.get("updated_at"))
        status = (animal.get("health_status") or "").lower()
        if updated and updated > cutoff and "vaccin" in status:
            recent_vaccinations += 1

    return {
        "by_type": by_type,
        "health": {
            "total_animals": total,
            "healthy_percentage": healthy / total * 100 if total > 0 else 0,
            "recent_vaccinations": recent_vaccinations,
        },
    }


# ─── Inputs / resources ─────────────────────────────────────────

def efficiency_score(avg_cost_per_unit: float, farms_using: int) -> float:
    """Mean of a cost score (cheaper is better) and a reach score (more farmers is better)."""
    cost_efficiency = max(0, 100 - (avg_cost_per_unit / 1000) * 10)
    utilization = min(100, (farms_using / MAX_FARMERS_PER_INPUT) * 100)
    return (cost_efficiency + utilization) / 2


def compute_resource_utilization(inputs: Iterable[dict]) -> dict:
    """Per-input-type cost and efficiency, sorted by total cost, highest first."""
    groups: dict[str, dict] = {}
    for row in inputs:
        if row.get("total_cost") is None:
            continue
        g = groups.setdefault(row.get("input_type") or "Unknown", {
            "total_quantity": 0, "total_cost": 0, "farmers": set(),
            "cost_per_unit_sum": 0, "entries": 0,
        })
        g["total_quantity"] += _num(row.get("quantity"))
        g["total_cost"] += _num(row.get("total_cost"))
        if row.get("farmer_id"):
            g["farmers"].add(str(row["farmer_id"]))
        g["cost_per_unit_sum"] += _num(row.get("cost_per_unit"))
        g["entries"] += 1

    resources = []
    for kind, g in groups.items():
        avg_cpu = g["cost_per_unit_sum"] / g["entries"] if g["entries"] else 0
        resources.append({
            "input_type": kind,
            "total_quantity": g["total_quantity"],
            "total_cost": g["total_cost"],
            "farms_using": len(g["farmers"]),
            "efficiency_score": efficiency_score(avg_cpu, len(g["farmers"])),
            "cost_per_unit": avg_cpu,
        })
    resources.sort(key=lambda r: r["total_cost"], reverse=True)

    scores = [r["efficiency_score"] for r in resources]
    return {
        "resources": resources,
        "summary": {
            "total_inputs": len(resources),
            "total_value": sum(r["total_cost"] for r in resources),
            "avg_efficiency": sum(scores) / len(scores) if scores else 0,
            "low_efficiency_count": sum(
                1 for s in scores if s < LOW_EFFICIENCY_THRESHOLD
            ),
        },
    }
