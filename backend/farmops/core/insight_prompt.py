"""Insight Prompt — builds the model request from a farm and its crop/livestock aggregates.

Invariants:
    - Snapshot contains aggregates, not raw row dumps (bounded prompt size)
    - Model is asked for JSON {"insights": [...]} with the stored Insight fields
    - Pure: `now` is injected for the livestock recency window

Design Decisions:
    - Reuses dashboard_metrics so the model sees the same figures as the dashboard
    - json.dumps(default=str) for dates/UUIDs: prompt text only, never parsed back
"""

import json
from datetime import datetime

from farmops.core.dashboard_metrics import (
    compute_crop_performance,
    compute_livestock_analytics,
)

FARM_FIELDS = ("id", "name", "location", "size_hectares", "organization_id")

SYSTEM_PROMPT = (
    "You are an agricultural expert. Analyze the farm data and provide "
    "practical, specific insights for the farm manager.\n"
    "Respond with JSON only, in the form "
    '{"insights": [{"title": str, "description": str, '
    '"severity": "low" | "medium" | "high", '
    '"recommended_actions": [str], "confidence": number between 0 and 1, '
    '"metadata": object}]}. '
    "Return between 1 and 5 insights."
)


def build_farm_snapshot(
    farm: dict, crops: list[dict], livestock: list[dict], now: datetime,
) -> dict:
    """Compact view of a farm for the prompt."""
    statuses: dict[str, int] = {}
    for crop in crops:
        key = crop.get("status") or "unknown"
        statuses[key] = statuses.get(key, 0) + 1

    return {
        "farm": {k: farm.get(k) for k in FARM_FIELDS},
        "crops": {
            "count": len(crops),
            "by_status": statuses,
            "names": sorted({c["crop_name"] for c in crops if c.get("crop_name")}),
            "performance": compute_crop_performance(crops),
        },
        "livestock": compute_livestock_analytics(livestock, now),
    }


def build_insight_messages(snapshot: dict) -> tuple[str, list[dict]]:
    """Return (system prompt, messages) for the chat completion call."""
    user = (
        "Analyze this farm data and provide insights:\n"
        + json.dumps(snapshot, indent=2, default=str)
    )
    return SYSTEM_PROMPT, [{"role": "user", "content": user}]
