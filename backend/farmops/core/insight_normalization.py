"""Insight Normalization — clamps untrusted model output into the stored Insight shape.

Invariants:
    - confidence always in [0, 1]; non-numeric (incl. bool, NaN) → 0.7
    - severity always one of low/medium/high; anything else → "medium"
    - recommended_actions always a list of strings; non-list → []
    - metadata always a dict; non-dict → {}; NaN/Infinity values dropped
    - title at most TITLE_MAX_LENGTH characters
    - insight_type is the constant "ai_insight"; created_at == updated_at == now

Design Decisions:
    - Pure function with `now` injected: callers share one timestamp per batch
    - Non-dict entries dropped by normalize_insights rather than stored as
      placeholder "New Insight" rows
"""

import math
from datetime import datetime
from typing import Any
from uuid import UUID

INSIGHT_TYPE = "ai_insight"
SEVERITIES = ("low", "medium", "high")
DEFAULT_TITLE = "New Insight"
DEFAULT_SEVERITY = "medium"
DEFAULT_CONFIDENCE = 0.7
TITLE_MAX_LENGTH = 500


def clamp_confidence(value: Any) -> float:
    """Clamp a numeric confidence into [0, 1]; default for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE
    if math.isnan(value):
        return DEFAULT_CONFIDENCE
    return float(min(max(value, 0.0), 1.0))


def normalize_severity(value: Any) -> str:
    return value if value in SEVERITIES else DEFAULT_SEVERITY


def normalize_actions(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(action) for action in value]


def _text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


def _finite(value: Any) -> Any:
    """Copy JSON-like data without NaN/Infinity; PostgreSQL json rejects them."""
    if isinstance(value, dict):
        return {
            key: _finite(item) for key, item in value.items()
            if not (isinstance(item, float) and not math.isfinite(item))
        }
    if isinstance(value, list):
        return [
            _finite(item) for item in value
            if not (isinstance(item, float) and not math.isfinite(item))
        ]
    return value


def normalize_insight(
    raw: dict,
    *,
    farm_id: UUID | str,
    organization_id: UUID | str,
    now: datetime,
) -> dict:
    """Shape one raw insight dict into the persisted Insight record."""
    metadata = raw.get("metadata")
    return {
        "farm_id": farm_id,
        "organization_id": organization_id,
        "insight_type": INSIGHT_TYPE,
        "title": _text(raw.get("title"), DEFAULT_TITLE)[:TITLE_MAX_LENGTH],
        "description": _text(raw.get("description"), ""),
        "severity": normalize_severity(raw.get("severity")),
        "recommended_actions": normalize_actions(raw.get("recommended_actions")),
        "confidence": clamp_confidence(raw.get("confidence")),
        "metadata": _finite(metadata) if isinstance(metadata, dict) else {},
        "created_at": now,
        "updated_at": now,
    }


def normalize_insights(
    raw_insights: list,
    *,
    farm_id: UUID | str,
    organization_id: UUID | str,
    now: datetime,
) -> list[dict]:
    """Normalize every dict entry; other entries are dropped."""
    return [
        normalize_insight(
            raw, farm_id=farm_id, organization_id=organization_id, now=now,
        )
        for raw in raw_insights
        if isinstance(raw, dict)
    ]
