"""Insight Payload Parsing — turns raw model text into a list of raw insight dicts.

Invariants:
    - Never raises: unparseable text becomes a single fallback insight
    - Accepts {"insights": [...]} or a bare JSON list, optionally inside a
      Markdown code fence
    - Output entries are untrusted; normalization happens in insight_normalization

Design Decisions:
    - Fallback keeps the model's prose as the description so a non-JSON answer
      still produces a useful insight
"""

import json
import re

FALLBACK_TITLE = "AI Analysis"
FALLBACK_DESCRIPTION = "No insights generated"
FALLBACK_ACTIONS = [
    "Review the analysis",
    "Consider implementing suggested changes",
]
FALLBACK_CONFIDENCE = 0.8

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if present."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    return match.group(1).strip() if match else stripped


def fallback_insight(text: str) -> dict:
    return {
        "title": FALLBACK_TITLE,
        "description": text.strip() or FALLBACK_DESCRIPTION,
        "severity": "medium",
        "recommended_actions": list(FALLBACK_ACTIONS),
        "confidence": FALLBACK_CONFIDENCE,
        "metadata": {},
    }


def parse_insight_payload(text: str | None) -> list:
    """Extract the raw insight list from model output."""
    text = text or ""
    try:
        payload = json.loads(strip_code_fence(text))
    except (ValueError, TypeError):
        return [fallback_insight(text)]

    if isinstance(payload, dict):
        # a single insight object rather than the {"insights": [...]} wrapper
        payload = payload.get(
            "insights", [payload] if "title" in payload else None,
        )
    if not isinstance(payload, list) or not payload:
        return [fallback_insight("")]
    return payload
