"""Tests for insight normalization — clamping untrusted model output, no IO."""

import math
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from farmops.core.insight_normalization import (
    TITLE_MAX_LENGTH,
    clamp_confidence,
    normalize_actions,
    normalize_insight,
    normalize_insights,
    normalize_severity,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw, expected", [
    (0.42, 0.42),
    (1.7, 1.0),
    (-3, 0.0),
    (1, 1.0),
    ("0.9", 0.7),
    (None, 0.7),
    (True, 0.7),
    (math.nan, 0.7),
    (math.inf, 1.0),
])
def test_confidence_is_clamped(raw, expected):
    assert clamp_confidence(raw) == expected


@pytest.mark.parametrize("raw", [
    0.5, 2, -1, "high", None, [], {}, False, math.nan, -math.inf,
])
def test_confidence_always_within_unit_interval(raw):
    assert 0 <= clamp_confidence(raw) <= 1


@pytest.mark.parametrize("raw, expected", [
    ("low", "low"),
    ("medium", "medium"),
    ("high", "high"),
    ("HIGH", "medium"),
    ("critical", "medium"),
    (None, "medium"),
    (3, "medium"),
])
def test_severity_falls_back_to_medium(raw, expected):
    assert normalize_severity(raw) == expected


def test_actions_non_list_becomes_empty():
    assert normalize_actions("water the crops") == []
    assert normalize_actions(None) == []
    assert normalize_actions({"a": 1}) == []


def test_actions_entries_are_stringified():
    assert normalize_actions(["Irrigate", 3]) == ["Irrigate", "3"]


def test_normalize_insight_fills_defaults():
    farm_id, org_id = uuid4(), uuid4()

    insight = normalize_insight(
        {}, farm_id=farm_id, organization_id=org_id, now=NOW,
    )

    assert insight == {
        "farm_id": farm_id,
        "organization_id": org_id,
        "insight_type": "ai_insight",
        "title": "New Insight",
        "description": "",
        "severity": "medium",
        "recommended_actions": [],
        "confidence": 0.7,
        "metadata": {},
        "created_at": NOW,
        "updated_at": NOW,
    }


def test_normalize_insight_keeps_valid_fields():
    insight = normalize_insight(
        {
            "title": "Pest risk",
            "description": "Aphids likely after rain.",
            "severity": "high",
            "recommended_actions": ["Scout fields"],
            "confidence": 0.85,
            "metadata": {"crop": "beans"},
            "insight_type": "something_else",
        },
        farm_id="f", organization_id="o", now=NOW,
    )

    assert insight["title"] == "Pest risk"
    assert insight["severity"] == "high"
    assert insight["confidence"] == 0.85
    assert insight["metadata"] == {"crop": "beans"}
    assert insight["insight_type"] == "ai_insight"


def test_normalize_insight_non_dict_metadata_becomes_empty():
    insight = normalize_insight(
        {"metadata": ["x"]}, farm_id="f", organization_id="o", now=NOW,
    )
    assert insight["metadata"] == {}


def test_normalize_insights_drops_non_dict_entries():
    insights = normalize_insights(
        [{"title": "A"}, "stray text", 42, None, {"title": "B"}],
        farm_id="f", organization_id="o", now=NOW,
    )
    assert [i["title"] for i in insights] == ["A", "B"]


def test_normalize_insight_drops_non_finite_metadata_values():
    insight = normalize_insight(
        {
            "metadata": {
                "score": float("nan"),
                "ceiling": float("inf"),
                "crop": "beans",
                "nested": {"low": float("-inf"), "ok": 1.5},
                "series": [1, float("nan"), 2],
            },
        },
        farm_id="f", organization_id="o", now=NOW,
    )
    assert insight["metadata"] == {
        "crop": "beans",
        "nested": {"ok": 1.5},
        "series": [1, 2],
    }


def test_normalize_insight_caps_title_length():
    insight = normalize_insight(
        {"title": "x" * (TITLE_MAX_LENGTH + 50)},
        farm_id="f", organization_id="o", now=NOW,
    )
    assert insight["title"] == "x" * TITLE_MAX_LENGTH
