"""Tests for parse_insight_payload — raw model text into raw insight dicts."""

from farmops.core.insight_payload import (
    FALLBACK_ACTIONS,
    parse_insight_payload,
    strip_code_fence,
)


def test_wrapped_insights_list():
    text = '{"insights": [{"title": "A"}, {"title": "B"}]}'
    assert parse_insight_payload(text) == [{"title": "A"}, {"title": "B"}]


def test_bare_list():
    assert parse_insight_payload('[{"title": "A"}]') == [{"title": "A"}]


def test_single_insight_object():
    assert parse_insight_payload('{"title": "A"}') == [{"title": "A"}]


def test_code_fenced_json():
    text = '```json\n{"insights": [{"title": "A"}]}\n```'
    assert parse_insight_payload(text) == [{"title": "A"}]


def test_strip_code_fence_leaves_plain_text():
    assert strip_code_fence("  plain  ") == "plain"


def test_prose_becomes_fallback_insight():
    [insight] = parse_insight_payload("Soil looks dry.\n")

    assert insight["title"] == "AI Analysis"
    assert insight["description"] == "Soil looks dry."
    assert insight["confidence"] == 0.8
    assert insight["recommended_actions"] == FALLBACK_ACTIONS


def test_empty_text_becomes_fallback_with_default_description():
    [insight] = parse_insight_payload("")
    assert insight["description"] == "No insights generated"


def test_none_becomes_fallback():
    [insight] = parse_insight_payload(None)
    assert insight["title"] == "AI Analysis"


def test_empty_insights_list_becomes_fallback():
    [insight] = parse_insight_payload('{"insights": []}')
    assert insight["title"] == "AI Analysis"
    assert insight["description"] == "No insights generated"


def test_unrelated_object_becomes_fallback():
    [insight] = parse_insight_payload('{"summary": "fine"}')
    assert insight["title"] == "AI Analysis"


def test_fallback_actions_are_copied():
    [insight] = parse_insight_payload("x")
    insight["recommended_actions"].append("mutated")
    assert "mutated" not in FALLBACK_ACTIONS
