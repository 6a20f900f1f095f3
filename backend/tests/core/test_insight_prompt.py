"""Tests for the insight prompt builder."""

import json
from datetime import date, datetime, timezone
from uuid import uuid4

from farmops.core.insight_prompt import (
    SYSTEM_PROMPT,
    build_farm_snapshot,
    build_insight_messages,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _snapshot():
    farm = {
        "id": uuid4(), "name": "Hillside", "location": "Eldoret",
        "size_hectares": 8.0, "organization_id": uuid4(), "farmer_id": uuid4(),
    }
    crops = [
        {"crop_name": "Maize", "status": "growing", "quantity_harvested": None},
        {"crop_name": "Beans", "status": "harvested", "quantity_harvested": 40,
         "farm_area": 2, "planting_date": date(2024, 1, 1)},
        {"crop_name": "Maize", "status": None, "quantity_harvested": None},
    ]
    livestock = [{"livestock_type": "goat", "quantity": 6, "health_status": "healthy"}]
    return build_farm_snapshot(farm, crops, livestock, NOW)


def test_snapshot_keeps_only_farm_summary_fields():
    snapshot = _snapshot()
    assert set(snapshot["farm"]) == {
        "id", "name", "location", "size_hectares", "organization_id",
    }


def test_snapshot_aggregates_crops_and_livestock():
    snapshot = _snapshot()

    assert snapshot["crops"]["count"] == 3
    assert snapshot["crops"]["by_status"] == {
        "growing": 1, "harvested": 1, "unknown": 1,
    }
    assert snapshot["crops"]["names"] == ["Beans", "Maize"]
    assert snapshot["crops"]["performance"][0]["crop_name"] == "Beans"
    assert snapshot["livestock"]["health"]["total_animals"] == 6


def test_messages_embed_snapshot_as_json():
    snapshot = _snapshot()

    system, messages = build_insight_messages(snapshot)

    assert system == SYSTEM_PROMPT
    [message] = messages
    assert message["role"] == "user"
    header, _, body = message["content"].partition("\n")
    assert header == "Analyze this farm data and provide insights:"
    assert json.loads(body)["farm"]["name"] == "Hillside"
