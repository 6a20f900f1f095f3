"""JSONFormatter — structured log lines with optional extra fields."""

import json
import logging
import uuid

from farmops.infrastructure.observability import JSONFormatter


def _record(**extra):
    record = logging.LogRecord(
        "farmops.test", logging.INFO, __file__, 1, "stored %d insights", (3,), None,
    )
    record.__dict__.update(extra)
    return record


def test_formats_base_fields():
    line = json.loads(JSONFormatter().format(_record()))
    assert line["level"] == "INFO"
    assert line["logger"] == "farmops.test"
    assert line["message"] == "stored 3 insights"
    assert "timestamp" in line
    assert "farm_id" not in line


def test_includes_known_extras_only():
    farm_id = uuid.uuid4()
    line = json.loads(JSONFormatter().format(
        _record(farm_id=farm_id, insight_count=3, secret="hidden"),
    ))
    assert line["farm_id"] == str(farm_id)
    assert line["insight_count"] == 3
    assert "secret" not in line
