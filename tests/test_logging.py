# tests/test_logging.py
import json
import logging

from shared.logging import JSONFormatter, context


def make_record(msg, **kw):
    return logging.LogRecord("weather_push.test", logging.ERROR, __file__, 1, msg, None, None, **kw)


def test_context_is_merged_at_top_level():
    rec = make_record("Error fetching the weather data")
    for k, v in context(call="fetch_weather", city="Barcelona").items():
        setattr(rec, k, v)

    out = json.loads(JSONFormatter(service="Weather Push Bridge").format(rec))
    assert out["msg"] == "Error fetching the weather data"
    assert out["level"] == "ERROR"
    assert out["call"] == "fetch_weather"
    assert out["city"] == "Barcelona"
    assert out["service"] == "Weather Push Bridge"


def test_non_json_values_are_stringified():
    rec = make_record("x")
    rec.extra = {"when": object()}
    out = json.loads(JSONFormatter().format(rec))
    assert "service" not in out
    assert isinstance(out["when"], str)
