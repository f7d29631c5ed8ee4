# tests/test_settings.py
import pytest
from pydantic import ValidationError

from weather_push.core.settings import AppEnv, Settings, get_settings


def test_defaults():
    cfg = Settings()
    assert cfg.weather_city == "Barcelona"
    assert cfg.dispatch_cron == "0 8 * * *"
    assert cfg.dispatch_timezone == "Europe/Madrid"
    assert cfg.is_dev and not cfg.is_prod


def test_cors_origins_from_csv_env(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "http://a.test, http://b.test,")
    assert Settings().cors_allowed_origins == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize(
    "field,value",
    [
        ("dispatch_cron", "0 8 * *"),
        ("dispatch_timezone", "Mars/Olympus_Mons"),
        ("weather_city", "   "),
        ("weather_icon_url", "http://icons.test/img.png"),
        ("port", 0),
        ("push_max_workers", 0),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_production_requires_weather_key(monkeypatch):
    monkeypatch.delenv("WEATHER_API_KEY", raising=False)
    with pytest.raises(ValidationError) as ei:
        Settings(env=AppEnv.production)
    assert "WEATHER_API_KEY" in str(ei.value)

    assert Settings(env=AppEnv.production, weather_api_key="k").is_prod


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
