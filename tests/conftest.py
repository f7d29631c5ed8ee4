"""
conftest.py — Shared pytest fixtures.

What this does:
  - Points the app at an in-memory SQLite database and disables the scheduler
    before any weather_push module is imported.
  - Recreates tables around every test.
  - Provides a recording FakeGateway, a fixed WeatherSnapshot, a patched weather
    fetcher and a FastAPI TestClient wired to the fake gateway.

Common examples:
  pytest -q
  pytest -q tests/test_dispatcher.py
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ENV"] = "development"
os.environ["WEATHER_API_KEY"] = "test-key"
os.environ["WEATHER_CITY"] = "Barcelona"
os.environ.pop("EXPO_ACCESS_TOKEN", None)

from concurrent.futures import Future

import pytest
from fastapi.testclient import TestClient

from weather_push.db.models import Base
from weather_push.db.session import SessionLocal, engine
from weather_push.main import app
from weather_push.services.push import get_gateway
from weather_push.services.weather import WeatherResult, WeatherSnapshot

SNAPSHOT = WeatherSnapshot(
    temperature=21,
    min_temperature=18,
    max_temperature=24,
    wind_speed=3.6,
    weather_name="Clouds",
    weather_icon="http://openweathermap.org/img/w/04d.png",
)


class FakeGateway:
    """Records every submitted batch; resolves immediately."""

    def __init__(self, fail: Exception | None = None):
        self.batches = []
        self.fail = fail

    def submit(self, messages):
        batch = list(messages)
        self.batches.append(batch)
        fut = Future()
        if self.fail is not None:
            fut.set_exception(self.fail)
        else:
            fut.set_result([{"status": "ok", "id": f"ticket-{i}"} for i in range(len(batch))])
        return fut

    def shutdown(self, wait=True):
        pass


@pytest.fixture(autouse=True)
def _fresh_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def weather_calls(monkeypatch):
    """Patch the dispatcher's weather fetcher; returns the list of requested cities."""
    calls = []

    def fake_fetch(city, *, settings=None, client=None):
        calls.append(city)
        return WeatherResult.success(SNAPSHOT)

    monkeypatch.setattr("weather_push.services.dispatcher.fetch_weather", fake_fetch)
    return calls


@pytest.fixture
def client(gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
