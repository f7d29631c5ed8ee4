"""
test_routes.py — HTTP API smoke and contract tests.

Place at: tests/test_routes.py
Run from the repo root (folder that contains weather_push/).

What this does:
  - Exercises /subscriptions, /notifications and /admin through the TestClient
    fixture (in-memory SQLite, fake push gateway, patched weather fetch).

Common examples:
  pytest -q tests/test_routes.py
  pytest -k notifications -q
"""
from weather_push.errors import UpstreamError
from weather_push.routers import admin as admin_routes

TOKEN = "ExponentPushToken[abcd1234]"


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_openapi_lists_routes(client):
    paths = client.get("/openapi.json").json()["paths"]
    for p in ["/subscriptions", "/subscriptions/active", "/notifications/test", "/admin/dispatch"]:
        assert p in paths


def test_never_subscribed_reads_false(client):
    r = client.get("/subscriptions", params={"token": TOKEN})
    assert r.status_code == 200
    assert r.json() == {"key": "abcd1234", "active": False}


def test_subscribe_then_read(client):
    r = client.put("/subscriptions", json={"token": TOKEN, "active": True})
    assert r.status_code == 200
    assert r.json() == {"ok": True, "key": "abcd1234", "active": True}
    assert client.get("/subscriptions", params={"token": TOKEN}).json()["active"] is True

    client.put("/subscriptions", json={"token": TOKEN, "active": False})
    assert client.get("/subscriptions", params={"token": TOKEN}).json()["active"] is False


def test_malformed_token_is_422(client):
    r = client.put("/subscriptions", json={"token": "not-a-token", "active": True})
    assert r.status_code == 422
    assert "Malformed" in r.json()["detail"]


def test_active_listing(client):
    for key, active in (("A", True), ("B", False), ("C", True)):
        client.put("/subscriptions", json={"token": f"ExponentPushToken[{key}]", "active": active})
    assert client.get("/subscriptions/active").json() == {"count": 2, "keys": ["A", "C"]}


def test_test_endpoint_requires_token(client, gateway):
    r = client.get("/notifications/test")
    assert r.status_code == 400
    assert r.json() == {"ok": False, "data": "No pushToken provided"}
    assert gateway.batches == []


def test_test_endpoint_sends_one(client, gateway, weather_calls):
    r = client.get("/notifications/test", params={"token": TOKEN})
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert [m.to for m in gateway.batches[0]] == [TOKEN]


def test_register_and_comment_event(client, gateway):
    r = client.post(
        "/notifications/push/register",
        json={"user_id": "u1", "device_token": TOKEN, "platform": "expo"},
    )
    assert r.json() == {"ok": True, "token_saved": True}

    r = client.post(
        "/notifications/comments",
        json={"user_id": "u1", "post_id": "p1", "comment_id": "c1", "author": "Ana", "content": "hi"},
    )
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert gateway.batches[0][0].title == "Ana commented on your post"


def test_admin_dispatch(client, gateway, weather_calls):
    client.put("/subscriptions", json={"token": TOKEN, "active": True})
    r = client.post("/admin/dispatch")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "sent": 1, "recipients": 1, "error": None}
    assert len(gateway.batches) == 1


def test_admin_dispatch_without_subscribers(client, gateway, weather_calls):
    r = client.post("/admin/dispatch")
    assert r.json()["sent"] == 0
    assert weather_calls == []


def test_admin_weather_upstream_error(client, monkeypatch):
    def fail(city, *, settings=None, client=None):
        raise UpstreamError("weather", "Invalid API key", 401)

    monkeypatch.setattr(admin_routes, "fetch_weather_or_raise", fail)
    r = client.get("/admin/weather")
    assert r.status_code == 502
    assert r.json()["detail"] == "Invalid API key"


def test_admin_subscriptions_listing(client):
    client.put("/subscriptions", json={"token": TOKEN, "active": True})
    rows = client.get("/admin/subscriptions", params={"active": "true"}).json()
    assert [r["key"] for r in rows] == ["abcd1234"]
    assert rows[0]["token"] == TOKEN
