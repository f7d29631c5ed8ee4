#!/usr/bin/env python3
"""
client.py — Device-side subscription controller for the Weather Push Bridge API.

Place at: weather_push/client.py
Used by: mobile/desktop front-ends (via a Python bridge), tools/send_test.py, tests.

What this does:
  - SubscriptionClient
      • set_subscription_active(token, active)  → PUT /subscriptions
      • read_subscription_active(token)         → GET /subscriptions (absent = False)
      • test_subscription(token)                → GET /notifications/test
    Every call returns a ControllerResult whose `error` is a displayable string;
    nothing is retried automatically.
  - Only one request per identity may be in flight. A second call for the same
    identity while one is outstanding returns an error result immediately,
    so the UI can keep its toggle disabled until the first one finishes.
  - NotificationInbox
      Queues notifications received before a UI handler attaches and delivers
      them once, oldest first, when attach() is called.

Common examples:
  from weather_push.client import SubscriptionClient

  c = SubscriptionClient("http://127.0.0.1:8000")
  res = c.set_subscription_active("ExponentPushToken[abcd1234]", True)
  if not res.ok:
      show_error(res.error)
"""
from __future__ import annotations

import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Deque, Iterator, Optional, Set

import certifi
import requests

from weather_push.errors import MalformedIdentityError
from weather_push.identity import get_subscription_key

SOMETHING_WENT_WRONG = "Something went wrong 🤔"

DEFAULT_HEADERS = {
    "User-Agent": "weather-push-client/0.1",
    "Accept": "application/json",
}


def make_session(headers: Optional[dict] = None) -> requests.Session:
    """Return a preconfigured requests.Session (no automatic retries)."""
    s = requests.Session()
    h = DEFAULT_HEADERS.copy()
    if headers:
        h.update(headers)
    s.headers.update(h)
    # Use certifi CA bundle
    s.verify = certifi.where()
    return s


@dataclass
class ControllerResult:
    ok: bool
    active: Optional[bool] = None
    error: Optional[str] = None


class RequestInFlight(Exception):
    def __init__(self, key: str):
        self.key = key
        super().__init__("A request for this subscription is already in progress")


def _error_text(r: requests.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message") or body.get("data")
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return r.text or f"HTTP {r.status_code}"


class SubscriptionClient:
    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: tuple[float, float] = (10, 30),
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or make_session()
        self.timeout = timeout
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    @contextmanager
    def _exclusive(self, key: str) -> Iterator[None]:
        with self._lock:
            if key in self._in_flight:
                raise RequestInFlight(key)
            self._in_flight.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(key)

    def is_busy(self, token: str) -> bool:
        """True while a request for this token's identity is outstanding."""
        try:
            key = get_subscription_key(token)
        except MalformedIdentityError:
            return False
        with self._lock:
            return key in self._in_flight

    def _run(self, token: str, call: Callable[[], ControllerResult]) -> ControllerResult:
        try:
            key = get_subscription_key(token)
            with self._exclusive(key):
                return call()
        except (MalformedIdentityError, RequestInFlight) as e:
            return ControllerResult(ok=False, error=str(e))
        except requests.RequestException as e:
            return ControllerResult(ok=False, error=str(e) or type(e).__name__)

    def set_subscription_active(self, token: str, active: bool) -> ControllerResult:
        def call() -> ControllerResult:
            r = self.session.put(
                f"{self.base_url}/subscriptions",
                json={"token": token, "active": active},
                timeout=self.timeout,
            )
            if not r.ok:
                return ControllerResult(ok=False, error=_error_text(r))
            return ControllerResult(ok=True, active=bool(r.json().get("active")))

        return self._run(token, call)

    def read_subscription_active(self, token: str) -> ControllerResult:
        def call() -> ControllerResult:
            r = self.session.get(
                f"{self.base_url}/subscriptions",
                params={"token": token},
                timeout=self.timeout,
            )
            if not r.ok:
                return ControllerResult(ok=False, active=False, error=_error_text(r))
            return ControllerResult(ok=True, active=bool(r.json().get("active")))

        return self._run(token, call)

    def test_subscription(self, token: str) -> ControllerResult:
        def call() -> ControllerResult:
            r = self.session.get(
                f"{self.base_url}/notifications/test",
                params={"token": token},
                timeout=self.timeout,
            )
            if not r.ok:
                return ControllerResult(ok=False, error=SOMETHING_WENT_WRONG)
            return ControllerResult(ok=True)

        return self._run(token, call)


class NotificationInbox:
    """
    Deferred-delivery inbox owned by the UI lifecycle.

    receive() before attach() queues; attach() drains the queue exactly once in
    arrival order; after that, notifications go straight to the handler.
    """

    def __init__(self) -> None:
        self._pending: Deque[Any] = deque()
        self._handler: Optional[Callable[[Any], None]] = None
        self._lock = threading.RLock()

    def receive(self, notification: Any) -> None:
        with self._lock:
            if self._handler is None:
                self._pending.append(notification)
                return
            self._handler(notification)

    def attach(self, handler: Callable[[Any], None]) -> None:
        with self._lock:
            self._handler = handler
            while self._pending:
                handler(self._pending.popleft())

    def detach(self) -> None:
        with self._lock:
            self._handler = None

    @property
    def pending(self) -> int:
        return len(self._pending)
