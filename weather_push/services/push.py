#!/usr/bin/env python3
"""
push.py — Expo push gateway client.

Place at: weather_push/services/push.py
Used by: weather_push.services.dispatcher

What this does:
  - Serializes PushMessage objects into Expo's wire format
    {"to", "title", "body", "data"} and POSTs them to EXPO_PUSH_URL.
  - Splits batches into chunks of 100 messages (Expo's per-request limit).
  - submit(messages) runs the request on a small thread pool and returns a
    concurrent.futures.Future; callers may wait on it or ignore it.
  - Failures raise from send() (and therefore from Future.result()):
      • network error            → TransportError
      • non-2xx / {"errors": ..} → UpstreamError

Notes:
  - "Accepted for relay" is the strongest guarantee: Expo delivers to devices
    asynchronously, and per-message tickets are returned but not polled.
  - No retries. If a later chunk fails, the error carries `accepted`, the
    number of messages earlier chunks already handed to Expo.

Common examples:
  from weather_push.services.push import PushMessage, get_gateway

  gw = get_gateway()
  fut = gw.submit([PushMessage(to="ExponentPushToken[abc]", title="Hi", body="there")])
  tickets = fut.result()
"""
from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

import httpx

from shared.http import get_client, response_error_message
from weather_push.core.settings import Settings, get_settings
from weather_push.errors import TransportError, UpstreamError

SERVICE = "expo-push"
MAX_BATCH = 100


@dataclass(frozen=True)
class PushMessage:
    to: str
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_expo(self) -> Dict[str, Any]:
        return {"to": self.to, "title": self.title, "body": self.body, "data": self.data}


def chunked(messages: List[PushMessage], size: int = MAX_BATCH) -> List[List[PushMessage]]:
    return [messages[i:i + size] for i in range(0, len(messages), size)]


class ExpoPushGateway:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        # shared client is looked up per call; it is closed and recreated across app lifetimes
        if self._client is not None:
            return self._client
        return get_client(
            timeout=self.settings.http_timeout_seconds,
            user_agent=self.settings.user_agent,
        )

    def _headers(self) -> Dict[str, str]:
        h = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.settings.expo_access_token:
            h["Authorization"] = f"Bearer {self.settings.expo_access_token}"
        return h

    def _send_chunk(self, chunk: List[PushMessage]) -> List[Dict[str, Any]]:
        payload = [m.to_expo() for m in chunk]
        try:
            r = self.client.post(self.settings.expo_push_url, json=payload, headers=self._headers())
        except httpx.TransportError as e:
            raise TransportError(SERVICE, str(e) or type(e).__name__) from e
        if not r.is_success:
            raise UpstreamError(SERVICE, response_error_message(r), status_code=r.status_code)
        try:
            body = r.json()
        except ValueError as e:
            raise UpstreamError(SERVICE, f"Invalid JSON response: {e}", status_code=r.status_code) from e
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            first = errors[0] if isinstance(errors, list) and errors else errors
            msg = first.get("message", str(first)) if isinstance(first, dict) else str(first)
            raise UpstreamError(SERVICE, msg, status_code=r.status_code)
        data = body.get("data", []) if isinstance(body, dict) else []
        return data if isinstance(data, list) else [data]

    def send(self, messages: Iterable[PushMessage]) -> List[Dict[str, Any]]:
        """
        Submit synchronously; returns Expo push tickets.

        On failure the raised error's `accepted` holds how many messages
        earlier chunks already handed to Expo.
        """
        tickets: List[Dict[str, Any]] = []
        accepted = 0
        for chunk in chunked(list(messages)):
            try:
                tickets.extend(self._send_chunk(chunk))
            except (TransportError, UpstreamError) as e:
                e.accepted = accepted
                raise
            accepted += len(chunk)
        return tickets

    def submit(self, messages: Iterable[PushMessage]) -> "Future[List[Dict[str, Any]]]":
        """Submit in the background; the returned Future resolves to the tickets."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.push_max_workers,
                    thread_name_prefix="expo-push",
                )
            return self._executor.submit(self.send, list(messages))

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)


@lru_cache(maxsize=1)
def get_gateway() -> ExpoPushGateway:
    """Process-wide gateway; also used as a FastAPI dependency."""
    return ExpoPushGateway()
