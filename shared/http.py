# shared/http.py
from __future__ import annotations
import json
from typing import Optional
import httpx

DEFAULT_USER_AGENT = "weather-push-bridge/0.1"

_client: Optional[httpx.Client] = None

def get_client(timeout: float = 15.0, user_agent: str = DEFAULT_USER_AGENT) -> httpx.Client:
    """Process-wide client for outbound calls (weather API, push gateway)."""
    global _client
    if _client is None:
        _client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )
    return _client

def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None

def response_error_message(response: httpx.Response) -> str:
    """
    Best-effort error text for a failed response: the body's `message` field,
    else the serialized JSON body, else the raw text.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return json.dumps(body)
