#!/usr/bin/env python3
"""
dispatcher.py — Build and submit weather / comment push notifications.

Place at: weather_push/services/dispatcher.py
Run from: the scheduler job, /notifications and /admin routes, or tests.

Entry points (same message-construction + gateway-submit logic):
  - run_daily_dispatch(db)        scheduled; recipients = all active subscriptions
  - send_test_notification(token) on demand; recipients = one caller token
  - notify_new_comment(db, ...)   event; recipient = the post author's registered token

Scheduled cycle:
  1. Read the stored tokens of active subscriptions.
  2. None active → log and finish (weather API is not called).
  3. Fetch the weather once for WEATHER_CITY.
  4. Fetch failed → log one error and finish; nothing is sent this cycle.
  5. Build one message per recipient, identical title/body/data.
  6. Submit the whole batch to the gateway in one call and wait for the Future.
  7. Gateway failure → log and finish.

Every entry point returns a DispatchResult and never raises for storage,
weather or gateway failures. Runs are not deduplicated: triggering twice
sends twice.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from shared.logging import context
from weather_push.core.settings import Settings, get_settings
from weather_push.db import crud
from weather_push.errors import StorageError
from weather_push.services.push import ExpoPushGateway, PushMessage, get_gateway
from weather_push.services.weather import WeatherResult, WeatherSnapshot, fetch_weather

logger = logging.getLogger(__name__)

WeatherFetcher = Callable[[str], WeatherResult]


@dataclass
class DispatchResult:
    ok: bool
    sent: int = 0
    recipients: int = 0
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_weather_messages(
    tokens: Sequence[str], city: str, snapshot: WeatherSnapshot
) -> List[PushMessage]:
    title = f"{city} is {snapshot.weather_name} today"
    body = f"{snapshot.temperature} ºC"
    data = snapshot.to_payload()
    return [PushMessage(to=t, title=title, body=body, data=data) for t in tokens]


def _submit(gateway: ExpoPushGateway, messages: List[PushMessage], call: str) -> DispatchResult:
    try:
        gateway.submit(messages).result()
    except Exception as e:
        accepted = getattr(e, "accepted", 0)
        logger.error(
            "Error requesting push notifications",
            extra=context(
                call=call,
                batch_size=len(messages),
                accepted=accepted,
                error=f"{type(e).__name__}: {e}",
            ),
        )
        return DispatchResult(ok=False, sent=accepted, recipients=len(messages), error=str(e))
    logger.info("Push notifications requested correctly", extra=context(call=call, batch_size=len(messages)))
    return DispatchResult(ok=True, sent=len(messages), recipients=len(messages))


def send_weather_notifications(
    tokens: Sequence[str],
    *,
    settings: Optional[Settings] = None,
    gateway: Optional[ExpoPushGateway] = None,
    fetch: Optional[WeatherFetcher] = None,
) -> DispatchResult:
    """Fetch the weather once and send one message per token in a single batch."""
    cfg = settings or get_settings()
    city = cfg.weather_city
    fetch = fetch or partial(fetch_weather, settings=cfg)

    weather = fetch(city)
    if not weather.ok or weather.data is None:
        logger.error(
            "Error fetching the weather data",
            extra=context(call="fetch_weather", city=city, batch_size=len(tokens), error=weather.error),
        )
        return DispatchResult(ok=False, recipients=len(tokens), error=weather.error)

    messages = build_weather_messages(tokens, city, weather.data)
    return _submit(gateway or get_gateway(), messages, call="weather_push")


def run_daily_dispatch(
    db: Session,
    *,
    settings: Optional[Settings] = None,
    gateway: Optional[ExpoPushGateway] = None,
    fetch: Optional[WeatherFetcher] = None,
) -> DispatchResult:
    """Scheduled path: notify every active subscription."""
    try:
        tokens = crud.list_active_tokens(db)
    except StorageError as e:
        logger.error("Error reading the subscriptions", extra=context(call="list_active_tokens", error=str(e)))
        return DispatchResult(ok=False, error=str(e))

    if not tokens:
        logger.info("No active subscriptions", extra=context(date=date.today().isoformat()))
        return DispatchResult(ok=True)

    return send_weather_notifications(tokens, settings=settings, gateway=gateway, fetch=fetch)


def send_test_notification(
    token: str,
    *,
    settings: Optional[Settings] = None,
    gateway: Optional[ExpoPushGateway] = None,
    fetch: Optional[WeatherFetcher] = None,
) -> DispatchResult:
    """On-demand path: one caller-supplied token; the result goes back to the caller."""
    if not token:
        raise ValueError("token is required")
    return send_weather_notifications([token], settings=settings, gateway=gateway, fetch=fetch)


def notify_new_comment(
    db: Session,
    user_id: str,
    *,
    author: str,
    content: str,
    post_id: str,
    comment_id: str,
    gateway: Optional[ExpoPushGateway] = None,
) -> DispatchResult:
    """Event path: tell the post author that someone commented."""
    try:
        token = crud.get_push_token(db, user_id)
    except StorageError as e:
        logger.error(
            "Error obtaining push token",
            extra=context(call="get_push_token", user_id=user_id, error=str(e)),
        )
        return DispatchResult(ok=False, error=str(e))

    if not token:
        logger.warning("No push token registered", extra=context(user_id=user_id))
        return DispatchResult(ok=False, error="No push token registered")

    message = PushMessage(
        to=token,
        title=f"{author} commented on your post",
        body=content,
        data={"postId": post_id, "commentId": comment_id},
    )
    return _submit(gateway or get_gateway(), [message], call=f"comment_push:{comment_id}")
