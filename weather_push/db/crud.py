#!/usr/bin/env python3
"""
crud.py — Subscription store and push-token registry helpers.

Place at: weather_push/db/crud.py
Run from the repo root (folder that contains weather_push/).

What this does:
  - Provides thin, typed helper functions around SQLAlchemy ORM for:
      • Subscriptions: point read, upsert (full replace), active scan
      • Push tokens: register per user, look up per user
  - Commits inside write ops so a write is durable before the caller returns.
  - Converts any SQLAlchemyError into StorageError (after rollback); no retries.

Prereqs:
  - SQLAlchemy models defined in weather_push/db/models.py.
  - A configured Session injected by the caller (e.g., FastAPI dependency).

Common examples:

  from weather_push.db.session import SessionLocal
  from weather_push.db import crud

  with SessionLocal() as db:
      crud.upsert_subscription(db, "abcd1234", token="ExponentPushToken[abcd1234]", active=True)
      crud.get_subscription(db, "abcd1234")      # -> Subscription | None
      crud.scan_active(db)                       # -> ["abcd1234"]
      crud.list_active_tokens(db)                # -> ["ExponentPushToken[abcd1234]"]
"""

from __future__ import annotations
from datetime import datetime
from functools import wraps
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageError
from .models import PushToken, Subscription


def _storage_op(name: str):
    """Wrap a store operation: rollback and raise StorageError on DB failure."""
    def deco(fn):
        @wraps(fn)
        def wrapper(db: Session, *args, **kwargs):
            try:
                return fn(db, *args, **kwargs)
            except SQLAlchemyError as e:
                db.rollback()
                raise StorageError(name, f"{type(e).__name__}: {e}") from e
        return wrapper
    return deco


# --- Subscriptions ---
@_storage_op("get_subscription")
def get_subscription(db: Session, key: str) -> Optional[Subscription]:
    return db.get(Subscription, key)

@_storage_op("upsert_subscription")
def upsert_subscription(db: Session, key: str, *, token: str, active: bool) -> Subscription:
    sub = db.get(Subscription, key)
    if sub:
        sub.token = token
        sub.active = active
        sub.updated_at = datetime.utcnow()
    else:
        sub = Subscription(key=key, token=token, active=active)
    db.add(sub); db.commit(); db.refresh(sub)
    return sub

@_storage_op("scan_active")
def scan_active(db: Session) -> List[str]:
    stmt = select(Subscription.key).where(Subscription.active == True)  # noqa: E712
    return list(db.execute(stmt).scalars().all())

@_storage_op("list_active_tokens")
def list_active_tokens(db: Session) -> List[str]:
    stmt = select(Subscription.token).where(Subscription.active == True)  # noqa: E712
    return list(db.execute(stmt).scalars().all())

@_storage_op("list_subscriptions")
def list_subscriptions(db: Session, *, active: Optional[bool] = None) -> List[Subscription]:
    stmt = select(Subscription)
    if active is not None:
        stmt = stmt.where(Subscription.active == active)
    stmt = stmt.order_by(Subscription.key.asc())
    return list(db.execute(stmt).scalars().all())

# --- Push tokens ---
@_storage_op("upsert_push_token")
def upsert_push_token(db: Session, user_id: str, *, token: str, platform: str = "expo") -> PushToken:
    row = db.get(PushToken, user_id)
    if row:
        row.token = token
        row.platform = platform
        row.updated_at = datetime.utcnow()
    else:
        row = PushToken(user_id=user_id, token=token, platform=platform)
    db.add(row); db.commit(); db.refresh(row)
    return row

@_storage_op("get_push_token")
def get_push_token(db: Session, user_id: str) -> Optional[str]:
    row = db.get(PushToken, user_id)
    return row.token if row else None
