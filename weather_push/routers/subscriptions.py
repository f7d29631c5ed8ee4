#!/usr/bin/env python3
"""
subscriptions.py — FastAPI routes for the daily-weather subscription record.

Place at: weather_push/routers/subscriptions.py
Mount via: FastAPI(include_router(subscriptions.router)).

What this does:
  - PUT /subscriptions
      Body {token, active}. Full replace of subscriptions/{key} where key is the
      identity inside the push token. Unsubscribing writes active=false.
  - GET /subscriptions?token=...
      Current flag for a token; never-subscribed tokens report active=false.
  - GET /subscriptions/active
      Keys of all active subscriptions (what the daily job will notify).

Errors:
  - Malformed push token (no [identity] segment) → 422
  - Storage failure                              → 503

Common examples:
  curl -X PUT "http://127.0.0.1:8000/subscriptions" \
       -H "Content-Type: application/json" \
       -d '{"token": "ExponentPushToken[abcd1234]", "active": true}'

  curl "http://127.0.0.1:8000/subscriptions?token=ExponentPushToken%5Babcd1234%5D"
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shared.logging import context

from ..db import crud
from ..db.session import get_db
from ..errors import MalformedIdentityError, StorageError
from ..identity import get_subscription_key, subscription_path
from ..schemas import ActiveSubscriptions, SubscriptionStatus, SubscriptionWrite, SubscriptionWriteResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


def _key_or_422(token: str) -> str:
    try:
        return get_subscription_key(token)
    except MalformedIdentityError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.put("", response_model=SubscriptionWriteResult)
def set_subscription(payload: SubscriptionWrite, db: Session = Depends(get_db)):
    """Create or fully replace the subscription for this token."""
    key = _key_or_422(payload.token)
    try:
        sub = crud.upsert_subscription(db, key, token=payload.token, active=payload.active)
    except StorageError as e:
        logger.error("Error writing subscription", extra=context(path=subscription_path(payload.token), error=str(e)))
        raise HTTPException(status_code=503, detail=str(e))
    return SubscriptionWriteResult(ok=True, key=sub.key, active=sub.active)


@router.get("", response_model=SubscriptionStatus)
def get_subscription(token: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Read the active flag for a token (absent → false)."""
    key = _key_or_422(token)
    try:
        sub = crud.get_subscription(db, key)
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return SubscriptionStatus(key=key, active=bool(sub and sub.active))


@router.get("/active", response_model=ActiveSubscriptions)
def active_subscriptions(db: Session = Depends(get_db)):
    """List keys whose active flag is true."""
    try:
        keys = sorted(crud.scan_active(db))
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return ActiveSubscriptions(count=len(keys), keys=keys)
