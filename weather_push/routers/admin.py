#!/usr/bin/env python3
"""
admin.py — FastAPI admin routes for running the dispatch and checking collaborators.

Place at: weather_push/routers/admin.py
Mount via: FastAPI(include_router(admin.router)).

What this does:
  - POST /admin/dispatch
      Run the scheduled daily dispatch now (same code path as the cron job).
      Note: runs are not deduplicated; calling twice sends twice.
  - GET /admin/weather?city=...
      Fetch current weather once (defaults to WEATHER_CITY); upstream errors → 502,
      unreachable provider → 504.
  - GET /admin/subscriptions?active=true|false
      List stored subscriptions.

Security:
  - These routes are under /admin; protect them with API key or auth middleware.

Common examples:
  curl -X POST "http://127.0.0.1:8000/admin/dispatch"
  curl "http://127.0.0.1:8000/admin/weather?city=Madrid"
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from weather_push.core.settings import Settings, get_settings
from weather_push.db import crud
from weather_push.db.session import get_db
from weather_push.errors import StorageError, TransportError, UpstreamError
from weather_push.schemas import DispatchOut, SubscriptionOut
from weather_push.services.dispatcher import run_daily_dispatch
from weather_push.services.push import ExpoPushGateway, get_gateway
from weather_push.services.weather import fetch_weather_or_raise

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/dispatch", response_model=DispatchOut)
def dispatch_now(
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
    gateway: ExpoPushGateway = Depends(get_gateway),
):
    """Run one daily-dispatch cycle."""
    return DispatchOut(**run_daily_dispatch(db, settings=cfg, gateway=gateway).as_dict())


@router.get("/weather")
def weather(city: Optional[str] = None, cfg: Settings = Depends(get_settings)):
    """Current weather snapshot as sent in push data."""
    try:
        snap = fetch_weather_or_raise(city or cfg.weather_city, settings=cfg)
    except TransportError as e:
        raise HTTPException(status_code=504, detail=e.message)
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "city": city or cfg.weather_city, "data": snap.to_payload()}


@router.get("/subscriptions", response_model=list[SubscriptionOut])
def subscriptions(active: bool | None = None, db: Session = Depends(get_db)):
    """List subscriptions, optionally filtered by active flag."""
    try:
        return crud.list_subscriptions(db, active=active)
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
