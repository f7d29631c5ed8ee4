#!/usr/bin/env python3
"""
notifications.py — FastAPI routes for push tokens, test sends and comment events.

Place at: weather_push/routers/notifications.py
Mount via: FastAPI(include_router(notifications.router)).

What this does:
  - GET /notifications/test?token=ExponentPushToken[...]
      Sends today's weather notification to that single token.
      400 {ok: false, data: "No pushToken provided"} when token is missing,
      otherwise 200 {ok: true} once the gateway call returns (success or not).
  - POST /notifications/push/register
      Stores the device token for a user (used by comment notifications).
  - POST /notifications/comments
      Event trigger: a new comment on the user's post → one push to that user.

Common examples:
  curl "http://127.0.0.1:8000/notifications/test?token=ExponentPushToken%5Babcd1234%5D"

  curl -X POST "http://127.0.0.1:8000/notifications/push/register" \
       -H "Content-Type: application/json" \
       -d '{"user_id": "u1", "device_token": "ExponentPushToken[abcd1234]", "platform": "expo"}'
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..core.settings import Settings, get_settings
from ..db import crud
from ..db.session import get_db
from ..errors import StorageError
from ..schemas import CommentEvent, DispatchOut, PushRegisterRequest, PushRegisterResponse
from ..services import dispatcher
from ..services.push import ExpoPushGateway, get_gateway

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/test")
def test_notification(
    token: Optional[str] = None,
    cfg: Settings = Depends(get_settings),
    gateway: ExpoPushGateway = Depends(get_gateway),
):
    """Send the weather notification to one token right now."""
    if not token:
        return JSONResponse(status_code=400, content={"ok": False, "data": "No pushToken provided"})
    dispatcher.send_test_notification(token, settings=cfg, gateway=gateway)
    return {"ok": True}


@router.post("/push/register", response_model=PushRegisterResponse)
def register_push(req: PushRegisterRequest, db: Session = Depends(get_db)) -> PushRegisterResponse:
    """Register (or replace) the push token for a user."""
    try:
        crud.upsert_push_token(db, req.user_id, token=req.device_token, platform=req.platform)
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return PushRegisterResponse(ok=True, token_saved=True)


@router.post("/comments", response_model=DispatchOut)
def new_comment(
    event: CommentEvent,
    db: Session = Depends(get_db),
    gateway: ExpoPushGateway = Depends(get_gateway),
) -> DispatchOut:
    """Notify the post owner about a new comment."""
    res = dispatcher.notify_new_comment(
        db,
        event.user_id,
        author=event.author,
        content=event.content,
        post_id=event.post_id,
        comment_id=event.comment_id,
        gateway=gateway,
    )
    return DispatchOut(**res.as_dict())
