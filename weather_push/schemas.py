# weather_push/schemas.py
"""
Pydantic schemas for API input/output.

Covers:
  - Subscriptions (write, status, active listing)
  - Push token registration
  - Comment events
  - Dispatch results

Notes:
  - `SubscriptionOut` uses `from_attributes = True` for ORM → Pydantic conversion.
"""

from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

# ----------------------------
# Subscriptions
# ----------------------------

class SubscriptionWrite(BaseModel):
    token: str = Field(..., min_length=3, examples=["ExponentPushToken[abcd1234]"])
    active: bool


class SubscriptionStatus(BaseModel):
    key: str
    active: bool


class SubscriptionWriteResult(SubscriptionStatus):
    ok: bool = True


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    token: str
    active: bool
    created_at: datetime
    updated_at: datetime


class ActiveSubscriptions(BaseModel):
    count: int
    keys: List[str]


# ----------------------------
# Push tokens / events
# ----------------------------

class PushRegisterRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    device_token: str = Field(..., min_length=10)
    platform: str = Field("expo", pattern="^(expo|ios|android)$")


class PushRegisterResponse(BaseModel):
    ok: bool
    token_saved: bool


class CommentEvent(BaseModel):
    user_id: str = Field(..., min_length=1)  # owner of the post
    post_id: str = Field(..., min_length=1)
    comment_id: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    content: str


# ----------------------------
# Dispatch
# ----------------------------

class DispatchOut(BaseModel):
    ok: bool
    sent: int = 0
    recipients: int = 0
    error: Optional[str] = None
