#!/usr/bin/env python3
"""
models.py — SQLAlchemy ORM models for weather subscriptions and push tokens.

Place at: weather_push/db/models.py
Run from the repo root (folder that contains weather_push/).

What this does:
  - Defines the relational schema using SQLAlchemy declarative mappings:
      • Subscription: daily-weather opt-in per push-token identity
        (logical path subscriptions/{key}, document {active, token})
      • PushToken: latest registered device token per user, consulted by
        event-triggered notifications (e.g., a new comment on a post)
  - Adds an index on Subscription.active for the daily scan.

Why it matters:
  - Subscriptions are never deleted; unsubscribing writes active=False.
  - One row per key; later writes fully replace earlier ones.

Related modules:
  - CRUD:      weather_push/db/crud.py
  - Session:   weather_push/db/session.py

Common examples:
  # Create tables (dev):
  from sqlalchemy import create_engine
  from weather_push.db.models import Base
  engine = create_engine("sqlite:///dev.db")
  Base.metadata.create_all(engine)
"""

from __future__ import annotations
from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Boolean,
    Index,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Subscription(Base):
    __tablename__ = "subscriptions"

    key = Column(String(255), primary_key=True)  # identity inside ExponentPushToken[...]
    token = Column(String(512), nullable=False)
    active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_subscriptions_active", "active"),
    )

    def to_document(self) -> dict:
        return {"active": bool(self.active), "token": self.token}


class PushToken(Base):
    __tablename__ = "push_tokens"

    user_id = Column(String(255), primary_key=True)
    token = Column(String(512), nullable=False)
    platform = Column(String(16), nullable=False, default="expo")  # "expo" | "ios" | "android"
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
