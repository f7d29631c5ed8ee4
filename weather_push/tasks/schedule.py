#!/usr/bin/env python3
# weather_push/tasks/schedule.py
"""
Background scheduler for the daily weather notification.

Uses APScheduler with a BackgroundScheduler to run the dispatch in-process.
Each run is stateless: it opens a fresh DB session and reloads subscriptions.

Jobs:
  - `daily_weather_job`: DISPATCH_CRON in DISPATCH_TIMEZONE
    (default "0 8 * * *" Europe/Madrid), calls run_daily_dispatch().

Usage:
  from weather_push.tasks.schedule import start_scheduler

  # inside the FastAPI lifespan:
  start_scheduler()

Notes:
  - Scheduler is idempotent: calling start_scheduler() multiple times returns the same instance.
  - The job never raises into APScheduler; failures are logged.
  - Misfired runs are coalesced into one, but a manual /admin/dispatch on the
    same day still sends again (no deduplication).
"""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from shared.logging import context
from weather_push.core.settings import Settings, get_settings
from weather_push.db.session import SessionLocal
from weather_push.services.dispatcher import run_daily_dispatch

logger = logging.getLogger(__name__)

JOB_ID = "daily_weather_job"

_scheduler: BackgroundScheduler | None = None


def _dispatch_job() -> None:
    """Job wrapper: open DB session, run dispatch, close DB."""
    db: Session = SessionLocal()
    try:
        res = run_daily_dispatch(db)
        logger.info("Daily dispatch finished", extra=context(**res.as_dict()))
    except Exception:
        logger.exception("Daily dispatch crashed")
    finally:
        db.close()


def build_trigger(cfg: Settings) -> CronTrigger:
    return CronTrigger.from_crontab(cfg.dispatch_cron, timezone=cfg.dispatch_timezone)


def start_scheduler(settings: Optional[Settings] = None) -> BackgroundScheduler:
    """
    Idempotently start the background scheduler.

    Returns:
        BackgroundScheduler: the singleton scheduler instance.
    """
    global _scheduler
    if _scheduler:
        return _scheduler

    cfg = settings or get_settings()
    _scheduler = BackgroundScheduler(timezone=cfg.dispatch_timezone)
    _scheduler.add_job(
        _dispatch_job,
        build_trigger(cfg),
        id=JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    _scheduler.start()
    logger.info(
        "Scheduler started",
        extra=context(cron=cfg.dispatch_cron, tz=cfg.dispatch_timezone),
    )
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
