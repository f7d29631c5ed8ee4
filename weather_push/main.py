#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
main.py — FastAPI application for the Weather Push Bridge.

Run:
  uvicorn weather_push.main:app --reload

Startup (lifespan):
  - JSON logging on stdout (LOG_LEVEL)
  - APScheduler daily job when SCHEDULER_ENABLED=true
Shutdown:
  - stop the scheduler, drain the push gateway pool, close the HTTP client
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from shared.http import close_client
from shared.logging import setup_json_logging
from weather_push.core.settings import get_settings
from weather_push.routers import admin, notifications, subscriptions
from weather_push.services.push import get_gateway
from weather_push.tasks.schedule import shutdown_scheduler, start_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg = get_settings()
    setup_json_logging(cfg.log_level.value, service=cfg.app_name)
    if cfg.scheduler_enabled:
        start_scheduler(cfg)
    yield
    shutdown_scheduler()
    get_gateway().shutdown(wait=True)
    get_gateway.cache_clear()
    close_client()


def create_app() -> FastAPI:
    cfg = get_settings()
    app = FastAPI(
        title=cfg.app_name,
        version=cfg.app_version,
        description="Daily weather push notifications for subscribed devices.",
        lifespan=lifespan,
    )

    # CORS (from env: CORS_ALLOWED_ORIGINS="http://127.0.0.1:19006,https://example.com")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allowed_origins or ["*"],  # be strict in prod
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(subscriptions.router)
    app.include_router(notifications.router)
    app.include_router(admin.router)

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url="/docs", status_code=302)

    @app.get("/healthz", tags=["meta"])
    def healthz():
        return {"ok": True, "app": cfg.app_name, "version": cfg.app_version, "env": cfg.env.value}

    @app.get("/ready", tags=["meta"])
    def ready():
        return {"ready": True, "scheduler": cfg.scheduler_enabled, "city": cfg.weather_city}

    return app


app = create_app()
