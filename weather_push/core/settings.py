#!/usr/bin/env python3
"""
settings.py — Centralized, typed settings for the Weather Push Bridge.

Place at: weather_push/core/settings.py
Run from the repo root (folder that contains weather_push/).

What this does:
  - Loads configuration from environment variables and an optional .env file.
  - Provides strong typing + validation using Pydantic v2 (pydantic-settings).
  - Exposes a cached accessor get_settings() for easy DI (e.g., with FastAPI).

Highlights:
  - Environment-aware (development/staging/production)
  - Weather provider (OpenWeatherMap) endpoint, key, icon template and city
  - Expo push gateway endpoint + optional access token
  - Daily dispatch schedule (cron expression + timezone)

Common examples:

  # 1) Import in FastAPI and inject once per request:
  from fastapi import Depends, FastAPI
  from weather_push.core.settings import Settings, get_settings

  app = FastAPI()

  @app.get("/health")
  def health(cfg: Settings = Depends(get_settings)):
      return {"ok": True, "env": cfg.env, "city": cfg.weather_city}

  # 2) Override via env vars or .env file:
  export ENV=staging LOG_LEVEL=DEBUG WEATHER_API_KEY=... DISPATCH_CRON="30 7 * * *"

Notes:
  - The .env file is loaded automatically if present (utf-8).
  - In production WEATHER_API_KEY must be set or validation will fail.
  - Tests call get_settings.cache_clear() after patching the environment.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# ---------- Enums ----------

class AppEnv(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ---------- Settings ----------

class Settings(BaseSettings):
    # App
    app_name: str = Field("Weather Push Bridge", alias="APP_NAME")
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    env: AppEnv = Field(AppEnv.development, alias="ENV")
    debug: bool = Field(False, alias="DEBUG")
    log_level: LogLevel = Field(LogLevel.INFO, alias="LOG_LEVEL")
    port: int = Field(8000, alias="PORT")

    # CORS
    cors_allowed_origins: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="CORS_ALLOWED_ORIGINS")

    # Database
    database_url: str = Field("sqlite:///./weather_push.db", alias="DATABASE_URL")
    db_auto_create: bool = Field(True, alias="DB_AUTO_CREATE")

    # Weather provider
    weather_api_url: str = Field(
        "https://api.openweathermap.org/data/2.5/weather", alias="WEATHER_API_URL"
    )
    weather_api_key: Optional[str] = Field(None, alias="WEATHER_API_KEY", validate_default=True)
    weather_icon_url: str = Field(
        "http://openweathermap.org/img/w/{icon}.png", alias="WEATHER_ICON_URL"
    )
    weather_city: str = Field("Barcelona", alias="WEATHER_CITY")

    # Push gateway
    expo_push_url: str = Field("https://exp.host/--/api/v2/push/send", alias="EXPO_PUSH_URL")
    expo_access_token: Optional[str] = Field(None, alias="EXPO_ACCESS_TOKEN")
    push_max_workers: int = Field(2, alias="PUSH_MAX_WORKERS")

    # Outbound HTTP
    http_timeout_seconds: int = Field(15, alias="HTTP_TIMEOUT_SECONDS")
    user_agent: str = Field("weather-push-bridge/0.1", alias="USER_AGENT")

    # Scheduler
    scheduler_enabled: bool = Field(True, alias="SCHEDULER_ENABLED")
    dispatch_cron: str = Field("0 8 * * *", alias="DISPATCH_CRON")
    dispatch_timezone: str = Field("Europe/Madrid", alias="DISPATCH_TIMEZONE")

    # Pydantic Settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ---------- Validators ----------

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def _split_csv(cls, v: str | List[str] | None) -> List[str]:
        if v is None:
            return []
        if isinstance(v, list):
            return [s.strip() for s in v if s and str(s).strip()]
        # comma-separated string
        return [s.strip() for s in str(v).split(",") if s.strip()]

    @field_validator("port")
    @classmethod
    def _port_range(cls, v: int) -> int:
        if not (1 <= v <= 65535):
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("http_timeout_seconds", "push_max_workers")
    @classmethod
    def _positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name.upper()} must be > 0")
        return v

    @field_validator("weather_city")
    @classmethod
    def _city_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("WEATHER_CITY must not be empty")
        return v

    @field_validator("weather_icon_url")
    @classmethod
    def _icon_template(cls, v: str) -> str:
        if "{icon}" not in v:
            raise ValueError("WEATHER_ICON_URL must contain an {icon} placeholder")
        return v

    @field_validator("dispatch_cron")
    @classmethod
    def _cron_fields(cls, v: str) -> str:
        if len(v.split()) != 5:
            raise ValueError("DISPATCH_CRON must be a five-field cron expression")
        return v

    @field_validator("dispatch_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"DISPATCH_TIMEZONE is not a known timezone: {v}")
        return v

    @field_validator("weather_api_key")
    @classmethod
    def _key_required_in_prod(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("env") == AppEnv.production and not v:
            raise ValueError("WEATHER_API_KEY is required when ENV=production")
        return v

    @property
    def is_prod(self) -> bool:
        return self.env == AppEnv.production

    @property
    def is_dev(self) -> bool:
        return self.env == AppEnv.development


# ---------- Accessor (cached) ----------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached settings instance. Use as a FastAPI dependency:

        from fastapi import Depends, FastAPI
        from weather_push.core.settings import get_settings

        app = FastAPI()

        @app.get("/health")
        def health(cfg: Settings = Depends(get_settings)):
            return {"env": cfg.env, "ok": True}
    """
    return Settings()
