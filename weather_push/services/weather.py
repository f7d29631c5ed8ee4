#!/usr/bin/env python3
"""
weather.py — Current-weather lookup for a city (OpenWeatherMap).

Place at: weather_push/services/weather.py
Used by: the dispatcher (scheduled, test and admin runs).

What this does:
  - Issues exactly one GET per call to the geocoded-by-name current-weather
    endpoint with q=<city>, units=metric and appid=<WEATHER_API_KEY>.
  - Maps the raw payload into an immutable WeatherSnapshot; the icon code is
    expanded into an absolute image URL via WEATHER_ICON_URL.
  - Normalizes every outcome into a WeatherResult (ok + data | error):
      • HTTP failure    → upstream `message` field, else the serialized body
      • transport error → the exception message
  - No retries and no caching: each dispatch cycle gets fresh data.

Common examples:
  from weather_push.services.weather import fetch_weather

  res = fetch_weather("Barcelona")
  if res.ok:
      print(res.data.weather_name, res.data.temperature)
  else:
      print("weather failed:", res.error)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from shared.http import get_client, response_error_message
from weather_push.core.settings import Settings, get_settings
from weather_push.errors import TransportError, UpstreamError

SERVICE = "weather"


@dataclass(frozen=True)
class WeatherSnapshot:
    temperature: float
    min_temperature: float
    max_temperature: float
    wind_speed: float
    weather_name: str
    weather_icon: str

    def to_payload(self) -> Dict[str, Any]:
        """camelCase keys, as rendered by the mobile client."""
        return {
            "maxTemperature": self.max_temperature,
            "minTemperature": self.min_temperature,
            "temperature": self.temperature,
            "weatherIcon": self.weather_icon,
            "weatherName": self.weather_name,
            "windSpeed": self.wind_speed,
        }


@dataclass(frozen=True)
class WeatherResult:
    ok: bool
    data: Optional[WeatherSnapshot] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, snapshot: WeatherSnapshot) -> "WeatherResult":
        return cls(ok=True, data=snapshot)

    @classmethod
    def failure(cls, error: str) -> "WeatherResult":
        return cls(ok=False, error=error)

    def as_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "data": self.data.to_payload() if self.data else None, "error": self.error}


def parse_snapshot(body: Dict[str, Any], icon_url: str) -> WeatherSnapshot:
    main = body["main"]
    condition = body["weather"][0]
    return WeatherSnapshot(
        temperature=main["temp"],
        min_temperature=main["temp_min"],
        max_temperature=main["temp_max"],
        wind_speed=body["wind"]["speed"],
        weather_name=condition["main"],
        weather_icon=icon_url.format(icon=condition["icon"]),
    )


def fetch_weather_or_raise(
    city: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> WeatherSnapshot:
    """
    Fetch current conditions for `city`; one attempt.

    Raises:
        TransportError: the weather API could not be reached.
        UpstreamError: non-2xx answer, or a 2xx body without the expected fields.
    """
    if not city or not city.strip():
        raise ValueError("city must be a non-empty string")
    cfg = settings or get_settings()
    http = client or get_client(timeout=cfg.http_timeout_seconds, user_agent=cfg.user_agent)

    params = {"q": city, "units": "metric", "appid": cfg.weather_api_key or ""}
    try:
        r = http.get(cfg.weather_api_url, params=params)
    except httpx.TransportError as e:
        raise TransportError(SERVICE, str(e) or type(e).__name__) from e

    if not r.is_success:
        raise UpstreamError(SERVICE, response_error_message(r), status_code=r.status_code)

    try:
        return parse_snapshot(r.json(), cfg.weather_icon_url)
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise UpstreamError(
            SERVICE,
            f"Unexpected weather payload: {type(e).__name__}: {e}",
            status_code=r.status_code,
        ) from e


def fetch_weather(
    city: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> WeatherResult:
    """Tagged-result variant of fetch_weather_or_raise(); never raises for network or upstream failures."""
    try:
        return WeatherResult.success(fetch_weather_or_raise(city, settings=settings, client=client))
    except (TransportError, UpstreamError) as e:
        return WeatherResult.failure(e.message)
