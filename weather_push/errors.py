"""Error types shared by the store, the weather provider and the push gateway."""
from __future__ import annotations

from typing import Optional


class WeatherPushError(Exception):
    """Base error."""
    pass


class TransportError(WeatherPushError):
    """An external service could not be reached (network, DNS, timeout)."""
    def __init__(self, service: str, message: str):
        self.service = service
        self.message = message
        # messages the service accepted before the failure (chunked sends)
        self.accepted = 0
        super().__init__(f"{service}: {message}")


class UpstreamError(WeatherPushError):
    """An external service was reached but answered with a failure."""
    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.message = message
        self.status_code = status_code
        self.accepted = 0
        super().__init__(f"{service}: {message}")


class StorageError(WeatherPushError):
    """Reading or writing the subscription store failed."""
    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")


class MalformedIdentityError(WeatherPushError, ValueError):
    """Push-token string lacks the bracket-delimited identity segment."""
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Malformed push token: {token!r}")
