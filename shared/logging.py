# shared/logging.py
"""
JSON log lines for the API process, the scheduler thread and the push workers.

Context travels as logger.info("...", extra=context(call="fetch_weather", city=...))
and is merged into the top level of the emitted object.
"""
import logging, json, sys
from typing import Any, Dict, Mapping, Optional, Union

class JSONFormatter(logging.Formatter):
    def __init__(self, service: Optional[str] = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        if self.service:
            payload["service"] = self.service
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        ctx = getattr(record, "extra", None)
        if isinstance(ctx, Mapping):
            payload.update(ctx)
        return json.dumps(payload, ensure_ascii=False, default=str)


def context(**fields: Any) -> Dict[str, Any]:
    """Wrap fields for the `extra=` argument of a logging call."""
    return {"extra": fields}


def setup_json_logging(level: Union[int, str] = logging.INFO, service: Optional[str] = None):
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service=service))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    # request lines from the weather and push clients
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("apscheduler").setLevel(max(level, logging.INFO))
