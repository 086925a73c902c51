"""Structured Logging: one JSON object per log line.

Invariants:
    - Every line carries timestamp, level, logger, message and the service name
    - Only allow-listed extras (EXTRA_FIELDS) are emitted; None values are dropped
    - setup_logging replaces its own handler, so repeated calls never duplicate lines
"""

import json
import logging
from datetime import datetime, timezone

from subscription_service import SERVICE_NAME

EXTRA_FIELDS = (
    "subscription_id", "user_id", "service_name", "operation", "error_code",
    "path", "limit", "offset", "period_start", "period_end", "total", "count",
)

_HANDLER_NAME = "subscription_service"


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, record.__dict__[key])
            for key in EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the service's root handler: JSON, or plain text when fmt != "json"."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
