"""
Logging setup shared by the dashboard and scripts.

Engine modules only ever call logging.getLogger(__name__); handlers are
installed once here by whatever process hosts the engine.
"""

import json
import logging
from datetime import datetime, timezone

# Extra fields surfaced in JSON output when a log call passes them
EXTRA_FIELDS = ("report", "granularity", "seller_id", "product_id", "rows")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            value = record.__dict__.get(key)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", fmt: str = "text") -> logging.Logger:
    """Install a stream handler on the root logger. Safe to call repeatedly."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if any(getattr(h, "_commerce_analytics", False) for h in root.handlers):
        return root

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    handler._commerce_analytics = True
    root.addHandler(handler)
    return root
