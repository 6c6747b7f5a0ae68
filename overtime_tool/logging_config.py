"""Structured logging configuration for the overtime tool."""
import json
import logging
import sys
from datetime import datetime, timezone

# Packages whose loggers follow the configured level; everything else stays at WARNING.
APP_LOGGERS = ("overtime_tool", "api")


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""
    def format(self, record):
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        worker_id = getattr(record, "worker_id", None)
        if worker_id is not None:
            payload["worker_id"] = worker_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str = "INFO", json_output: bool = False, stream=None):
    """Install a single handler on the root logger and set the app log level."""
    handler = logging.StreamHandler(stream or sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)

    app_level = getattr(logging, level.upper(), logging.INFO)
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(app_level)
