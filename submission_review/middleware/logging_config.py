"""
Structured logging configuration.

- Production: one JSON object per line
- Development: coloured single-line output with the workflow context appended
- LOG_LEVEL overrides the level, LOG_FORMAT ("json" | "readable") the format

Services attach context with ``extra={"submission_id": ..., "user_id": ...,
"event_type": ...}``; both formatters pick those keys up.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Request context written by middleware.timing
_REQUEST_FIELDS = ("method", "path", "status", "duration_ms", "remote_addr", "request_id")
# Workflow context written by the services
_WORKFLOW_FIELDS = ("user_id", "role", "submission_id", "event_type")


def _context(record: logging.LogRecord, fields) -> dict:
    return {
        key: getattr(record, key)
        for key in fields
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production / log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_context(record, _REQUEST_FIELDS))
        entry.update(_context(record, _WORKFLOW_FIELDS))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Coloured formatter for a developer terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tail = " ".join(f"{k}={v}" for k, v in _context(record, _WORKFLOW_FIELDS).items())
        line = f"{color}{ts} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"
        if tail:
            line += f"  [{tail}]"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _use_json(app) -> bool:
    forced = os.getenv("LOG_FORMAT", "").strip().lower()
    if forced in ("json", "readable"):
        return forced == "json"
    return not app.config.get("DEBUG", False) and not app.config.get("TESTING", False)


def configure_logging(app):
    """
    Install a single stderr handler on the root logger.

    The default level is DEBUG in development and INFO otherwise.  Existing
    root handlers are replaced, so building the app twice (as the test suite
    does) never duplicates output.
    """
    as_json = _use_json(app)
    level_name = os.getenv("LOG_LEVEL", "INFO" if as_json else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if as_json else ReadableFormatter())
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("urllib3", "werkzeug", "sqlalchemy.engine", "flask_limiter"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.config.get("TESTING", False):
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if as_json else "readable")
