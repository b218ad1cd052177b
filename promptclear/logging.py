"""
Structured Logging — JSON Output for Production

Configures Python logging to emit structured JSON logs.
Each log entry includes timestamp, level, module, and
any additional context fields.

Usage:
    from promptclear.logging import get_logger
    logger = get_logger("engine")
    logger.info("Analysis complete", extra={"score": 72, "source": "ml"})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


LOG_LEVEL = os.getenv("PROMPTCLEAR_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("PROMPTCLEAR_LOG_FORMAT", "json")  # "json" or "text"

# Extra fields copied from LogRecord into the JSON entry
_EXTRA_FIELDS = (
    "score", "source", "confidence", "ml_score", "ml_confidence",
    "rules_score", "judge_score", "mode", "duration_ms", "samples",
    "vocabulary_size", "final_loss", "trained_at", "rejected",
    "error", "error_type", "path",
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging():
    """Configure root logger. Call once at startup."""
    root = logging.getLogger("promptclear")
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if LOG_FORMAT == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root.addHandler(handler)

    # google-genai transport is chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the promptclear namespace."""
    return logging.getLogger(f"promptclear.{name}")
