"""JSONL logging for the versioning engine.

Every log record becomes one JSON object per line. Structured context passed
as ``extra={"extra_fields": {...}}`` is merged into the top level of the
entry, and engine failures contribute their error code.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Optional

from versionable.errors import VersioningError

# Attributes every LogRecord carries; anything else was attached by the caller
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "stack_info"}


class JsonFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def __init__(self, static_fields: Optional[dict[str, Any]] = None, **kwargs):
        """Initializes the formatter.

        Args:
            static_fields: Fields added to every entry, such as a service name.
            **kwargs: Passed on to logging.Formatter.
        """
        super().__init__(**kwargs)
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": record.name,
        }
        entry.update(self.static_fields)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
            error = record.exc_info[1]
            if isinstance(error, VersioningError):
                entry["error_code"] = error.code

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if key == "extra_fields" and isinstance(value, dict):
                entry.update(value)
            else:
                entry[key] = value

        return json.dumps(entry, default=str)


def setup_logging(
    level: Optional[str] = None, stream: Optional[IO[str]] = None
) -> logging.Logger:
    """Routes all logging through a single JSONL handler on the root logger.

    Handlers previously attached to the root logger are removed.

    Args:
        level: Log level name. Defaults to VersioningSettings.from_env().log_level
            (the LOG_LEVEL env var, then INFO).
        stream: Destination stream. Defaults to stdout.

    Returns:
        The configured root logger.
    """
    # imported here: config pulls in modules that log through this one
    from versionable.config import VersioningSettings

    log_level = (level or VersioningSettings.from_env().log_level).upper()

    root = logging.getLogger()
    root.setLevel(log_level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Retrieves a logger with the given name.

    Args:
        name: The name of the logger (typically __name__).

    Returns:
        A logging.Logger instance.
    """
    return logging.getLogger(name)
