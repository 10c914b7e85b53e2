"""
Structured logging.

JSON log records with the active job ID attached from context.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from shared.config import settings
from shared.errors import DataQualityError

_job_id: ContextVar[Optional[str]] = ContextVar("job_id", default=None)

# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_configured = False


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        job_id = getattr(record, "job_id", None) or _job_id.get()
        if job_id:
            payload["job_id"] = str(job_id)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install the JSON handler on the root logger.

    Args:
        level: Log level name (defaults to settings.log_level)
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level or settings.log_level)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger that emits JSON records.

    Args:
        name: Logger name (module or component)

    Returns:
        Configured logger
    """
    configure_logging()
    return logging.getLogger(name)


def set_job_id(job_id) -> None:
    """
    Bind a job ID to the current context for logging.

    Args:
        job_id: Job ID (None clears it)
    """
    _job_id.set(str(job_id) if job_id else None)


def get_job_id() -> Optional[str]:
    """Return the job ID bound to the current context."""
    return _job_id.get()


def log_data_quality(logger: logging.Logger, issue: DataQualityError, **extra) -> None:
    """
    Report a data-quality issue at warning level.

    Data-quality issues degrade the job; they are logged, never raised.

    Args:
        logger: Logger of the reporting module
        issue: The issue
        **extra: Additional structured fields
    """
    fields = {"data_quality": True, "error_code": issue.code, **extra}
    if issue.job_id:
        fields["job_id"] = issue.job_id
    logger.warning(issue.message, extra=fields)
