"""
Structured JSON logging configuration.

Every log line is a single JSON object on stdout carrying the timestamp,
level, message and logger name, plus whatever context the caller passed
through `extra=` (request correlation ID, acting user, bank account,
amounts, HTTP details).

The current request ID lives in `request_id_var`; `RequestIdFilter` copies it
onto every record, so service log lines correlate with the request that
caused them without passing the ID around.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional


request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# Attributes every LogRecord carries; anything else came from `extra=`.
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
})

# Context fields emitted first, in this order, when present.
CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "latency_ms",
    "user_id",
    "account_id",
)


class RequestIdFilter(logging.Filter):
    """Set `record.request_id` from `request_id_var` unless the caller passed one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {"timestamp": "2024-05-19T09:01:06.123456", "level": "INFO",
         "message": "Account replenished", "logger": "budget_planning.services.budget_planning",
         "user_id": 3, "account_id": 1, "amount": 100}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data and value is not None:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True
) -> None:
    """
    Configure the root logger with a single stdout handler.

    Existing root handlers are removed, so calling this twice does not
    duplicate output.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSONFormatter (True) or a plain text format (False)
    """
    root_logger = logging.getLogger()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)
    console_handler.addFilter(RequestIdFilter())
    root_logger.addHandler(console_handler)

    # Quiet third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for `name` (usually the module's __name__)."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    request_id: Optional[str] = None,
    user_id: Optional[int] = None,
    account_id: Optional[int] = None,
    **extra_fields: Any
) -> None:
    """
    Log `message` at `level` with the common context fields.

    None values are dropped so they do not show up in the output.

    Example:
        log_with_context(logger, "warning", "Wrong role", request_id="abc-123", user_id=7)
    """
    extra: Dict[str, Any] = {}

    if request_id is not None:
        extra["request_id"] = request_id
    if user_id is not None:
        extra["user_id"] = user_id
    if account_id is not None:
        extra["account_id"] = account_id

    extra.update({k: v for k, v in extra_fields.items() if v is not None})

    getattr(logger, level.lower())(message, extra=extra)
