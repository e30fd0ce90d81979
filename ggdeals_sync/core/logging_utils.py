from __future__ import annotations

import logging
import sys
import uuid

from loguru import logger as loguru_logger

# LogRecord attributes that are not user supplied ``extra`` fields
_STANDARD_FIELDS = frozenset(
    {
        "args",
        "msg",
        "name",
        "levelno",
        "levelname",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "message",
    }
)


class InterceptHandler(logging.Handler):
    """Bridge stdlib ``logging`` records into loguru, keeping ``extra`` fields."""

    def emit(self, record: logging.LogRecord) -> None:
        level: int | str
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS
        }

        loguru_logger.bind(logger_name=record.name, **extra).opt(
            depth=6, exception=record.exc_info
        ).log(level, record.getMessage())


def setup_json_logging(
    level: str = "INFO",
    log_file: str | None = None,
    max_file_size: str = "10 MB",
    retention: str = "14 days",
) -> None:
    """Configure JSON logging through loguru with optional file output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path for persistent logging
        max_file_size: Maximum size per log file (loguru format)
        retention: Log retention period (loguru format)
    """
    loguru_logger.remove()

    loguru_logger.add(
        sys.stderr,
        level=level.upper(),
        serialize=True,
        enqueue=True,  # thread-safe
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        loguru_logger.add(
            log_file,
            level=level.upper(),
            serialize=True,
            rotation=max_file_size,
            retention=retention,
            compression="gz",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.addHandler(InterceptHandler())

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    loguru_logger.info(
        "JSON logging initialized",
        setup_config={"level": level, "log_file": log_file},
    )


def generate_correlation_id() -> str:
    """Generate a short correlation ID for tracing one sync run across logs."""
    return uuid.uuid4().hex[:12]


__all__ = [
    "InterceptHandler",
    "generate_correlation_id",
    "setup_json_logging",
]
