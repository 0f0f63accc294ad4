"""Logging setup for the translation service.

Application logs go to stderr or a rotating file, uvicorn access logs get
their own handler, and JSON output is available for production.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

from .config import LoggingConfig

# LogRecord attributes that are not user supplied context
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
    }
)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds logger/level/timestamp and any `extra` context."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["logger"] = record.name
        log_record["level"] = record.levelname
        log_record["timestamp"] = self.formatTime(record, self.datefmt)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_record[key] = value


def _build_handler(
    log_file: str | None,
    stream,
    level: str,
    config: LoggingConfig,
) -> logging.Handler:
    """Create a rotating file handler when a path is given, else a stream handler."""
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.log_rotation_size,
            backupCount=config.log_rotation_count,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    return handler


def setup_logging(config: LoggingConfig) -> None:
    """Configure logging with separate access and error handlers.

    Args:
        config: Logging configuration settings
    """
    if config.json_logs:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        access_formatter = formatter
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        access_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    error_handler = _build_handler(config.error_log_file, sys.stderr, config.log_level, config)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)

    # Uvicorn access logs stay out of the application log
    access_logger = logging.getLogger("uvicorn.access")
    access_logger.setLevel(config.access_log_level)
    access_logger.propagate = False
    access_logger.handlers.clear()

    access_handler = _build_handler(
        config.access_log_file, sys.stdout, config.access_log_level, config
    )
    access_handler.setFormatter(access_formatter)
    access_logger.addHandler(access_handler)

    logging.getLogger("uvicorn").setLevel(config.log_level)
    logging.getLogger("uvicorn.error").setLevel(config.log_level)
    logging.getLogger("src.wptomedium").setLevel(config.log_level)
    logging.getLogger("wptomedium").setLevel(config.log_level)

    # Request lines from the provider client are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    root_logger.info("Logging configured successfully")
    root_logger.info(f"Log level: {config.log_level}")
    root_logger.info(f"JSON logs: {config.json_logs}")
    root_logger.info(f"Error logs: {config.error_log_file or 'stderr'}")
    root_logger.info(f"Access logs: {config.access_log_file or 'stdout'}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log a message with additional context fields.

    With JSON logging the context fields become searchable attributes.

    Example:
        log_with_context(
            logger, logging.INFO,
            "Translation stored",
            article_id=42,
            model="claude-sonnet-4-20250514",
            duration_ms=5120,
        )
    """
    logger.log(level, message, extra=context)
