"""Structured logging configuration for corewait."""

import logging
import logging.handlers
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog


class LogLevel(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def setup_structured_logging(
    log_file_path: Path | None = None,
    log_level: LogLevel | str = LogLevel.INFO,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_output: bool = True,
) -> None:
    """
    Route corewait's structured events through the stdlib root logger.

    Files receive one JSON object per line, the console gets the dev renderer.
    Test harnesses that already own logging can simply skip this call.
    """
    level = _level_number(log_level)

    handlers: list[logging.Handler] = []
    if console_output:
        handlers.append(logging.StreamHandler())

    if log_file_path:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            ),
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            _get_processor(log_file_path is not None),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)


def _level_number(log_level: LogLevel | str) -> int:
    return getattr(logging, LogLevel(str(log_level).lower()).value.upper())


def _get_processor(use_json: bool) -> Any:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def flush_logs() -> None:
    """Force flush all log handlers to ensure logs are written to files."""
    for handler in logging.getLogger().handlers:
        handler.flush()
