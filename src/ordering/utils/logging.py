"""Logging configuration for the ordering engine.

Stdlib logging carries the handlers; structlog renders on top of it. The
renderer follows the environment: JSON lines in production and staging,
rich console output everywhere else. Tests run at WARNING so that handler
chatter stays out of pytest's captured output.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

LEVELS_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

# Loggers that are too chatty at DEBUG for day-to-day use
QUIET_LOGGERS = ("protean", "asyncio")


def get_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENVIRONMENT.get(get_environment(), "INFO")).upper()


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str) -> None:
    """Console output always; rotating files only when ``LOG_DIR`` is set."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_rotating_handler(log_path / "ordering.log", level))
        root_logger.addHandler(_rotating_handler(log_path / "ordering_error.log", logging.ERROR))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(environment: str):
    if environment in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(
            show_locals=True,
            max_frames=2,
        ),
    )


def setup_structlog(environment: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            _renderer(environment),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib and structlog logging for the process."""
    environment = get_environment()
    setup_stdlib_logging(level or get_log_level())
    setup_structlog(environment)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
