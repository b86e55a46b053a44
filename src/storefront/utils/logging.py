"""Logging for the storefront service.

structlog renders JSON in deployed environments and a Rich console view
everywhere else, on top of standard library handlers. Files are written only
when ``LOG_DIR`` is set. Values bound with ``bind_request_context`` (correlation id,
method, path) are merged into every line logged while the request runs.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_DEPLOYED = {"production", "staging"}
_QUIET_LOGGERS = ("protean", "stripe", "urllib3", "asyncio", "sqlalchemy.engine")

# Event keys that may carry gateway credentials or card material
SECRET_KEYS = frozenset({"client_secret", "payment_method_token", "signature", "api_key", "webhook_secret"})
_MAX_FILE_BYTES = 10 * 1024 * 1024


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def _rotating(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=_MAX_FILE_BYTES, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    return handler


def redact_secrets(logger, method_name, event_dict):
    """structlog processor: mask credential-like values before rendering."""
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def _configure_handlers(level: str) -> None:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers = [console]

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating(path / "storefront.log", level))
        handlers.append(_rotating(path / "storefront_error.log", logging.ERROR))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = handlers

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging() -> None:
    environment = _environment()
    level = os.getenv("LOG_LEVEL", _LEVELS.get(environment, "INFO")).upper()
    _configure_handlers(level)

    if environment in _DEPLOYED:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(**values) -> None:
    """Replace the bound request values; they stay bound until the next request.

    The unhandled-error handler runs after the middleware has returned, so the
    values are not cleared on the way out.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)
