"""Structured logging for Vidtube, built on structlog.

Every entry emitted while a request is in flight carries that request's
correlation fields (request_id, user_id, path, method). The fields live in a
single context variable that RequestIDMiddleware fills on the way in and
empties on the way out; the add_request_context processor merges them into
each event.

Stdlib loggers (uvicorn, sqlalchemy, httpx and the auth modules, which log
through ``logging`` with ``extra=``) are routed through the same renderer, so
production output is one JSON object per line.

    configure_logging(json_format=settings.log_json, level=settings.log_level)
    logger = get_logger(__name__)
    logger.info("video_published", video_id=video.id)
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

REQUEST_CONTEXT_FIELDS = ("request_id", "user_id", "path", "method")

_request_context: ContextVar[dict[str, str]] = ContextVar("vidtube_request_context", default={})

_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


def add_request_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """structlog processor: copy the current request's fields into the event."""
    for key, value in _request_context.get().items():
        event_dict.setdefault(key, value)
    return event_dict


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; the root handler is replaced each time.
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(request_id: str | None, **fields: str | None) -> None:
    """Merge fields into the current request's logging context.

    ``request_id`` always replaces the stored value; other fields
    (user_id, path, method) are only updated when given a value, so the
    viewer can be attached after the path was recorded.
    """
    unknown = set(fields) - set(REQUEST_CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown request context fields: {sorted(unknown)}")

    context = dict(_request_context.get())
    if request_id is None:
        context.pop("request_id", None)
    else:
        context["request_id"] = request_id
    context.update({key: value for key, value in fields.items() if value is not None})
    _request_context.set(context)


def clear_request_context() -> None:
    _request_context.set({})


def get_request_id() -> str | None:
    return _request_context.get().get("request_id")
