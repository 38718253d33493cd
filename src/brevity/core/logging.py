"""Structured logging with correlation IDs.

structlog renders JSON in production and coloured console output in
development. Request middleware binds a correlation ID into the context so
every entry of one request carries the same ID. Credential-like fields are
masked before rendering; an auth backend must never log a password, a token
or a reset code even when a caller passes one by mistake.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from brevity.core.config import get_settings

REDACTED = "[redacted]"

SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "new_password",
        "password_hash",
        "token",
        "access_token",
        "refresh_token",
        "reset_token",
        "code",
        "secret_key",
    }
)

THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "aiosmtplib")


def new_correlation_id() -> str:
    return f"cid_{uuid.uuid4().hex[:12]}"


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # Entries outside a request get an ID of their own
    event_dict.setdefault("correlation_id", new_correlation_id())
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["logger"] = getattr(logger, "name", "brevity")
    return event_dict


def redact_sensitive_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask the value of any credential-like key."""
    for key in SENSITIVE_FIELDS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Emit the event text as ``message``, the key log shippers expect."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderer(settings: Any) -> Processor:
    if settings.is_development or settings.log_format == "console":
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Any | None = None) -> None:
    """Configure structlog and the stdlib loggers of third-party libraries.

    Args:
        settings: Settings to read the level and format from; loaded from
            the environment when omitted.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)
    renderer = _renderer(settings)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            add_correlation_id,
            redact_sensitive_fields,
            rename_message_field,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=isinstance(renderer, structlog.processors.JSONRenderer),
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name or "brevity")


def bind_correlation_id(correlation_id: str) -> None:
    """Attach a correlation ID to every entry logged in the current context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
