"""Structured logging built on structlog, plus correlation ids for chat turns."""

import logging
import os
import sys
import uuid
from contextvars import ContextVar, Token
from typing import Any, Optional, TextIO

import structlog
from pydantic import BaseModel, Field
from structlog.stdlib import BoundLogger
from structlog.typing import EventDict, WrappedLogger

# Fields kept at the top level of a record; anything else goes under "extra".
TOP_LEVEL_FIELDS = {
    "message",
    "level",
    "logger",
    "timestamp",
    "context",
    "stream",
    "logging_level",
    "correlation_id",
    "assistant_id",
    "thread_id",
    "run_id",
}

_LOGGING_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_handler: Optional[logging.Handler] = None

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class LoggingContext(BaseModel):
    """Logging options, read from the environment unless given explicitly."""

    stream: str = Field(default_factory=lambda: os.getenv("STREAM", "stdout"))
    logging_level: str = Field(default_factory=lambda: os.getenv("LOGGING_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))


def get_logging_level(level: str) -> int:
    try:
        return _LOGGING_LEVELS[level.upper()]
    except KeyError:
        raise ValueError(f"Unsupported logging level: {level}") from None


def get_stream(stream: str) -> TextIO:
    name = stream.lower()
    if name == "stdout":
        return sys.stdout
    if name == "stderr":
        return sys.stderr
    raise ValueError(f"Unsupported stream: {stream}")


def process_log_fields(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Rename the event to ``message`` and fold unknown keys into ``extra``."""
    event_dict["message"] = event_dict.pop("event", "")
    extra = {key: event_dict.pop(key) for key in list(event_dict) if key not in TOP_LEVEL_FIELDS}
    if extra:
        event_dict["extra"] = extra
    return event_dict


def add_correlation_id(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    correlation_id = get_correlation_id()
    if correlation_id and "correlation_id" not in event_dict:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def set_context_fields(context: LoggingContext) -> None:
    structlog.contextvars.bind_contextvars(stream=context.stream, logging_level=context.logging_level)


def clear_context_fields() -> None:
    structlog.contextvars.clear_contextvars()


def configure_structlog(context: Optional[LoggingContext] = None) -> None:
    """Route structlog through the stdlib root logger with the given options.

    Reconfiguring replaces the handler installed by a previous call, handlers
    installed by others are left alone.
    """
    global _handler

    context = context or LoggingContext()
    level = get_logging_level(context.logging_level)

    renderer: Any
    if context.log_format == "keyvalue":
        renderer = structlog.processors.KeyValueRenderer(key_order=["message", "level", "logger"])
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_correlation_id,
            process_log_fields,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    if _handler is not None:
        root_logger.removeHandler(_handler)
    _handler = logging.StreamHandler(get_stream(context.stream))
    _handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(_handler)
    root_logger.setLevel(level)

    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(max(logging.WARNING, level))

    clear_context_fields()
    structlog.contextvars.bind_contextvars(context="default", stream=context.stream)


def get_logger(name: str = "") -> BoundLogger:
    return structlog.get_logger(name or __name__)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def get_or_create_correlation_id() -> str:
    """Get the current correlation ID or create one for this context."""
    correlation_id = get_correlation_id()
    if correlation_id is None:
        correlation_id = generate_correlation_id()
        _correlation_id.set(correlation_id)
    return correlation_id


class CorrelationContext:
    """Context manager scoping a correlation ID, one per chat turn."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self.token: Optional[Token[Optional[str]]] = None

    def __enter__(self) -> str:
        self.token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.token is not None:
            _correlation_id.reset(self.token)
