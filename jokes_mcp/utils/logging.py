"""
Logging configuration.

Application code logs through structlog; the library modules log through the
standard library. Both end up in the same renderer on stdout, so a stdlib
record carries the request and session ids just like a structlog event.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars
from structlog.typing import EventDict, Processor, WrappedLogger

from jokes_mcp.config.loader import get_settings

# Id of the HTTP request being served; set by the middleware in main
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Use the caller's X-Request-ID, or mint a short one."""
    request_id = request_id or uuid.uuid4().hex[:8]
    request_id_var.set(request_id)
    return request_id


def bind_session(session_id: str) -> None:
    """Tag everything logged from the current context with a session id."""
    bind_contextvars(session_id=session_id)


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    request_id = request_id_var.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def _shared_processors() -> list[Processor]:
    # Run for structlog events and for foreign stdlib records alike
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_request_id,
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        return logging.INFO
    return level


def build_stdlib_handler(log_format: str) -> logging.Handler:
    """A stdout handler that renders stdlib records with the structlog chain."""
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.add_logger_name, *_shared_processors()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_format),
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """Configure structlog and route the root stdlib logger through it."""
    settings = get_settings()
    level = _resolve_level(settings.log_level)

    structlog.configure(
        processors=[*_shared_processors(), _renderer(settings.log_format)],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [build_stdlib_handler(settings.log_format)]
    root.setLevel(level)
    # uvicorn's access log duplicates the request-id middleware
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)
