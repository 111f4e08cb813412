"""
structlog configuration for the scoring pipeline.

Every record carries an ISO timestamp, the level, an event_type (the first
positional argument, snake_case) and whatever keyword context the caller
passes: route, outcome, scores, adjustments. Request-scoped values such as
request_id and session_id are merged in from contextvars.

LOG_FORMAT=json (default) renders one JSON object per line; any other value
uses the console renderer. LOG_LEVEL filters below the given level.

No backend_visaprep imports here; every other module imports this one.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Any

import structlog

_SECRET_KEYS = frozenset({"api_key", "openai_api_key", "authorization"})
_SECRET_VALUE_RE = re.compile(r"sk-[A-Za-z0-9_\-]{8,}")
_REDACTED = "[redacted]"


def _level_from_env() -> int:
    name = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    return getattr(logging, name, logging.INFO)


def _event_to_event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type; message mirrors it for log viewers."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    event_dict.setdefault("message", str(event_dict.get("event_type", "")))
    return event_dict


def _redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Reasoning-service keys never reach the log stream, even inside error strings."""
    for key, value in list(event_dict.items()):
        if key in _SECRET_KEYS:
            event_dict[key] = _REDACTED
        elif isinstance(value, str) and "sk-" in value:
            event_dict[key] = _SECRET_VALUE_RE.sub(_REDACTED, value)
    return event_dict


def configure_structlog(level: int | None = None, fmt: str | None = None) -> None:
    """(Re)configure structlog; called once at import, and again by main() if needed."""
    fmt = (fmt or os.getenv("LOG_FORMAT") or "json").strip().lower()
    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _event_to_event_type,
            _redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level if level is not None else _level_from_env()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger with the module name bound.

        logger = get_logger(__name__)
        logger.info("answer_scored", route="uk_student", outcome="scored", overall=72)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_session(session_id: str) -> structlog.BoundLogger:
    """Logger with session_id bound, for the lifetime of one interview session."""
    return get_logger("backend_visaprep.session").bind(session_id=session_id)


def bind_request_context(**values: Any) -> None:
    """Attach values (request_id, path) to every record logged in the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
