from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from typing import Any

import sentry_sdk

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


class RequestContextFilter(logging.Filter):
    """Inject request metadata (and the tier that served it) into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - formatting only
        context = _log_context.get({})
        record.request_id = context.get("request_id")
        record.request_path = context.get("path")
        record.content_source = context.get("content_source")
        return True


def push_request_context(request_id: str, *, path: str | None = None) -> Token:
    return _log_context.set({"request_id": request_id, "path": path, "content_source": None})


def pop_request_context(token: Token) -> None:
    _log_context.reset(token)


def set_content_source(source: str) -> None:
    context = _log_context.get({})
    if context:
        # Mutated in place so the middleware's copy sees what the endpoint chose.
        context["content_source"] = source
    else:  # outside a request (scripts, tests)
        _log_context.set({"request_id": None, "path": None, "content_source": source})
    sentry_sdk.get_isolation_scope().set_tag("content_source", source)


def current_context() -> dict[str, Any]:
    return dict(_log_context.get({}))


__all__ = [
    "RequestContextFilter",
    "current_context",
    "pop_request_context",
    "push_request_context",
    "set_content_source",
]
