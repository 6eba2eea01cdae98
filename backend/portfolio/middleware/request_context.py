from __future__ import annotations

import logging
import time
import uuid

import sentry_sdk
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..logging_context import current_context, pop_request_context, push_request_context

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Populate ContextVars with request metadata for structured logging."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        token = push_request_context(request_id, path=request.url.path)
        request.state.request_id = request_id
        sentry_sdk.get_isolation_scope().set_tag("request_id", request_id)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            source = current_context().get("content_source")
        finally:
            pop_request_context(token)
        response.headers.setdefault("X-Request-ID", request_id)
        if source:
            logger.info(
                "Served %s from %s in %.1fms",
                request.url.path,
                source,
                (time.perf_counter() - started) * 1000,
            )
        return response
