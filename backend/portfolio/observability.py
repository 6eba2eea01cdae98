"""Single reporting seam for failures the content layer deliberately swallows.

Every fallback path (store unreachable, blob listing failed, cache unreadable,
write-back rejected) calls :func:`record_degradation` instead of logging ad hoc,
so each tier's failure rate shows up in Prometheus and, when configured, Sentry.
"""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk

from . import metrics
from .logging_context import set_content_source

logger = logging.getLogger("portfolio.degradation")


def _sentry_enabled() -> bool:
    return sentry_sdk.is_initialized()


def _capture(component: str, operation: str, error: BaseException | None, message: str) -> None:
    if not _sentry_enabled():
        return
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("portfolio.component", component)
        scope.set_tag("portfolio.operation", operation)
        scope.set_tag("alert_kind", "degradation")
        if error is not None:
            sentry_sdk.capture_exception(error)
        else:
            sentry_sdk.capture_message(message, level="warning")


def record_degradation(
    component: str,
    operation: str,
    message: str,
    *,
    error: BaseException | None = None,
    level: int = logging.WARNING,
    capture: bool = True,
    **context: Any,
) -> None:
    metrics.portfolio_degraded_operations_total.labels(
        component=component, operation=operation
    ).inc()
    logger.log(
        level,
        "%s.%s degraded: %s",
        component,
        operation,
        message,
        exc_info=error if error is not None and level >= logging.ERROR else None,
        extra={
            "component": component,
            "operation": operation,
            "error": repr(error) if error is not None else None,
            **context,
        },
    )
    if capture:
        _capture(component, operation, error, message)


def record_source(source: str) -> None:
    set_content_source(str(source))
    metrics.portfolio_content_source_total.labels(source=source).inc()


__all__ = ["record_degradation", "record_source"]
