"""Context propagation: correlation IDs, trace context and reconcile deadlines."""

from __future__ import annotations

import contextvars
import time
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace

from ..errors import ReconcileTimeoutError

# Context variable for storing correlation ID
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Monotonic deadline of the current reconcile pass
_deadline: contextvars.ContextVar[float | None] = contextvars.ContextVar("reconcile_deadline", default=None)


def set_correlation_id(corr_id: str) -> None:
    """Set the correlation ID in the current context.

    Args:
        corr_id: Correlation ID to set
    """
    correlation_id.set(corr_id)


def get_correlation_id() -> str | None:
    """Get the correlation ID from the current context.

    Returns:
        Correlation ID if set, None otherwise
    """
    return correlation_id.get()


@contextmanager
def with_correlation_id(corr_id: str) -> Iterator[str]:
    """Context manager to set a correlation ID for the duration of a block.

    Args:
        corr_id: Correlation ID to use

    Yields:
        The correlation ID
    """
    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values including the correlation ID."""
    ctx: dict[str, Any] = {}
    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id
    if additional:
        ctx.update(additional)
    return ctx


def propagate_trace_context() -> dict[str, Any] | None:
    """Get OpenTelemetry trace context for propagation.

    Returns:
        Dictionary with trace context if a span is recording, None otherwise
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        span_context = span.get_span_context()
        if span_context.is_valid:
            return {
                "trace_id": format(span_context.trace_id, "032x"),
                "span_id": format(span_context.span_id, "016x"),
                "trace_flags": span_context.trace_flags,
            }
    return None


@contextmanager
def reconcile_deadline(seconds: float) -> Iterator[float]:
    """Bound the enclosed reconcile pass by a deadline.

    Nested deadlines never extend an outer one.

    Args:
        seconds: Time budget for the block

    Yields:
        The absolute monotonic deadline
    """
    deadline = time.monotonic() + seconds
    outer = _deadline.get()
    if outer is not None:
        deadline = min(deadline, outer)
    token = _deadline.set(deadline)
    try:
        yield deadline
    finally:
        _deadline.reset(token)


def remaining_time() -> float | None:
    """Seconds left before the current deadline, or None when no deadline is set."""
    deadline = _deadline.get()
    if deadline is None:
        return None
    return deadline - time.monotonic()


def check_deadline() -> None:
    """Raise if the current reconcile pass has run out of time.

    Raises:
        ReconcileTimeoutError: If the deadline has passed
    """
    remaining = remaining_time()
    if remaining is not None and remaining <= 0:
        raise ReconcileTimeoutError("reconcile deadline exceeded")
