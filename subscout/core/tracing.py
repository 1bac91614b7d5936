"""Request tracing support using structlog contextvars."""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import contextmanager

import structlog.contextvars as contextvars


def generate_trace_id() -> str:
    """Generate a unique trace ID (32 hex characters)."""
    return uuid.uuid4().hex


def get_trace_id() -> str | None:
    """Get the current trace ID from context, or None if not set."""
    return contextvars.get_contextvars().get("trace_id")


def set_trace_id(trace_id: str) -> None:
    """Bind a trace ID to the current context."""
    contextvars.bind_contextvars(trace_id=trace_id)


def clear_trace_id() -> None:
    """Remove the trace ID from the current context."""
    contextvars.unbind_contextvars("trace_id")


@contextmanager
def trace_context(trace_id: str | None = None) -> Generator[str]:
    """Context manager for trace ID.

    Binds ``trace_id`` (or a new one) for the duration of the block and
    restores the previous context afterwards.

    Example:
        >>> with trace_context() as trace_id:
        ...     logger.info("Listing repository")  # Will include trace_id
    """
    previous = dict(contextvars.get_contextvars())

    if trace_id is None:
        trace_id = generate_trace_id()

    contextvars.clear_contextvars()
    contextvars.bind_contextvars(trace_id=trace_id)

    try:
        yield trace_id
    finally:
        contextvars.clear_contextvars()
        if previous:
            contextvars.bind_contextvars(**previous)
