"""Tests for tracing functionality."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from subscout.core.tracing import (
    clear_trace_id,
    generate_trace_id,
    get_trace_id,
    set_trace_id,
    trace_context,
)


@pytest.fixture(autouse=True)
def clean_context() -> Iterator[None]:
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


def test_generate_trace_id() -> None:
    """Test trace ID format and uniqueness."""
    trace_id = generate_trace_id()

    assert len(trace_id) == 32  # UUID4 hex
    assert all(char in "0123456789abcdef" for char in trace_id)
    assert len({generate_trace_id() for _ in range(100)}) == 100


def test_set_get_and_clear() -> None:
    """Test binding and unbinding a trace ID."""
    assert get_trace_id() is None

    set_trace_id("trace-123")
    assert get_trace_id() == "trace-123"

    clear_trace_id()
    assert get_trace_id() is None


def test_clear_keeps_other_context() -> None:
    """Test that clearing the trace ID leaves other bound values alone."""
    structlog.contextvars.bind_contextvars(repo="owner/repo", trace_id="trace-123")

    clear_trace_id()

    assert structlog.contextvars.get_contextvars() == {"repo": "owner/repo"}


def test_trace_context_with_id() -> None:
    """Test trace_context binds the given ID for the block only."""
    with trace_context("trace-456") as trace_id:
        assert trace_id == "trace-456"
        assert structlog.contextvars.get_contextvars()["trace_id"] == "trace-456"

    assert get_trace_id() is None


def test_trace_context_generates_id() -> None:
    """Test trace_context generates an ID when none is given."""
    with trace_context() as trace_id:
        assert len(trace_id) == 32
        assert get_trace_id() == trace_id

    assert get_trace_id() is None


def test_trace_context_restores_previous_context() -> None:
    """Test that nested blocks restore the outer context on exit."""
    structlog.contextvars.bind_contextvars(component="listing")

    with trace_context("outer"):
        # The block starts from a clean context
        assert structlog.contextvars.get_contextvars() == {"trace_id": "outer"}

        with trace_context("inner"):
            assert get_trace_id() == "inner"

        assert get_trace_id() == "outer"

    assert structlog.contextvars.get_contextvars() == {"component": "listing"}


def test_trace_context_restores_on_error() -> None:
    """Test that the previous context is restored when the block raises."""
    set_trace_id("before")

    with pytest.raises(RuntimeError), trace_context("during"):
        raise RuntimeError("boom")

    assert get_trace_id() == "before"
