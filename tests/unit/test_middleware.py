"""Tests for middleware functionality."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from subscout.app import create_app
from subscout.core.middleware import TRACE_HEADER


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(create_app())


def test_trace_id_header_added_to_response(client: TestClient) -> None:
    """Test that a generated X-Trace-ID header is added to responses."""
    response = client.get("/api/")

    assert response.status_code == 200
    assert len(response.headers[TRACE_HEADER]) == 32


def test_trace_id_header_preserved(client: TestClient) -> None:
    """Test that an incoming X-Trace-ID header is reused."""
    response = client.get("/api/health", headers={TRACE_HEADER: "upstream-trace-1"})

    assert response.headers[TRACE_HEADER] == "upstream-trace-1"
    assert response.json()["trace_id"] == "upstream-trace-1"


def test_trace_id_consistent_across_request(client: TestClient) -> None:
    """Test that header and body carry the same trace ID."""
    response = client.get("/api/")

    assert response.headers[TRACE_HEADER] == response.json()["trace_id"]


def test_trace_id_different_for_each_request(client: TestClient) -> None:
    """Test that each request gets a different trace ID."""
    first = client.get("/api/").headers[TRACE_HEADER]
    second = client.get("/api/").headers[TRACE_HEADER]

    assert first != second


def test_trace_id_on_addon_routes(client: TestClient) -> None:
    """Test that add-on protocol responses are traced too."""
    response = client.get("/manifest.json")

    assert response.status_code == 200
    assert TRACE_HEADER in response.headers
