"""Prometheus metrics configuration."""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

logger = structlog.get_logger("subscout.metrics")

# Application info
app_info = Gauge(
    "app_info",
    "Application information",
    ["version"],
)

# Subtitle request metrics
subtitle_requests_total = Counter(
    "subtitle_requests_total",
    "Total number of subtitle requests",
    ["content_type", "outcome"],  # outcome: matched, empty, invalid, unconfigured
)
subtitle_candidates_scored_total = Counter(
    "subtitle_candidates_scored_total",
    "Total number of candidate files scored by the matching engine",
    ["content_type"],
)
subtitle_match_score = Histogram(
    "subtitle_match_score",
    "Score of returned subtitle matches",
    buckets=(0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0),
)

# Collaborator metrics
collaborator_failures_total = Counter(
    "collaborator_failures_total",
    "Total number of failed calls to external collaborators",
    ["collaborator"],  # collaborator: listing, metadata
)
metadata_cache_events_total = Counter(
    "metadata_cache_events_total",
    "Metadata cache events",
    ["event"],  # event: hit, miss, expired, evicted
)


def setup_metrics(app: FastAPI, app_version: str) -> None:
    """Setup Prometheus metrics using prometheus-fastapi-instrumentator.

    Args:
        app: FastAPI application instance
        app_version: Application version
    """
    # Check if metrics are already set up on this app instance
    if getattr(app.state, "_metrics_initialized", False):
        logger.debug("Metrics already initialized for this app instance, skipping")
        return

    instrumentator = Instrumentator(
        should_group_status_codes=False,  # Keep individual status codes
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[
            "/metrics",
            "/docs",
            "/openapi.json",
            "/redoc",
        ],
    )

    # Instrument the app (this adds middleware automatically)
    instrumentator.instrument(app).expose(app, endpoint="/metrics")

    app.state._metrics_initialized = True

    app_info.labels(version=app_version).set(1)

    logger.info("Metrics initialized", version=app_version)
