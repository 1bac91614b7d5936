"""FastAPI dependencies for application-scoped services."""

from __future__ import annotations

import structlog
from fastapi import HTTPException, Request, status

from subscout.core.subtitles import MetadataCache, SubtitleService

logger = structlog.get_logger("subscout.dependencies")


def get_subtitle_service(request: Request) -> SubtitleService:
    """Dependency returning the app's subtitle service.

    Raises:
        HTTPException: If the application was not wired with a service
    """
    service = getattr(request.app.state, "subtitle_service", None)
    if service is None:
        logger.error("Subtitle service is not configured", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Subtitle service unavailable",
        )
    return service


def get_metadata_cache(request: Request) -> MetadataCache | None:
    """Dependency returning the app-owned metadata cache, if any."""
    return getattr(request.app.state, "metadata_cache", None)
