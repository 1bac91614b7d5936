"""General API routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from subscout.core.config import get_settings
from subscout.core.dependencies import get_metadata_cache
from subscout.core.subtitles import SUPPORTED_EXTENSIONS, MetadataCache
from subscout.core.tracing import get_trace_id

router = APIRouter(prefix="/api")
logger = structlog.get_logger("subscout.routes.general")


@router.get("/")
async def root() -> JSONResponse:
    """Service information.

    All logs in this function will automatically include the trace_id from context.
    """
    settings = get_settings()
    trace_id = get_trace_id()
    logger.info("Root endpoint accessed")
    return JSONResponse(
        {
            "name": "subscout",
            "version": settings.addon_version,
            "status": "ok",
            "manifest": f"{settings.host_base_url.rstrip('/')}/manifest.json",
            "supported_extensions": list(SUPPORTED_EXTENSIONS),
            "trace_id": trace_id,
        }
    )


@router.get("/health")
async def health(cache: MetadataCache | None = Depends(get_metadata_cache)) -> JSONResponse:
    """Health check endpoint."""
    trace_id = get_trace_id()
    logger.debug("Health check")
    return JSONResponse(
        {
            "status": "healthy",
            "metadata_cache_entries": len(cache) if cache is not None else 0,
            "trace_id": trace_id,
        }
    )
