"""Stremio add-on protocol routes (manifest and subtitles resource)."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from subscout.core.config import get_settings
from subscout.core.dependencies import get_subtitle_service
from subscout.core.subtitles import AddonConfig, SubtitleService, build_manifest

logger = structlog.get_logger("subscout.routes.addon")


def _manifest_response() -> JSONResponse:
    return JSONResponse(build_manifest(get_settings().addon_version))


async def _subtitles_response(
    service: SubtitleService,
    content_type: str,
    content_id: str,
    config_segment: str | None = None,
) -> JSONResponse:
    addon_config = AddonConfig.from_segment(config_segment) if config_segment else None
    entries = await service.find_subtitles(content_type, content_id, addon_config)
    return JSONResponse({"subtitles": [entry.model_dump() for entry in entries]})


def create_addon_router() -> APIRouter:
    """Create router for the add-on endpoints.

    Every endpoint exists with and without a leading ``{config}`` segment,
    which carries the per-install configuration (URL-encoded JSON or a
    query string).

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter()

    @router.get("/manifest.json")
    async def manifest() -> JSONResponse:
        """Add-on manifest."""
        return _manifest_response()

    @router.get("/subtitles/{content_type}/{content_id}.json")
    async def subtitles(
        content_type: str,
        content_id: str,
        service: SubtitleService = Depends(get_subtitle_service),
    ) -> JSONResponse:
        """Subtitles for unconfigured installs (uses the server default repository)."""
        return await _subtitles_response(service, content_type, content_id)

    @router.get("/subtitles/{content_type}/{content_id}/{extra}.json")
    async def subtitles_with_extra(
        content_type: str,
        content_id: str,
        extra: str,
        service: SubtitleService = Depends(get_subtitle_service),
    ) -> JSONResponse:
        """Subtitles with extra arguments (video hash, size, ...), which are ignored."""
        logger.debug("Ignoring extra subtitle arguments", extra=extra)
        return await _subtitles_response(service, content_type, content_id)

    @router.get("/{config:path}/manifest.json")
    async def configured_manifest(config: str) -> JSONResponse:
        """Add-on manifest for a configured install."""
        return _manifest_response()

    @router.get("/{config:path}/subtitles/{content_type}/{content_id}.json")
    async def configured_subtitles(
        config: str,
        content_type: str,
        content_id: str,
        service: SubtitleService = Depends(get_subtitle_service),
    ) -> JSONResponse:
        """Subtitles for a configured install."""
        return await _subtitles_response(service, content_type, content_id, config)

    @router.get("/{config:path}/subtitles/{content_type}/{content_id}/{extra}.json")
    async def configured_subtitles_with_extra(
        config: str,
        content_type: str,
        content_id: str,
        extra: str,
        service: SubtitleService = Depends(get_subtitle_service),
    ) -> JSONResponse:
        """Subtitles for a configured install, with extra arguments (ignored)."""
        logger.debug("Ignoring extra subtitle arguments", extra=extra)
        return await _subtitles_response(service, content_type, content_id, config)

    return router
