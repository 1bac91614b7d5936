"""Application routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from subscout.routes import general
from subscout.routes.addon import create_addon_router

logger = structlog.get_logger("subscout.routes")


def create_app_router() -> APIRouter:
    """Create and configure main application router.

    The API routes are included before the add-on routes so ``/api/...``
    paths are never read as a ``{config}`` segment.

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter()

    router.include_router(general.router, tags=["general"])

    addon_router = create_addon_router()
    router.include_router(addon_router, tags=["addon"])
    logger.debug("Included addon router in app_router")

    return router
