"""Application entry point for subscout."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from subscout.core.config import Settings, get_settings
from subscout.core.logging import setup_logging
from subscout.core.matching import get_matching_config
from subscout.core.metrics import setup_metrics
from subscout.core.middleware import TracingMiddleware
from subscout.core.routes import create_app_router
from subscout.core.subtitles import (
    AddonConfig,
    CachingMetadataProvider,
    GitHubListingClient,
    MetadataCache,
    OmdbMetadataProvider,
    SubtitleService,
)

logger = structlog.get_logger("subscout.app")


def create_subtitle_service(settings: Settings, cache: MetadataCache) -> SubtitleService:
    """Wire the listing and metadata collaborators into a subtitle service."""
    listing = GitHubListingClient(
        api_url=settings.github_api_url,
        token=settings.github_token,
        timeout=settings.http_timeout_seconds,
    )
    omdb = OmdbMetadataProvider(
        api_key=settings.omdb_api_key,
        api_url=settings.omdb_api_url,
        timeout=settings.http_timeout_seconds,
    )
    default_config = None
    if settings.default_github_repo:
        default_config = AddonConfig(
            github_repo=settings.default_github_repo,
            github_path=settings.default_github_path,
        )
    return SubtitleService(
        listing=listing,
        metadata=CachingMetadataProvider(omdb, cache),
        matching_config=get_matching_config(),
        default_config=default_config,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting subscout",
        version=settings.addon_version,
        env=settings.env,
        host=settings.host_bind_address,
        port=settings.host_port,
        default_repo=settings.default_github_repo,
    )

    yield

    logger.info("Shutting down subscout")
    service: SubtitleService | None = getattr(app.state, "subtitle_service", None)
    if service is not None:
        await service.listing.aclose()
        provider = getattr(service.metadata, "provider", None)
        if isinstance(provider, OmdbMetadataProvider):
            await provider.aclose()
        logger.info("HTTP clients closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    # Setup logging first (use settings)
    setup_logging(debug=settings.is_debug, logs_dir=settings.logs_dir)

    app = FastAPI(
        title="subscout",
        description="Subtitle add-on that matches files from GitHub repositories",
        version=settings.addon_version,
        lifespan=lifespan,
    )

    # The metadata cache is owned by the app, not by any module
    cache = MetadataCache(
        max_entries=settings.metadata_cache_max_entries,
        ttl_seconds=settings.metadata_cache_ttl_seconds,
    )
    app.state.metadata_cache = cache
    app.state.subtitle_service = create_subtitle_service(settings, cache)
    logger.info("Subtitle service created", github_api=settings.github_api_url)

    # Add-on clients (Stremio web/desktop) call cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    # Add tracing middleware (added last so it wraps every request)
    app.add_middleware(TracingMiddleware)

    setup_metrics(app, settings.addon_version)

    app.include_router(create_app_router())

    return app


def main() -> None:
    """Main entry point."""
    from subscout.core.config import reload_settings

    current_settings = reload_settings()

    app_instance = create_app()

    # With a base URL, mount the add-on below it and keep health at the root
    if current_settings.host_base_url:
        from fastapi.responses import JSONResponse

        from subscout.core.tracing import get_trace_id

        root_app = FastAPI()
        root_app.add_middleware(TracingMiddleware)

        @root_app.get("/health")
        async def root_health() -> JSONResponse:
            """Health check endpoint at root level."""
            return JSONResponse({"status": "healthy", "trace_id": get_trace_id()})

        root_app.mount(current_settings.host_base_url, app_instance)
        app = root_app
        logger.info("Application mounted at base URL", base_url=current_settings.host_base_url)
    else:
        app = app_instance

    import uvicorn

    logger.info(
        "Starting uvicorn server",
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
    )

    uvicorn.run(
        app,
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
        log_config=None,  # We use structlog
        reload=False,  # Requires an import string, not an app object
    )


if __name__ == "__main__":
    main()
