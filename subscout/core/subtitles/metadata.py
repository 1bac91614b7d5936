"""Metadata providers: identifier -> optional title/year enrichment."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import httpx
import structlog
from pydantic import ValidationError

from subscout.core.models import TargetMetadata

from .cache import MetadataCache
from .errors import MetadataError

logger = structlog.get_logger("subscout.subtitles.metadata")

_MISSING = object()


@runtime_checkable
class MetadataProvider(Protocol):
    """Looks up title/year metadata for an identifier."""

    async def get_metadata(self, identifier: str) -> TargetMetadata | None:
        """Return metadata, or None when the identifier is unknown.

        Raises:
            MetadataError: If the lookup itself failed
        """
        ...


class OmdbMetadataProvider:
    """Metadata lookups against the OMDb API."""

    def __init__(
        self,
        api_key: str = "trilogy",
        api_url: str = "https://www.omdbapi.com/",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OMDb provider.

        Args:
            api_key: OMDb API key
            api_url: OMDb endpoint
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (closed by the caller)
        """
        self.api_key = api_key
        self.api_url = api_url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def get_metadata(self, identifier: str) -> TargetMetadata | None:
        try:
            response = await self.client.get(
                self.api_url,
                params={"i": identifier, "apikey": self.api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise MetadataError(f"OMDb request failed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise MetadataError(f"OMDb request failed: {e}") from e
        except ValueError as e:
            raise MetadataError("OMDb returned invalid JSON") from e

        if not isinstance(data, dict):
            raise MetadataError("OMDb returned an unexpected payload")

        if data.get("Response") != "True":
            logger.info(
                "Identifier not found in OMDb",
                identifier=identifier,
                error=data.get("Error"),
            )
            return None

        try:
            metadata = TargetMetadata(
                identifier=data.get("imdbID") or identifier,
                title=data.get("Title"),
                year=data.get("Year"),
                director=data.get("Director"),
                genre=data.get("Genre"),
                plot=data.get("Plot"),
                runtime=data.get("Runtime"),
                rating=data.get("imdbRating"),
            )
        except ValidationError as e:
            raise MetadataError(f"OMDb returned malformed metadata for {identifier}") from e

        logger.info(
            "Fetched metadata",
            identifier=identifier,
            title=metadata.title,
            year=metadata.year,
        )
        return metadata


class StaticMetadataProvider:
    """Serves metadata from a fixed mapping (tests and offline use)."""

    def __init__(self, entries: Mapping[str, TargetMetadata] | None = None) -> None:
        self.entries: dict[str, TargetMetadata] = dict(entries or {})

    def add(self, identifier: str, metadata: TargetMetadata) -> None:
        self.entries[identifier] = metadata

    async def get_metadata(self, identifier: str) -> TargetMetadata | None:
        return self.entries.get(identifier)


class CachingMetadataProvider:
    """Wraps a provider with a ``MetadataCache``.

    "Not found" answers are cached too, so unknown identifiers are not looked
    up again until their entry expires. Failures are not cached.
    """

    def __init__(self, provider: MetadataProvider, cache: MetadataCache) -> None:
        self.provider = provider
        self.cache = cache

    async def get_metadata(self, identifier: str) -> TargetMetadata | None:
        cached = self.cache.get(identifier, _MISSING)
        if cached is not _MISSING:
            logger.debug("Metadata cache hit", identifier=identifier)
            return cached

        metadata = await self.provider.get_metadata(identifier)
        self.cache.set(identifier, metadata)
        return metadata
