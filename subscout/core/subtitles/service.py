"""Subtitle request orchestration.

Ties the listing provider, the metadata provider and the matching engine
together for one add-on request. External failures never propagate: a
failed listing yields no subtitles and a failed metadata lookup falls back
to identifier/episode-only matching.
"""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Any
from urllib import parse as urllib_parse

import structlog
from pydantic import BaseModel, Field, ValidationError

from subscout.core.matching import MatchingConfig, find_best_matches
from subscout.core.metrics import (
    collaborator_failures_total,
    subtitle_candidates_scored_total,
    subtitle_match_score,
    subtitle_requests_total,
)
from subscout.core.models import CandidateFile, ContentRequest, ContentType, TargetMetadata

from .errors import SubtitleSourceError
from .github import GitHubListingClient, validate_repo_format
from .metadata import MetadataProvider
from .parser import parse_subtitle_filename

logger = structlog.get_logger("subscout.subtitles.service")

ADDON_ID = "org.github.subtitles"
ADDON_NAME = "GitHub Subtitles"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_MOVIE_ID = re.compile(r"^tt\d+$")


@dataclass(frozen=True)
class SeriesId:
    """A parsed ``identifier:season:episode`` series id."""

    identifier: str
    season: int | None
    episode: int | None
    is_valid: bool


def _leading_int(value: str) -> int | None:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_series_id(raw_id: str) -> SeriesId:
    """Split a series id like ``tt0903747:1:2`` into its parts.

    Season and episode are read from the leading digits of their parts.
    The id is valid only when both are present and non-negative.
    """
    parts = (raw_id or "").split(":")
    identifier = parts[0]
    if len(parts) < 2:
        return SeriesId(identifier, None, None, False)

    season = _leading_int(parts[1]) if parts[1] else None
    episode = _leading_int(parts[2]) if len(parts) > 2 and parts[2] else None
    is_valid = season is not None and episode is not None and season >= 0 and episode >= 0
    return SeriesId(identifier, season, episode, is_valid)


class AddonConfig(BaseModel):
    """Per-install add-on configuration carried in the request path."""

    github_repo: str | None = Field(default=None, description="Repository in owner/repo form")
    github_path: str = Field(default="", description="Path inside the repository")

    @classmethod
    def from_segment(cls, segment: str | None) -> AddonConfig:
        """Parse the ``{config}`` path segment.

        Accepts URL-encoded JSON (``{"github_repo": ...}``) or a query string
        (``github_repo=owner/repo&github_path=subs``). Unparseable segments
        give an empty configuration.
        """
        if not segment:
            return cls()

        decoded = urllib_parse.unquote(segment).strip()
        data: Any
        if decoded.startswith("{"):
            try:
                data = json.loads(decoded)
            except ValueError:
                logger.warning("Ignoring malformed add-on config", segment=segment[:100])
                return cls()
        else:
            data = dict(urllib_parse.parse_qsl(decoded))

        if not isinstance(data, dict):
            return cls()

        try:
            return cls(
                github_repo=(data.get("github_repo") or None),
                github_path=data.get("github_path") or "",
            )
        except ValidationError:
            logger.warning("Ignoring malformed add-on config", segment=segment[:100])
            return cls()


@dataclass
class ValidationReport:
    """Outcome of checking a subtitle request before doing any work."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_subtitles_request(
    content_type: str | None,
    raw_id: str | None,
    config: AddonConfig | None,
) -> ValidationReport:
    """Check a subtitle request.

    Errors make the request unanswerable; warnings flag unusual but usable
    input.
    """
    report = ValidationReport()

    if not content_type:
        report.errors.append("Missing content type")
    elif content_type not in (ContentType.MOVIE, ContentType.SERIES):
        report.errors.append(f"Invalid content type: {content_type}. Must be 'movie' or 'series'")

    if not raw_id:
        report.errors.append("Missing content ID")
    elif content_type == ContentType.MOVIE and not _MOVIE_ID.match(raw_id):
        report.warnings.append(f"Movie ID format unusual: {raw_id}. Expected format: ttNNNNNNN")
    elif content_type == ContentType.SERIES and ":" not in raw_id:
        report.warnings.append(
            f"Series ID format unusual: {raw_id}. Expected format: ttNNNNNNN:season:episode"
        )

    if config is None:
        report.warnings.append("No configuration found in request")
    elif not config.github_repo:
        report.errors.append("Missing GitHub repository configuration")
    elif not validate_repo_format(config.github_repo):
        report.errors.append("Invalid GitHub repository format. Use owner/repo")

    return report


class SubtitleEntry(BaseModel):
    """One subtitle as returned to the add-on client."""

    id: str = Field(..., description="Opaque id: github:<repo>:<path>")
    url: str = Field(..., description="Direct download URL")
    lang: str = Field(..., description="Detected language code")
    filename: str


def build_manifest(version: str = "1.0.0") -> dict[str, Any]:
    """Add-on manifest served at ``/manifest.json``."""
    return {
        "id": ADDON_ID,
        "version": version,
        "name": ADDON_NAME,
        "description": "Fetches subtitles from public GitHub repositories",
        "resources": ["subtitles"],
        "types": [ContentType.MOVIE.value, ContentType.SERIES.value],
        "catalogs": [],
        "idPrefixes": ["tt"],
        "behaviorHints": {"configurable": True},
        "config": [
            {
                "key": "github_repo",
                "type": "text",
                "title": "GitHub Repository",
                "description": "Format: owner/repo (e.g., OpenSubtitles/opensubtitles-com)",
                "required": True,
            },
            {
                "key": "github_path",
                "type": "text",
                "title": "Subtitles Path (optional)",
                "description": "Path within the repo where subtitles are stored (e.g., subtitles/)",
                "required": False,
            },
        ],
    }


class SubtitleService:
    """Answers subtitle requests for one deployment."""

    def __init__(
        self,
        listing: GitHubListingClient,
        metadata: MetadataProvider | None = None,
        matching_config: MatchingConfig | None = None,
        default_config: AddonConfig | None = None,
    ) -> None:
        """Initialize the subtitle service.

        Args:
            listing: File listing provider
            metadata: Optional metadata provider (movies only)
            matching_config: Matching configuration (if None, loads from settings file)
            default_config: Configuration used when a request carries none
        """
        self.listing = listing
        self.metadata = metadata
        self.matching_config = matching_config
        self.default_config = default_config

    async def _list_candidates(self, config: AddonConfig) -> list[CandidateFile]:
        try:
            return await self.listing.list_files(config.github_repo or "", config.github_path)
        except SubtitleSourceError:
            collaborator_failures_total.labels(collaborator="listing").inc()
            logger.error(
                "Failed to list subtitle files",
                repo=config.github_repo,
                path=config.github_path,
                exc_info=True,
            )
            return []

    async def _lookup_metadata(self, request: ContentRequest) -> TargetMetadata | None:
        if self.metadata is None or request.content_type is not ContentType.MOVIE:
            return None
        try:
            return await self.metadata.get_metadata(request.identifier)
        except SubtitleSourceError:
            collaborator_failures_total.labels(collaborator="metadata").inc()
            logger.warning(
                "Metadata lookup failed, matching without title",
                identifier=request.identifier,
                exc_info=True,
            )
            return None

    async def find_subtitles(
        self,
        content_type: str,
        raw_id: str,
        addon_config: AddonConfig | None = None,
    ) -> list[SubtitleEntry]:
        """Find subtitles for a movie or episode.

        Args:
            content_type: "movie" or "series"
            raw_id: Identifier, e.g. "tt0111161" or "tt0903747:1:2"
            addon_config: Repository settings from the request

        Returns:
            Subtitle entries, best match first (empty when nothing matches
            or a collaborator failed)
        """
        config = addon_config
        if (config is None or not config.github_repo) and self.default_config is not None:
            config = self.default_config

        report = validate_subtitles_request(content_type, raw_id, config)
        if config is None:
            report.errors.append("Missing GitHub repository configuration")
        for warning in report.warnings:
            logger.warning("Unusual subtitle request", content_type=content_type, detail=warning)
        if not report.valid:
            outcome = "unconfigured" if config is None or not config.github_repo else "invalid"
            known_type = content_type in (ContentType.MOVIE, ContentType.SERIES)
            subtitle_requests_total.labels(
                content_type=content_type if known_type else "unknown", outcome=outcome
            ).inc()
            logger.info(
                "Rejected subtitle request",
                content_type=content_type,
                id=raw_id,
                errors=report.errors,
            )
            return []

        request = ContentRequest.from_stremio(content_type, raw_id)

        candidates = await self._list_candidates(config)
        if not candidates:
            subtitle_requests_total.labels(content_type=content_type, outcome="empty").inc()
            logger.info("No subtitle files found", repo=config.github_repo, path=config.github_path)
            return []

        metadata = await self._lookup_metadata(request)

        ranked = await asyncio.to_thread(
            find_best_matches,
            candidates,
            request,
            metadata,
            None,
            self.matching_config,
        )
        subtitle_candidates_scored_total.labels(content_type=content_type).inc(len(candidates))

        entries: list[SubtitleEntry] = []
        for item in ranked:
            subtitle_match_score.observe(item.match.score)
            entries.append(
                SubtitleEntry(
                    id=f"github:{config.github_repo}:{item.candidate.path}",
                    url=item.candidate.download_ref,
                    lang=parse_subtitle_filename(item.candidate.name).language,
                    filename=item.candidate.name,
                )
            )

        outcome = "matched" if entries else "empty"
        subtitle_requests_total.labels(content_type=content_type, outcome=outcome).inc()
        logger.info(
            "Answered subtitle request",
            content_type=content_type,
            id=raw_id,
            repo=config.github_repo,
            candidates=len(candidates),
            matches=len(entries),
            title=metadata.title if metadata else None,
        )
        return entries
