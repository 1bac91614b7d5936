"""Pydantic models for subtitle candidates and content requests."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ContentType(StrEnum):
    """Kind of content a subtitle request is for."""

    MOVIE = "movie"
    SERIES = "series"


class CandidateFile(BaseModel):
    """A subtitle file discovered by a listing provider."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name (basename)")
    path: str = Field(..., description="Path of the file inside its source")
    download_ref: str = Field(..., description="Direct download URL")
    size: int | None = Field(default=None, description="File size in bytes")
    sha: str | None = Field(default=None, description="Content hash reported by the source")


class TargetMetadata(BaseModel):
    """Optional title/year enrichment for an identifier."""

    model_config = ConfigDict(frozen=True)

    identifier: str | None = Field(default=None, description="Identifier the metadata belongs to")
    title: str | None = Field(default=None, description="Canonical title")
    year: str | None = Field(default=None, description="Release year (string, may be a range)")
    director: str | None = None
    genre: str | None = None
    plot: str | None = None
    runtime: str | None = None
    rating: str | None = None


class ContentRequest(BaseModel):
    """What the caller is looking for.

    For series, ``season``/``episode`` may be absent (pack-level request).
    """

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    identifier: str = Field(..., description="Base identifier, e.g. 'tt0111161'")
    season: int | None = Field(default=None, ge=0)
    episode: int | None = Field(default=None, ge=0)

    @property
    def has_episode(self) -> bool:
        """True when both season and episode are known."""
        return self.season is not None and self.episode is not None

    @classmethod
    def from_stremio(cls, content_type: str | ContentType, raw_id: str) -> ContentRequest:
        """Build a request from a Stremio-style id.

        Movies use the id as is. Series ids look like ``tt123:1:2``; missing or
        unparseable season/episode parts are dropped rather than rejected.
        """
        kind = ContentType(content_type)
        if kind is ContentType.MOVIE:
            return cls(content_type=kind, identifier=raw_id)

        from subscout.core.subtitles.service import parse_series_id

        parsed = parse_series_id(raw_id)
        if not parsed.is_valid:
            return cls(content_type=kind, identifier=parsed.identifier)
        return cls(
            content_type=kind,
            identifier=parsed.identifier,
            season=parsed.season,
            episode=parsed.episode,
        )
