"""Errors raised by subtitle collaborators (listing and metadata providers)."""

from __future__ import annotations


class SubtitleSourceError(Exception):
    """Base class for failures of an external subtitle collaborator."""


class InvalidRepositoryError(SubtitleSourceError, ValueError):
    """Repository reference is not in ``owner/repo`` form."""

    def __init__(self, repo: str | None) -> None:
        super().__init__(f"Invalid repository format: {repo!r}. Use owner/repo")
        self.repo = repo


class ListingError(SubtitleSourceError):
    """Listing the files of a repository failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MetadataError(SubtitleSourceError):
    """Fetching metadata for an identifier failed."""
