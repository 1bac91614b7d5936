"""Subtitle sources and request handling.

Collaborators around the matching engine: the GitHub file listing
provider, metadata providers with their cache, the filename parser and
the service that answers add-on requests.
"""

from .cache import MetadataCache
from .errors import InvalidRepositoryError, ListingError, MetadataError, SubtitleSourceError
from .github import (
    SUPPORTED_EXTENSIONS,
    GitHubListingClient,
    RepositoryInfo,
    is_subtitle_file,
    validate_repo_format,
)
from .metadata import (
    CachingMetadataProvider,
    MetadataProvider,
    OmdbMetadataProvider,
    StaticMetadataProvider,
)
from .parser import SubtitleFileInfo, clean_filename, get_language_name, parse_subtitle_filename
from .service import (
    AddonConfig,
    SeriesId,
    SubtitleEntry,
    SubtitleService,
    ValidationReport,
    build_manifest,
    parse_series_id,
    validate_subtitles_request,
)

__all__ = [
    "MetadataCache",
    "SubtitleSourceError",
    "InvalidRepositoryError",
    "ListingError",
    "MetadataError",
    "SUPPORTED_EXTENSIONS",
    "GitHubListingClient",
    "RepositoryInfo",
    "is_subtitle_file",
    "validate_repo_format",
    "MetadataProvider",
    "OmdbMetadataProvider",
    "CachingMetadataProvider",
    "StaticMetadataProvider",
    "SubtitleFileInfo",
    "parse_subtitle_filename",
    "clean_filename",
    "get_language_name",
    "AddonConfig",
    "SeriesId",
    "SubtitleEntry",
    "SubtitleService",
    "ValidationReport",
    "build_manifest",
    "parse_series_id",
    "validate_subtitles_request",
]
