"""GitHub contents API client used as the subtitle file listing provider."""

from __future__ import annotations

from typing import Any
from urllib import parse as urllib_parse

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from subscout.core.matching.rules import SUBTITLE_EXTENSION_PATTERN, SUBTITLE_EXTENSIONS
from subscout.core.models import CandidateFile

from .errors import InvalidRepositoryError, ListingError

logger = structlog.get_logger("subscout.subtitles.github")

SUPPORTED_EXTENSIONS: tuple[str, ...] = SUBTITLE_EXTENSIONS


def is_subtitle_file(filename: str | None) -> bool:
    """Check whether a filename has a supported subtitle extension."""
    return bool(filename) and SUBTITLE_EXTENSION_PATTERN.search(filename) is not None


def validate_repo_format(repo: str | None) -> bool:
    """Check that a repository reference looks like ``owner/repo``."""
    if not repo or not isinstance(repo, str):
        return False
    parts = repo.split("/")
    return len(parts) == 2 and all(parts)


class RepositoryInfo(BaseModel):
    """Summary of a GitHub repository."""

    name: str
    full_name: str
    description: str | None = None
    is_private: bool = Field(default=False, alias="private")
    default_branch: str | None = None
    language: str | None = None
    size: int | None = None
    updated_at: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class GitHubListingClient:
    """List subtitle files from a public GitHub repository.

    Directories are walked recursively; only files with a supported subtitle
    extension are returned.
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            api_url: GitHub REST API base URL
            token: Optional access token
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (closed by the caller)
        """
        self.api_url = api_url.rstrip("/")
        self.token = token
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), follow_redirects=True
        )

    async def __aenter__(self) -> GitHubListingClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "subscout",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _contents_url(self, repo: str, path: str) -> str:
        quoted_path = urllib_parse.quote(path.strip("/"), safe="/")
        return f"{self.api_url}/repos/{repo}/contents/{quoted_path}"

    async def _get_json(self, url: str) -> Any:
        try:
            response = await self.client.get(url, headers=self._headers())
        except httpx.RequestError as e:
            raise ListingError(f"GitHub request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(
                "GitHub API error",
                url=url,
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise ListingError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ListingError("GitHub API returned invalid JSON") from e

    async def list_files(self, repo: str, path: str = "") -> list[CandidateFile]:
        """List subtitle files under a repository path, recursively.

        Args:
            repo: Repository in ``owner/repo`` form
            path: Path inside the repository ("" for the root)

        Returns:
            Subtitle files in listing order (directories expanded in place)

        Raises:
            InvalidRepositoryError: If ``repo`` is not in ``owner/repo`` form
            ListingError: If the GitHub API call fails
        """
        if not validate_repo_format(repo):
            raise InvalidRepositoryError(repo)

        files = await self._walk(repo, path)
        logger.info("Listed subtitle files", repo=repo, path=path or "(root)", count=len(files))
        return files

    async def _walk(self, repo: str, path: str) -> list[CandidateFile]:
        url = self._contents_url(repo, path)
        logger.debug("Listing GitHub contents", repo=repo, path=path or "(root)")
        data = await self._get_json(url)

        # A path pointing at a single file returns an object, not a list
        if not isinstance(data, list):
            logger.debug("GitHub contents response is not a directory", repo=repo, path=path)
            return []

        files: list[CandidateFile] = []
        for item in data:
            if not isinstance(item, dict):
                logger.debug("Skipping malformed GitHub contents item", repo=repo, path=path)
                continue

            item_type = item.get("type")
            name = item.get("name")
            item_path = item.get("path", name)
            if not isinstance(name, str) or not isinstance(item_path, str):
                logger.debug("Skipping GitHub contents item without a name", repo=repo, path=path)
                continue

            if item_type == "file" and is_subtitle_file(name):
                try:
                    candidate = CandidateFile(
                        name=name,
                        path=item_path,
                        download_ref=item.get("download_url") or "",
                        size=item.get("size"),
                        sha=item.get("sha"),
                    )
                except ValidationError as e:
                    raise ListingError(f"GitHub API returned a malformed item: {item_path}") from e
                files.append(candidate)
            elif item_type == "dir":
                files.extend(await self._walk(repo, item_path))
        return files

    async def fetch_repo_info(self, repo: str) -> RepositoryInfo | None:
        """Fetch repository details, or None if it is missing or inaccessible."""
        if not validate_repo_format(repo):
            logger.warning("Invalid repository format", repo=repo)
            return None

        try:
            data = await self._get_json(f"{self.api_url}/repos/{repo}")
        except ListingError as e:
            logger.warning("Repository not found or not accessible", repo=repo, error=str(e))
            return None

        try:
            return RepositoryInfo.model_validate(data)
        except ValidationError:
            logger.warning("GitHub returned malformed repository details", repo=repo)
            return None
