"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from prometheus_client import REGISTRY

import subscout.core.metrics  # noqa: F401  (registers the application collectors)
from subscout.core.config import Settings, reload_settings
from subscout.core.matching import reload_matching_config
from subscout.core.models import CandidateFile

# Collectors registered at import time (process and application metrics) stay
# registered for the whole session; everything else is per-test.
_BASELINE_COLLECTORS = set(REGISTRY._collector_to_names)


def _unregister_added_collectors() -> None:
    for collector in list(REGISTRY._collector_to_names):
        if collector not in _BASELINE_COLLECTORS:
            REGISTRY.unregister(collector)


@pytest.fixture(autouse=True)
def reset_prometheus_registry() -> Iterator[None]:
    """Reset Prometheus registry around each test to avoid duplicate metric registration.

    This is needed because prometheus-fastapi-instrumentator registers its
    HTTP metrics in the global registry, and creating the app in several
    tests would register the same metrics multiple times.
    """
    _unregister_added_collectors()
    yield
    _unregister_added_collectors()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Settings]:
    """Point settings at a temporary data directory for every test."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("SUBSCOUT_DATA_DIR", str(data_dir))
    monkeypatch.delenv("SUBSCOUT_DEFAULT_GITHUB_REPO", raising=False)

    settings = reload_settings()
    reload_matching_config()

    yield settings

    monkeypatch.undo()
    reload_settings()
    reload_matching_config()


@pytest.fixture
def make_candidate() -> Callable[..., CandidateFile]:
    """Factory building candidate files the way the GitHub listing provider does."""

    def _make(name: str, path: str | None = None) -> CandidateFile:
        path = path or f"subs/{name}"
        return CandidateFile(
            name=name,
            path=path,
            download_ref=f"https://raw.githubusercontent.com/owner/repo/main/{path}",
        )

    return _make
