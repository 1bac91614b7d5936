"""Matching configuration - scoring weights and thresholds."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

logger = structlog.get_logger("subscout.matching.config")


@dataclass(frozen=True)
class MatchingConfig:
    """Configuration for subtitle matching.

    This class centralizes all scoring weights and thresholds,
    making it easy to adjust matching behavior. Instances are frozen so a
    single config can be shared by concurrent evaluations.
    """

    # Similarity metric weights (sum to 1.0)
    levenshtein_weight: float = 0.25
    jaccard_weight: float = 0.20
    phonetic_weight: float = 0.15
    token_weight: float = 0.25
    bigram_weight: float = 0.15

    # Substring shortcut: base + span * (len(shorter) / len(longer))
    substring_base_score: float = 0.85
    substring_span: float = 0.15

    # Token similarity partial matching
    partial_token_min_similarity: float = 0.7
    partial_token_min_length_ratio: float = 0.5
    partial_token_factor: float = 0.7

    # Movie strategy weights
    identifier_strategy_weight: float = 0.7
    title_strategy_weight: float = 0.6
    filename_strategy_weight: float = 0.4
    multi_strategy_floor: float = 0.5

    # Series combination
    series_episode_weight: float = 0.7
    series_identifier_weight: float = 0.3
    series_episode_trust_threshold: float = 0.6
    series_identifier_trust_threshold: float = 0.7
    series_weak_episode_floor: float = 0.2
    series_weighted_identifier_weight: float = 0.6
    series_weighted_episode_weight: float = 0.4

    # Title matching
    title_threshold: float = 0.5

    # Ranking
    tie_epsilon: float = 0.01
    movie_min_score: float = 0.3
    series_min_score: float = 0.3

    # Evaluation
    parallel_min_candidates: int = 64  # Below this, score candidates inline

    def min_score_for(self, content_type: str) -> float:
        """Default minimum score for a content type ("movie" or "series")."""
        if str(content_type) == "series":
            return self.series_min_score
        return self.movie_min_score


# Default config instance
DEFAULT_CONFIG = MatchingConfig()

# Cached config instance (loaded from settings file)
_cached_config: MatchingConfig | None = None


def get_matching_config() -> MatchingConfig:
    """Get the current matching configuration.

    Loads the "matching" section of settings.json if available, otherwise
    returns defaults. Caches the result.

    Returns:
        MatchingConfig instance with current settings
    """
    global _cached_config

    if _cached_config is not None:
        return _cached_config

    try:
        import json

        from subscout.core.config import get_settings

        settings_file = get_settings().config_dir / "settings.json"
        if settings_file.exists():
            with settings_file.open("r") as f:
                matching_settings = json.load(f).get("matching")
            if matching_settings:
                _cached_config = MatchingConfig(**matching_settings)
                logger.info("Loaded matching config from settings file", path=str(settings_file))
                return _cached_config
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Invalid matching settings, using defaults", error=str(e))

    _cached_config = DEFAULT_CONFIG
    return _cached_config


def reload_matching_config() -> MatchingConfig:
    """Reload matching configuration from settings file.

    Call this after updating settings to ensure new values are used.
    """
    global _cached_config
    _cached_config = None
    return get_matching_config()
