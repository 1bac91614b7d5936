"""Modular matching system for subtitle files.

This module provides a clean, extensible system for matching subtitle
filenames to a movie or episode request with configurable scoring weights
and declarative rule tables.
"""

from .config import DEFAULT_CONFIG, MatchingConfig, get_matching_config, reload_matching_config
from .criteria import (
    analyze_filename,
    extract_title,
    extract_year,
    match_episode,
    match_identifier,
    match_title,
)
from .evaluator import (
    evaluate_candidate,
    evaluate_movie_candidate,
    evaluate_series_candidate,
    find_best_matches,
)
from .normalizer import normalize_text, tokenize
from .results import MatchMethod, MatchResult, RankedCandidate, method_priority, rank_candidates
from .similarity import (
    bigram_jaccard,
    character_jaccard,
    levenshtein_similarity,
    phonetic_code,
    phonetic_similarity,
    similarity,
    token_similarity,
)

__all__ = [
    "MatchingConfig",
    "DEFAULT_CONFIG",
    "get_matching_config",
    "reload_matching_config",
    "normalize_text",
    "tokenize",
    "similarity",
    "levenshtein_similarity",
    "character_jaccard",
    "phonetic_code",
    "phonetic_similarity",
    "token_similarity",
    "bigram_jaccard",
    "match_identifier",
    "match_episode",
    "extract_title",
    "extract_year",
    "match_title",
    "analyze_filename",
    "MatchMethod",
    "MatchResult",
    "RankedCandidate",
    "method_priority",
    "rank_candidates",
    "evaluate_candidate",
    "evaluate_movie_candidate",
    "evaluate_series_candidate",
    "find_best_matches",
]
