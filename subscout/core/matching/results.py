"""Match results and ranking.

Every matcher returns a ``MatchResult`` tagged with a ``MatchMethod``. The
method tag doubles as a tie-breaker: near-equal scores produced by
different kinds of evidence are not equally trustworthy.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from functools import cmp_to_key

import structlog

from subscout.core.models import CandidateFile

logger = structlog.get_logger("subscout.matching.results")


class MatchMethod(StrEnum):
    """Closed set of labels for the strategy that produced a score."""

    # Identifier
    DIRECT_IDENTIFIER = "direct_identifier"
    FUZZY_IDENTIFIER_EXACT_LENGTH = "fuzzy_identifier_exact_length"
    IDENTIFIER_SUBSTRING = "identifier_substring"
    IDENTIFIER_PARTIAL = "identifier_partial"
    IDENTIFIER_WITH_SEPARATOR = "identifier_with_separator"
    NO_IDENTIFIER_MATCH = "no_identifier_match"

    # Episode
    EXACT_EPISODE = "exact_episode"
    FUZZY_EPISODE_EXACT = "fuzzy_episode_exact"
    FUZZY_EPISODE_CLOSE = "fuzzy_episode_close"
    FUZZY_SEASON_ONLY = "fuzzy_season_only"
    EPISODE_ONLY_S1 = "episode_only_s1"
    SEASON_PACK = "season_pack"
    NO_MATCH = "no_match"

    # Title / filename
    ENHANCED_TITLE_MATCH = "enhanced_title_match"
    BELOW_THRESHOLD = "below_threshold"
    NO_TITLE = "no_title"
    FILENAME_ANALYSIS = "filename_analysis"

    # Combined
    MULTI_STRATEGY = "multi_strategy"
    SERIES_COMBINED = "series_combined"
    SERIES_IDENTIFIER_WEIGHTED = "series_identifier_weighted"
    NONE = "none"


# Higher wins when two scores are within the tie epsilon; unlisted methods rank 0.
METHOD_PRIORITY: Mapping[MatchMethod, int] = {
    MatchMethod.DIRECT_IDENTIFIER: 10,
    MatchMethod.EXACT_EPISODE: 9,
    MatchMethod.SERIES_COMBINED: 8,
    MatchMethod.ENHANCED_TITLE_MATCH: 7,
    MatchMethod.MULTI_STRATEGY: 6,
    MatchMethod.FUZZY_IDENTIFIER_EXACT_LENGTH: 5,
    MatchMethod.FUZZY_EPISODE_EXACT: 4,
}


def method_priority(method: MatchMethod | str) -> int:
    """Tie-break priority of a method tag."""
    try:
        return METHOD_PRIORITY.get(MatchMethod(method), 0)
    except ValueError:
        return 0


@dataclass(frozen=True)
class MatchResult:
    """Result of a match evaluation.

    Attributes:
        score: Confidence in [0, 1]
        method: Strategy that produced the score
        details: Explanatory key/value pairs for diagnostics
    """

    score: float
    method: MatchMethod
    details: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def no_match(cls, method: MatchMethod, **details: str) -> MatchResult:
        return cls(0.0, method, details)

    def __repr__(self) -> str:
        return f"MatchResult(score={self.score:.3f}, method={self.method.value})"


@dataclass(frozen=True)
class RankedCandidate:
    """A candidate that passed the minimum score, with its match."""

    candidate: CandidateFile
    match: MatchResult


def _compare(a: RankedCandidate, b: RankedCandidate, tie_epsilon: float) -> int:
    delta = b.match.score - a.match.score
    if abs(delta) < tie_epsilon:
        return method_priority(b.match.method) - method_priority(a.match.method)
    return 1 if delta > 0 else -1


def rank_candidates(
    scored: Iterable[tuple[CandidateFile, MatchResult]],
    min_score: float,
    tie_epsilon: float = 0.01,
) -> list[RankedCandidate]:
    """Filter and order scored candidates.

    Keeps candidates with ``score >= min_score`` and sorts by score
    descending. Scores closer than ``tie_epsilon`` are ordered by method
    priority instead; equal priorities keep input order.

    Args:
        scored: (candidate, match) pairs in listing order
        min_score: Inclusive minimum score
        tie_epsilon: Score difference below which method priority decides

    Returns:
        Ranked candidates, best first
    """
    kept = [
        RankedCandidate(candidate=candidate, match=match)
        for candidate, match in scored
        if match.score >= min_score
    ]
    kept.sort(key=cmp_to_key(lambda a, b: _compare(a, b, tie_epsilon)))

    logger.debug(
        "Ranked candidates",
        kept=len(kept),
        min_score=min_score,
        top=kept[0].candidate.name if kept else None,
    )
    return kept
