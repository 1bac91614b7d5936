"""Match evaluator - orchestrates all criteria.

This module provides high-level evaluation functions that combine
the individual criteria into one decision per candidate, and the full
score-then-rank pipeline used by the subtitle service.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from subscout.core.models import CandidateFile, ContentRequest, ContentType, TargetMetadata

from .config import MatchingConfig, get_matching_config
from .criteria import analyze_filename, match_episode, match_identifier, match_title
from .results import MatchMethod, MatchResult, RankedCandidate, rank_candidates

logger = structlog.get_logger("subscout.matching")


def evaluate_movie_candidate(
    filename: str,
    identifier: str,
    metadata: TargetMetadata | None = None,
    config: MatchingConfig | None = None,
) -> MatchResult:
    """Evaluate a subtitle filename for a movie request.

    Runs the identifier matcher, the title matcher (only when a target title
    is known) and the filename heuristic. The best single strategy wins,
    unless several strategies clear ``multi_strategy_floor`` and their
    weighted average beats it.

    Args:
        filename: Candidate filename
        identifier: Requested identifier (e.g. "tt0111161")
        metadata: Optional title/year for the identifier
        config: Matching configuration (if None, loads from settings file)

    Returns:
        MatchResult for the candidate
    """
    if config is None:
        config = get_matching_config()

    target_title = metadata.title if metadata else None
    target_year = metadata.year if metadata else None

    strategies: list[tuple[MatchResult, float]] = [
        (match_identifier(filename, identifier), config.identifier_strategy_weight),
    ]
    if target_title:
        strategies.append(
            (
                match_title(filename, target_title, target_year, config=config),
                config.title_strategy_weight,
            )
        )
    strategies.append(
        (analyze_filename(filename, target_title, target_year), config.filename_strategy_weight)
    )

    best = strategies[0][0]
    for result, _weight in strategies[1:]:
        if result.score > best.score:
            best = result

    strong = [
        result for result, _weight in strategies if result.score > config.multi_strategy_floor
    ]
    if len(strong) > 1:
        total_weight = sum(weight for _result, weight in strategies)
        weighted = sum(result.score * weight for result, weight in strategies) / total_weight
        if weighted > best.score:
            return MatchResult(
                weighted,
                MatchMethod.MULTI_STRATEGY,
                {result.method.value: f"{result.score:.3f}" for result, _weight in strategies},
            )

    return best


def evaluate_series_candidate(
    filename: str,
    identifier: str,
    season: int | None,
    episode: int | None,
    config: MatchingConfig | None = None,
) -> MatchResult:
    """Evaluate a subtitle filename for a series request.

    Without a season and episode only the identifier matcher runs.
    Otherwise the episode and identifier results are combined:
    both positive gives a weighted blend, a strong episode marker is
    trusted alone, a strong identifier with a weak episode hint gives an
    identifier-weighted blend, and anything else keeps the better of the two.
    """
    if config is None:
        config = get_matching_config()

    identifier_result = match_identifier(filename, identifier)
    if season is None or episode is None:
        return identifier_result

    episode_result = match_episode(filename, season, episode)
    details = {
        "episode_method": episode_result.method.value,
        "episode_score": f"{episode_result.score:.3f}",
        "identifier_method": identifier_result.method.value,
        "identifier_score": f"{identifier_result.score:.3f}",
    }

    if episode_result.score > 0 and identifier_result.score > 0:
        score = (
            episode_result.score * config.series_episode_weight
            + identifier_result.score * config.series_identifier_weight
        )
        return MatchResult(score, MatchMethod.SERIES_COMBINED, details)

    if episode_result.score > config.series_episode_trust_threshold:
        return episode_result

    if (
        identifier_result.score > config.series_identifier_trust_threshold
        and episode_result.score > config.series_weak_episode_floor
    ):
        score = (
            identifier_result.score * config.series_weighted_identifier_weight
            + episode_result.score * config.series_weighted_episode_weight
        )
        return MatchResult(score, MatchMethod.SERIES_IDENTIFIER_WEIGHTED, details)

    if identifier_result.score > episode_result.score:
        return identifier_result
    return episode_result


def evaluate_candidate(
    filename: str,
    request: ContentRequest,
    metadata: TargetMetadata | None = None,
    config: MatchingConfig | None = None,
) -> MatchResult:
    """Evaluate one candidate filename against a content request."""
    if request.content_type is ContentType.SERIES:
        return evaluate_series_candidate(
            filename, request.identifier, request.season, request.episode, config
        )
    return evaluate_movie_candidate(filename, request.identifier, metadata, config)


def find_best_matches(
    candidates: Sequence[CandidateFile],
    request: ContentRequest,
    metadata: TargetMetadata | None = None,
    min_score: float | None = None,
    config: MatchingConfig | None = None,
    max_workers: int | None = None,
) -> list[RankedCandidate]:
    """Score every candidate and rank the ones worth returning.

    Candidates are scored independently of one another, so large lists are
    spread over a thread pool; ranking happens afterwards on the collected
    results.

    Args:
        candidates: Files from the listing provider
        request: What we're looking for
        metadata: Optional title/year for the request identifier
        min_score: Inclusive minimum score (if None, per-type default)
        config: Matching configuration (if None, loads from settings file)
        max_workers: Thread pool size (if None, min(len(candidates), cpu count))

    Returns:
        Ranked candidates, best first
    """
    if config is None:
        config = get_matching_config()
    if min_score is None:
        min_score = config.min_score_for(request.content_type)

    if not candidates:
        return []

    def score(candidate: CandidateFile) -> MatchResult:
        result = evaluate_candidate(candidate.name, request, metadata, config)
        logger.debug(
            "Scored candidate",
            filename=candidate.name,
            score=round(result.score, 3),
            method=result.method.value,
        )
        return result

    if len(candidates) >= config.parallel_min_candidates:
        workers = max_workers or min(len(candidates), os.cpu_count() or 1)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="subscout-match") as pool:
            results = list(pool.map(score, candidates))
    else:
        results = [score(candidate) for candidate in candidates]

    ranked = rank_candidates(zip(candidates, results), min_score, config.tie_epsilon)

    logger.info(
        "Matched subtitle candidates",
        content_type=request.content_type.value,
        identifier=request.identifier,
        candidates=len(candidates),
        matches=len(ranked),
        min_score=min_score,
        best_score=round(ranked[0].match.score, 3) if ranked else None,
    )
    return ranked
