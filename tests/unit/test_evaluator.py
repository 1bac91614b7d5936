"""Tests for candidate evaluation and the score-then-rank pipeline."""

from __future__ import annotations

import pytest

from subscout.core.matching import (
    DEFAULT_CONFIG,
    MatchingConfig,
    MatchMethod,
    evaluate_candidate,
    evaluate_movie_candidate,
    evaluate_series_candidate,
    find_best_matches,
)
from subscout.core.models import ContentRequest, ContentType, TargetMetadata


def movie(identifier: str) -> ContentRequest:
    return ContentRequest.from_stremio("movie", identifier)


def series(raw_id: str) -> ContentRequest:
    return ContentRequest.from_stremio("series", raw_id)


class TestEvaluateMovieCandidate:
    """Test movie strategy combination."""

    def test_identifier_only(self):
        """Test that an identifier hit wins without metadata."""
        result = evaluate_movie_candidate("tt0111161.en.srt", "tt0111161", config=DEFAULT_CONFIG)
        assert result.method is MatchMethod.DIRECT_IDENTIFIER
        assert result.score == 1.0

    def test_title_strategy_with_metadata(self):
        """Test that a known title lets the title strategy win."""
        metadata = TargetMetadata(title="Movie Title", year="2020")
        result = evaluate_movie_candidate(
            "Movie.Title.2020.1080p.YIFY.srt", "tt1234567", metadata, DEFAULT_CONFIG
        )
        assert result.method is MatchMethod.ENHANCED_TITLE_MATCH
        assert result.score == 1.0

    def test_filename_analysis_fallback(self):
        """Test that the filename heuristic is used when nothing else scores."""
        result = evaluate_movie_candidate("Movie.1080p.srt", "tt1234567", config=DEFAULT_CONFIG)
        assert result.method is MatchMethod.FILENAME_ANALYSIS
        assert result.score == pytest.approx(0.1)

    def test_no_evidence(self):
        """Test that the first strategy is kept when every score is zero."""
        result = evaluate_movie_candidate("random.srt", "tt1234567", config=DEFAULT_CONFIG)
        assert result.score == 0.0
        assert result.method is MatchMethod.NO_IDENTIFIER_MATCH


class TestEvaluateSeriesCandidate:
    """Test series combination."""

    def test_combined(self):
        """Test that episode and identifier evidence are blended."""
        result = evaluate_series_candidate(
            "Breaking.Bad.tt0903747.S01E02.srt", "tt0903747", 1, 2, DEFAULT_CONFIG
        )
        assert result.method is MatchMethod.SERIES_COMBINED
        assert result.score == pytest.approx(1.0)
        assert result.details["episode_method"] == "exact_episode"

    def test_combined_partial_episode(self):
        """Test the combined weights with a fuzzy episode hit."""
        result = evaluate_series_candidate(
            "Show tt0903747 - 1 - 03.srt", "tt0903747", 1, 2, DEFAULT_CONFIG
        )
        assert result.method is MatchMethod.SERIES_COMBINED
        assert result.score == pytest.approx(0.8 * 0.7 + 1.0 * 0.3)

    def test_episode_trusted_alone(self):
        """Test that a strong episode marker is used as is."""
        result = evaluate_series_candidate("Show.S01E02.srt", "tt0903747", 1, 2, DEFAULT_CONFIG)
        assert result.method is MatchMethod.EXACT_EPISODE
        assert result.score == 1.0

    def test_better_of_two(self):
        """Test that weak evidence keeps the better single result."""
        result = evaluate_series_candidate(
            "Show Season 1 Complete.srt", "tt0903747", 1, 5, DEFAULT_CONFIG
        )
        assert result.method is MatchMethod.SEASON_PACK
        assert result.score == 0.5

    def test_identifier_wins_over_missing_episode(self):
        """Test that the identifier result is kept when no episode marker exists."""
        result = evaluate_series_candidate("tt0903747.srt", "tt0903747", 3, 4, DEFAULT_CONFIG)
        assert result.method is MatchMethod.DIRECT_IDENTIFIER
        assert result.score == 1.0

    def test_pack_level_request(self):
        """Test that without season/episode only the identifier is matched."""
        result = evaluate_series_candidate("Show.S01E02.srt", "tt0903747", None, None)
        assert result.method is MatchMethod.NO_IDENTIFIER_MATCH


def test_evaluate_candidate_dispatches_on_type() -> None:
    """Test that the request type selects the evaluator."""
    assert evaluate_candidate("Show.S01E02.srt", series("tt0903747:1:2")).score == 1.0
    assert evaluate_candidate("Show.S01E02.srt", movie("tt0903747")).score < 0.3


class TestFindBestMatches:
    """Test the full pipeline on end-to-end scenarios."""

    def test_movie_identifier(self, make_candidate):
        """Test that only the file with the requested identifier is returned."""
        candidates = [make_candidate("tt0111161.srt"), make_candidate("tt0068646.srt")]
        ranked = find_best_matches(candidates, movie("tt0111161"), config=DEFAULT_CONFIG)

        assert len(ranked) == 1
        assert ranked[0].candidate.name == "tt0111161.srt"
        assert ranked[0].match.method is MatchMethod.DIRECT_IDENTIFIER
        assert ranked[0].match.score == 1.0

    def test_series_episode(self, make_candidate):
        """Test that the requested episode ranks first."""
        candidates = [make_candidate("Show.S01E01.srt"), make_candidate("Show.S01E02.srt")]
        ranked = find_best_matches(candidates, series("tt9999999:1:2"), config=DEFAULT_CONFIG)

        assert ranked[0].candidate.name == "Show.S01E02.srt"

    def test_movie_title_metadata(self, make_candidate):
        """Test that metadata enables a title match."""
        ranked = find_best_matches(
            [make_candidate("Movie.Title.2020.1080p.YIFY.srt")],
            movie("tt1234567"),
            TargetMetadata(title="Movie Title", year="2020"),
            config=DEFAULT_CONFIG,
        )

        assert len(ranked) == 1
        assert ranked[0].match.method in (
            MatchMethod.ENHANCED_TITLE_MATCH,
            MatchMethod.MULTI_STRATEGY,
        )
        assert ranked[0].match.score > 0.5

    def test_unrelated_file(self, make_candidate):
        """Test that an unrelated file is not returned."""
        ranked = find_best_matches(
            [make_candidate("Unrelated.Film.2010.srt")],
            movie("tt0111161"),
            TargetMetadata(title="The Shawshank Redemption", year="1994"),
            config=DEFAULT_CONFIG,
        )
        assert ranked == []

    def test_empty_candidates(self):
        """Test that no candidates give no matches."""
        assert find_best_matches([], movie("tt0111161")) == []

    def test_explicit_min_score(self, make_candidate):
        """Test that an explicit minimum overrides the per-type default."""
        candidates = [make_candidate("Show Season 1 Complete.srt")]
        request = series("tt0903747:1:5")

        assert len(find_best_matches(candidates, request, config=DEFAULT_CONFIG)) == 1
        assert find_best_matches(candidates, request, min_score=0.8, config=DEFAULT_CONFIG) == []

    def test_parallel_matches_sequential(self, make_candidate):
        """Test that the thread pool path gives the same ranking as the inline path."""
        names = [f"Show.S01E{episode:02d}.srt" for episode in range(1, 13)]
        names += ["Show - 1 - 03.srt", "Show Season 1 Complete.srt", "tt0903747.srt"]
        candidates = [make_candidate(name) for name in names]
        request = series("tt0903747:1:3")

        sequential = find_best_matches(candidates, request, config=DEFAULT_CONFIG)
        parallel = find_best_matches(
            candidates,
            request,
            config=MatchingConfig(parallel_min_candidates=1),
            max_workers=4,
        )

        assert [(item.candidate.name, item.match) for item in parallel] == [
            (item.candidate.name, item.match) for item in sequential
        ]
        # Identifier and exact episode both score 1.0; the identifier wins the tie
        assert [item.candidate.name for item in sequential[:3]] == [
            "tt0903747.srt",
            "Show.S01E03.srt",
            "Show - 1 - 03.srt",
        ]

    def test_request_type(self):
        """Test that from_stremio keeps the content type."""
        assert series("tt1:1:2").content_type is ContentType.SERIES
