"""Tests for individual match criteria."""

from __future__ import annotations

import pytest

from subscout.core.matching import (
    DEFAULT_CONFIG,
    MatchMethod,
    analyze_filename,
    extract_title,
    extract_year,
    match_episode,
    match_identifier,
    match_title,
)
from subscout.core.matching.criteria import numeric_core


class TestMatchIdentifier:
    """Test identifier matching tiers."""

    def test_numeric_core(self):
        """Test extraction of the numeric identifier part."""
        assert numeric_core("tt0111161") == "0111161"
        assert numeric_core("0111161") == "0111161"
        assert numeric_core("ttabc") is None
        assert numeric_core("") is None

    @pytest.mark.parametrize(
        "filename",
        [
            "tt0111161.en.srt",
            "The.Shawshank.Redemption.tt0111161.srt",
            "movie.0111161.srt",
            "Movie [0111161].srt",
            "Movie imdb-0111161.srt",
        ],
    )
    def test_direct_match(self, filename):
        """Test that the id or its numeric core in the name scores 1.0."""
        result = match_identifier(filename, "tt0111161")
        assert result.score == 1.0
        assert result.method is MatchMethod.DIRECT_IDENTIFIER

    def test_fuzzy_same_length(self):
        """Test that a same-length number one edit away scores 0.9 x similarity."""
        result = match_identifier("movie.0111162.srt", "tt0111161")
        assert result.method is MatchMethod.FUZZY_IDENTIFIER_EXACT_LENGTH
        assert result.score == pytest.approx((1 - 1 / 7) * 0.9)
        assert result.details["found"] == "0111162"

    def test_substring(self):
        """Test that a longer number containing the core scores 0.85."""
        result = match_identifier("movie.01111612.srt", "tt0111161")
        assert result.method is MatchMethod.IDENTIFIER_SUBSTRING
        assert result.score == 0.85

    def test_partial(self):
        """Test that a shorter number contained in the core scores 0.75."""
        result = match_identifier("movie.111161.srt", "tt0111161")
        assert result.method is MatchMethod.IDENTIFIER_PARTIAL
        assert result.score == 0.75

    def test_with_separator(self):
        """Test that a marker separated from the core scores 0.9."""
        result = match_identifier("movie.tt.0111161x.srt", "tt0111161")
        assert result.method is MatchMethod.IDENTIFIER_WITH_SEPARATOR
        assert result.score == 0.9

    def test_different_identifier(self):
        """Test that another identifier does not match."""
        result = match_identifier("tt0068646.srt", "tt0111161")
        assert result.score == 0.0
        assert result.method is MatchMethod.NO_IDENTIFIER_MATCH

    def test_malformed_identifier(self):
        """Test that identifiers without digits never match."""
        assert match_identifier("tt0111161.srt", "ttxyz").method is MatchMethod.NO_IDENTIFIER_MATCH
        assert match_identifier("", "tt0111161").score == 0.0


class TestMatchEpisode:
    """Test season/episode matching tiers."""

    @pytest.mark.parametrize(
        "filename",
        [
            "Show.S01E02.srt",
            "show.s1e2.srt",
            "Show.1x02.srt",
            "Show S01 E02.srt",
            "Show Season 1 Episode 2.srt",
            "Show [S01E02].srt",
        ],
    )
    def test_exact(self, filename):
        """Test that explicit markers score 1.0."""
        result = match_episode(filename, 1, 2)
        assert result.score == 1.0
        assert result.method is MatchMethod.EXACT_EPISODE
        assert "rule" in result.details

    def test_season_mismatch_not_exact(self):
        """Test that another season never scores as exact."""
        assert match_episode("Show.S02E02.srt", 1, 2).score < 1.0

    def test_digit_guard(self):
        """Test that a longer episode number is not read as a shorter one."""
        assert match_episode("Show.S01E20.srt", 1, 2).score == 0.0
        assert match_episode("Show.S01E021.srt", 1, 2).score < 1.0

    def test_fuzzy_exact(self):
        """Test adjacent standalone numbers equal to season and episode."""
        result = match_episode("Show - 1 - 02.srt", 1, 2)
        assert result.method is MatchMethod.FUZZY_EPISODE_EXACT
        assert result.score == 0.95

    def test_fuzzy_close(self):
        """Test adjacent numbers one episode away."""
        result = match_episode("Show - 1 - 03.srt", 1, 2)
        assert result.method is MatchMethod.FUZZY_EPISODE_CLOSE
        assert result.score == 0.8

    def test_fuzzy_season_only(self):
        """Test adjacent numbers with the right season only."""
        result = match_episode("Show - 1 - 07.srt", 1, 2)
        assert result.method is MatchMethod.FUZZY_SEASON_ONLY
        assert result.score == 0.6

    def test_episode_only_first_season(self):
        """Test that a bare episode number is accepted for season 1."""
        result = match_episode("Show - 02.srt", 1, 2)
        assert result.method is MatchMethod.EPISODE_ONLY_S1
        assert result.score == 0.7
        # Not for later seasons
        assert match_episode("Show - 02.srt", 2, 2).score == 0.0

    def test_season_pack(self):
        """Test that a season pack marker scores 0.5."""
        result = match_episode("Show Season 1 Complete.srt", 1, 5)
        assert result.method is MatchMethod.SEASON_PACK
        assert result.score == 0.5

    def test_no_match(self):
        """Test that unrelated names and invalid numbers do not match."""
        assert match_episode("Movie.srt", 1, 2).method is MatchMethod.NO_MATCH
        assert match_episode("Show.S01E02.srt", -1, 2).score == 0.0
        assert match_episode("", 1, 2).score == 0.0


class TestExtraction:
    """Test title and year extraction from filenames."""

    def test_extract_title_with_year(self):
        """Test that a trailing year and extension are dropped."""
        assert extract_title("The.Matrix.1999.srt") == "matrix"

    def test_extract_title_release_markers(self):
        """Test that resolution markers and everything after are dropped."""
        assert extract_title("Inception.1080p.BluRay.x264.srt") == "inception"

    def test_extract_title_episode_marker(self):
        """Test that episode markers and everything after are dropped."""
        assert extract_title("Breaking.Bad.S01E02.720p.srt") == "breaking bad"

    def test_extract_title_site_prefix(self):
        """Test that site prefixes are dropped."""
        assert extract_title("www.Inception.2010.srt") == "inception"

    def test_extract_title_underscores(self):
        """Test that underscores separate words."""
        assert extract_title("the_dark_knight.srt") == "dark knight"

    def test_extract_year(self):
        """Test year extraction and its range check."""
        assert extract_year("Movie.1999.srt") == "1999"
        assert extract_year("Movie.2160p.srt") is None
        assert extract_year("Movie.2035.srt") is None
        assert extract_year("Movie.srt") is None


class TestMatchTitle:
    """Test title matching."""

    def test_exact_title_and_year(self):
        """Test that an exact title and year clamp to 1.0."""
        result = match_title("The.Matrix.1999.srt", "The Matrix", "1999", config=DEFAULT_CONFIG)
        assert result.method is MatchMethod.ENHANCED_TITLE_MATCH
        assert result.score == 1.0
        assert result.details["file_title"] == "matrix"

    def test_year_far_off_penalized(self):
        """Test that a year more than ten years off is penalized."""
        result = match_title("The.Matrix.1975.srt", "The Matrix", "1999", config=DEFAULT_CONFIG)
        # 1.0 similarity + 0.1 length + 0.05 word count - 0.2 penalty
        assert result.score == pytest.approx(0.95)

    def test_below_threshold(self):
        """Test that an unrelated title is reported below threshold."""
        result = match_title(
            "Completely.Different.Film.srt", "The Matrix", config=DEFAULT_CONFIG
        )
        assert result.method is MatchMethod.BELOW_THRESHOLD
        assert result.score < 0.5

    def test_no_title(self):
        """Test that a filename without a title yields no_title."""
        result = match_title("1080p.srt", "The Matrix", config=DEFAULT_CONFIG)
        assert result.method is MatchMethod.NO_TITLE
        assert result.score == 0.0

    def test_suspicious_marker_demoted(self):
        """Test that sample/trailer files are halved."""
        result = match_title(
            "The.Matrix.1999.Sample.srt", "The Matrix", "1999", config=DEFAULT_CONFIG
        )
        assert result.score == pytest.approx(0.5)

    def test_short_target_demoted(self):
        """Test that short targets without a near-exact title are demoted."""
        result = match_title("Upside.Down.2012.srt", "Up", config=DEFAULT_CONFIG)
        expected = (0.85 + 0.15 * (2 / 11) + 0.03) * 0.6
        assert result.score == pytest.approx(expected, abs=1e-6)


class TestAnalyzeFilename:
    """Test the filename keyword heuristic."""

    def test_positive_indicators(self):
        """Test year, title keyword and quality bonuses."""
        result = analyze_filename("The.Matrix.1999.1080p.srt", "The Matrix", "1999")
        assert result.method is MatchMethod.FILENAME_ANALYSIS
        assert result.score == pytest.approx(0.6)
        assert result.details["indicators"] == "year_match,1_word_matches,quality_tags"

    def test_negative_indicators_clamped(self):
        """Test that negative tags cannot push the score below zero."""
        result = analyze_filename("Movie.CAM.srt", None, None)
        assert result.score == 0.0
        assert result.details["indicators"] == "negative_indicators"
