"""Individual match criteria evaluators.

Each function evaluates one kind of evidence (identifier, episode marker,
title, filename hints) and returns a ``MatchResult``. This modular approach
makes it easy to:
- Test each criterion independently
- Adjust scoring weights
- Add new rules to the tables in ``rules``

None of these functions raise on malformed input; they report a zero score.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from .config import MatchingConfig, get_matching_config
from .normalizer import normalize_text
from .results import MatchMethod, MatchResult
from .rules import (
    EPISODE_MARKER_CUT_PATTERN,
    EPISODE_NUMBER_PATTERN,
    EPISODE_ONLY_MAX,
    EPISODE_RULES,
    IDENTIFIER_DIRECT_TEMPLATES,
    IDENTIFIER_NUMBER_PATTERN,
    IDENTIFIER_SEPARATOR_TEMPLATES,
    NEGATIVE_TAG_PATTERN,
    QUALITY_TAG_PATTERN,
    SEASON_PACK_TEMPLATE,
    SHORT_TITLE_LENGTH,
    SUBTITLE_EXTENSION_PATTERN,
    SUSPICIOUS_MARKER_PATTERN,
    TITLE_CUT_PATTERNS,
    TITLE_PREFIX_PATTERN,
    TITLE_SUFFIX_PATTERN,
    TITLE_YEAR_PATTERN,
    YEAR_MAX,
    YEAR_MIN,
    YEAR_TAIL_MAX_LENGTH,
    YEAR_TAIL_NOISE_PATTERN,
)
from .similarity import levenshtein_similarity, similarity

_LEADING_YEAR = re.compile(r"\d{4}")


def numeric_core(identifier: str | None) -> str | None:
    """Numeric part of an identifier ("tt0111161" -> "0111161").

    Returns None when the identifier has no usable digits.
    """
    if not identifier:
        return None
    core = identifier.strip().lower()
    if core.startswith("tt"):
        core = core[2:]
    return core if core.isdigit() else None


def match_identifier(filename: str, expected_id: str) -> MatchResult:
    """Look for an expected identifier inside a filename.

    Tiers, first hit wins:
    1. Verbatim id or numeric core (score 1.0)
    2. A 6-8 digit run close to the numeric core (0.75-0.9)
    3. An "imdb"/"tt" marker followed by the core with any separators (0.9)

    Args:
        filename: Candidate filename
        expected_id: Identifier we're looking for (e.g. "tt0111161")

    Returns:
        MatchResult; malformed identifiers yield ``no_identifier_match``
    """
    number = numeric_core(expected_id)
    if number is None or not filename:
        return MatchResult.no_match(MatchMethod.NO_IDENTIFIER_MATCH)

    filename_lc = filename.lower()
    full_id = re.escape(expected_id.strip().lower())

    for template in IDENTIFIER_DIRECT_TEMPLATES:
        pattern = template.format(num=number, full=full_id)
        if re.search(pattern, filename_lc):
            return MatchResult(1.0, MatchMethod.DIRECT_IDENTIFIER, {"pattern": pattern})

    for found in IDENTIFIER_NUMBER_PATTERN.findall(filename):
        if len(found) == len(number):
            score = levenshtein_similarity(found, number)
            if score >= 0.8:
                return MatchResult(
                    score * 0.9,
                    MatchMethod.FUZZY_IDENTIFIER_EXACT_LENGTH,
                    {"found": found, "target": number, "similarity": f"{score:.3f}"},
                )
        if len(found) > len(number) and number in found:
            return MatchResult(0.85, MatchMethod.IDENTIFIER_SUBSTRING, {"found": found})
        if len(number) > len(found) and found in number:
            return MatchResult(0.75, MatchMethod.IDENTIFIER_PARTIAL, {"found": found})

    for template in IDENTIFIER_SEPARATOR_TEMPLATES:
        pattern = template.format(num=number)
        if re.search(pattern, filename_lc):
            return MatchResult(0.9, MatchMethod.IDENTIFIER_WITH_SEPARATOR, {"pattern": pattern})

    return MatchResult.no_match(MatchMethod.NO_IDENTIFIER_MATCH)


def match_episode(filename: str, season: int, episode: int) -> MatchResult:
    """Look for a season/episode marker inside a filename.

    Tiers, first hit wins:
    1. Any rule in ``EPISODE_RULES`` (score 1.0)
    2. Adjacent standalone numbers read as (season, episode) (0.6-0.95)
    3. Season 1 only: a standalone number equal to the episode (0.7)
    4. A bare "season N" marker, i.e. a season pack (0.5)

    Args:
        filename: Candidate filename
        season: Requested season number
        episode: Requested episode number

    Returns:
        MatchResult with an episode method tag
    """
    if not filename or season < 0 or episode < 0:
        return MatchResult.no_match(MatchMethod.NO_MATCH)

    filename_lc = filename.lower()

    for rule in EPISODE_RULES:
        if rule.compile(season, episode).search(filename_lc):
            return MatchResult(rule.score, rule.method, {"rule": rule.name})

    numbers = [int(value) for value in EPISODE_NUMBER_PATTERN.findall(filename_lc)]
    for found_season, found_episode in zip(numbers, numbers[1:]):
        if found_season != season:
            continue
        if found_episode == episode:
            return MatchResult(0.95, MatchMethod.FUZZY_EPISODE_EXACT)
        if abs(found_episode - episode) == 1:
            return MatchResult(0.8, MatchMethod.FUZZY_EPISODE_CLOSE, {"found": str(found_episode)})
        return MatchResult(0.6, MatchMethod.FUZZY_SEASON_ONLY)

    if season == 1 and episode <= EPISODE_ONLY_MAX and episode in numbers:
        if f"{episode}p" not in filename_lc and f"{episode}k" not in filename_lc:
            return MatchResult(0.7, MatchMethod.EPISODE_ONLY_S1)

    if re.search(SEASON_PACK_TEMPLATE.format(s=season), filename_lc):
        return MatchResult(0.5, MatchMethod.SEASON_PACK)

    return MatchResult.no_match(MatchMethod.NO_MATCH)


def extract_title(filename: str) -> str:
    """Extract the normalized title portion of a filename.

    Drops the subtitle extension, site prefixes/suffixes, a trailing year
    (when only a short or punctuation-only tail follows it), episode
    markers and release markers, each with everything after them.
    """
    basename = SUBTITLE_EXTENSION_PATTERN.sub("", filename or "").replace("_", " ")
    basename = TITLE_PREFIX_PATTERN.sub("", basename)
    basename = TITLE_SUFFIX_PATTERN.sub("", basename)

    year_match = TITLE_YEAR_PATTERN.search(basename)
    if year_match:
        tail = basename[year_match.end() :].strip()
        if len(tail) < YEAR_TAIL_MAX_LENGTH or YEAR_TAIL_NOISE_PATTERN.fullmatch(tail):
            basename = basename[: year_match.start()].strip()

    basename = EPISODE_MARKER_CUT_PATTERN.sub("", basename)
    for pattern in TITLE_CUT_PATTERNS:
        basename = pattern.sub("", basename)

    return normalize_text(basename)


def extract_year(filename: str) -> str | None:
    """First plausible release year in a filename.

    Years glued to letters or digits (e.g. "2160p") are skipped, as are
    years outside 1920-2030.
    """
    for match in TITLE_YEAR_PATTERN.finditer(filename or ""):
        if YEAR_MIN <= int(match.group(0)) <= YEAR_MAX:
            return match.group(0)
    return None


def _parse_year(value: str | None) -> int | None:
    if not value:
        return None
    match = _LEADING_YEAR.search(str(value))
    return int(match.group(0)) if match else None


def _year_adjustment(file_year: int | None, target_year: int | None) -> tuple[float, float]:
    """(bonus, penalty) for how the file year relates to the target year."""
    if target_year is not None and file_year is not None:
        diff = abs(file_year - target_year)
        if diff == 0:
            return 0.25, 0.0
        if diff == 1:
            return 0.15, 0.0
        if diff <= 3:
            return 0.05, 0.0
        if diff > 10:
            return 0.0, 0.2
        return 0.0, 0.0
    if target_year is not None:
        return 0.05, 0.0
    if file_year is not None:
        return 0.03, 0.0
    return 0.1, 0.0


def _ratio(a: int, b: int) -> float:
    longest = max(a, b)
    return min(a, b) / longest if longest else 0.0


def match_title(
    filename: str,
    target_title: str,
    target_year: str | None = None,
    threshold: float | None = None,
    config: MatchingConfig | None = None,
) -> MatchResult:
    """Score a filename's title and year against a target title.

    Args:
        filename: Candidate filename
        target_title: Title we're looking for
        target_year: Release year we're looking for (optional)
        threshold: Score needed for ``enhanced_title_match``
        config: Matching configuration (if None, loads from settings file)

    Returns:
        MatchResult tagged ``enhanced_title_match`` or ``below_threshold``
        (the score is reported either way)
    """
    if config is None:
        config = get_matching_config()
    if threshold is None:
        threshold = config.title_threshold

    file_title = extract_title(filename)
    if not file_title:
        return MatchResult.no_match(MatchMethod.NO_TITLE)

    normalized_target = normalize_text(target_title)
    title_similarity = similarity(file_title, normalized_target, config)

    file_year = extract_year(filename)
    year_bonus, year_penalty = _year_adjustment(_parse_year(file_year), _parse_year(target_year))

    length_bonus = 0.1 if _ratio(len(file_title), len(normalized_target)) > 0.7 else 0.0
    word_count_bonus = (
        0.05
        if _ratio(len(file_title.split(" ")), len(normalized_target.split(" "))) > 0.8
        else 0.0
    )

    score = title_similarity + year_bonus + length_bonus + word_count_bonus - year_penalty
    score = max(0.0, min(1.0, score))

    if score > threshold:
        if SUSPICIOUS_MARKER_PATTERN.search(filename):
            score *= 0.5
        # Short titles match all sorts of things by accident
        if len(normalized_target) < SHORT_TITLE_LENGTH and title_similarity < 0.9:
            score *= 0.6

    details = {
        "file_title": file_title,
        "normalized_target": normalized_target,
        "title_similarity": f"{title_similarity:.3f}",
        "year_bonus": f"{year_bonus:.3f}",
        "year_penalty": f"{year_penalty:.3f}",
        "length_bonus": f"{length_bonus:.3f}",
        "word_count_bonus": f"{word_count_bonus:.3f}",
        "file_year": file_year or "",
        "target_year": target_year or "",
    }
    if score >= threshold:
        return MatchResult(score, MatchMethod.ENHANCED_TITLE_MATCH, details)
    return MatchResult(score, MatchMethod.BELOW_THRESHOLD, details)


def analyze_filename(
    filename: str,
    target_title: str | None,
    target_year: str | None,
) -> MatchResult:
    """Lightweight heuristic over filename keywords and tags.

    +0.2 when the target year appears, up to +0.3 for title keywords,
    +0.1 for quality tags, -0.3 for sample/cam/screener style tags.
    """
    basename = PurePosixPath(filename or "").stem
    score = 0.0
    indicators: list[str] = []

    if target_year and target_year in basename:
        score += 0.2
        indicators.append("year_match")

    if target_title:
        title_words = [word for word in normalize_text(target_title).split(" ") if word]
        filename_words = [word for word in normalize_text(basename).split(" ") if word]
        word_matches = [
            word
            for word in title_words
            if any(word in candidate or candidate in word for candidate in filename_words)
        ]
        if word_matches:
            score += (len(word_matches) / len(title_words)) * 0.3
            indicators.append(f"{len(word_matches)}_word_matches")

    if QUALITY_TAG_PATTERN.search(basename):
        score += 0.1
        indicators.append("quality_tags")

    if NEGATIVE_TAG_PATTERN.search(basename):
        score -= 0.3
        indicators.append("negative_indicators")

    return MatchResult(
        max(0.0, min(1.0, score)),
        MatchMethod.FILENAME_ANALYSIS,
        {"indicators": ",".join(indicators)},
    )
