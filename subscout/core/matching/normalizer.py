"""Text normalization for filename and title comparison."""

from __future__ import annotations

import re

from .rules import (
    ABBREVIATION_RULES,
    CHARACTER_FOLD_TABLE,
    RELEASE_PATTERNS,
    ROMAN_NUMERAL_PATTERN,
    ROMAN_NUMERALS,
    STOP_WORDS,
)

_APOSTROPHES = re.compile(r"['‘’`´]")
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")

# Stripping a tag can expose another one ("director's cut" only matches once
# the apostrophe is gone), so the pipeline runs until its output is stable.
_MAX_PASSES = 6


def _roman_to_digits(match: re.Match[str]) -> str:
    return ROMAN_NUMERALS.get(match.group(1), match.group(0))


def _normalize_once(text: str) -> str:
    normalized = text.lower().translate(CHARACTER_FOLD_TABLE)

    for pattern, expansion in ABBREVIATION_RULES:
        normalized = pattern.sub(expansion, normalized)

    for pattern in RELEASE_PATTERNS:
        normalized = pattern.sub(" ", normalized)

    normalized = ROMAN_NUMERAL_PATTERN.sub(_roman_to_digits, normalized)

    normalized = _APOSTROPHES.sub("", normalized)
    normalized = _PUNCTUATION.sub(" ", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()

    return " ".join(word for word in normalized.split(" ") if word and word not in STOP_WORDS)


def normalize_text(text: str | None) -> str:
    """Reduce a raw title or filename to a comparable token string.

    Lowercases, folds accented characters, expands abbreviations, strips
    release/quality tags, drops punctuation and stop words.

    Args:
        text: Raw text (may be None or empty)

    Returns:
        Space-joined tokens, possibly empty. ``normalize_text`` is idempotent.
    """
    if not text:
        return ""

    normalized = text
    for _ in range(_MAX_PASSES):
        next_pass = _normalize_once(normalized)
        if next_pass == normalized:
            break
        normalized = next_pass
    return normalized


def tokenize(text: str | None) -> list[str]:
    """Normalize text and split it into tokens."""
    normalized = normalize_text(text)
    return normalized.split(" ") if normalized else []
