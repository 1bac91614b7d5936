"""Multi-metric string similarity.

No single metric copes with both transliteration noise (where edit distance
shines) and reordered or inserted words (where token overlap shines), so
the final score blends five bounded metrics with fixed weights.
"""

from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

from .config import MatchingConfig, get_matching_config
from .normalizer import normalize_text

_DOUBLED_LETTERS = re.compile(r"(.)\1+")
_VOWELS = re.compile(r"[aeiou]")

# Applied in order
PHONETIC_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("ph", "f"),
    ("gh", "f"),
    ("ck", "k"),
    ("qu", "k"),
    ("x", "ks"),
    ("th", "t"),
    ("sh", "s"),
    ("ch", "s"),
    ("wh", "w"),
)


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - edit distance / length of the longer string."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / max_len


def character_jaccard(a: str, b: str) -> float:
    """Jaccard index over the character sets of both strings."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def phonetic_code(word: str) -> str:
    """Crude Soundex-like code: collapse doubles, map digraphs, drop inner vowels."""
    if not word:
        return ""
    code = _DOUBLED_LETTERS.sub(r"\1", word.lower())
    for source, target in PHONETIC_REPLACEMENTS:
        code = code.replace(source, target)
    return code[0] + _VOWELS.sub("", code[1:])


def _count_phonetic_hits(source: list[str], other: list[str]) -> int:
    other_codes = {phonetic_code(word) for word in other}
    other_codes.discard("")
    return sum(1 for word in source if phonetic_code(word) in other_codes)


def phonetic_similarity(a: str, b: str) -> float:
    """Share of tokens in the shorter list with a phonetic twin in the other list."""
    words_a = [word for word in a.split(" ") if word]
    words_b = [word for word in b.split(" ") if word]
    total = max(len(words_a), len(words_b))
    if total == 0:
        return 0.0

    if len(words_a) < len(words_b):
        hits = _count_phonetic_hits(words_a, words_b)
    elif len(words_b) < len(words_a):
        hits = _count_phonetic_hits(words_b, words_a)
    else:
        hits = min(_count_phonetic_hits(words_a, words_b), _count_phonetic_hits(words_b, words_a))
    return hits / total


def _partial_token_matches(
    source: list[str],
    other: list[str],
    exact: set[str],
    config: MatchingConfig,
) -> float:
    """Sum of similarities for near-miss token pairs (each other-token used once)."""
    used: set[str] = set()
    total = 0.0
    for word in source:
        if word in exact:
            continue

        best_score = 0.0
        best_word: str | None = None
        for candidate in other:
            if candidate in exact or candidate in used or not (word and candidate):
                continue
            length_ratio = min(len(word), len(candidate)) / max(len(word), len(candidate))
            if length_ratio < config.partial_token_min_length_ratio:
                continue
            score = levenshtein_similarity(word, candidate)
            if score > best_score and score > config.partial_token_min_similarity:
                best_score = score
                best_word = candidate

        if best_word is not None:
            total += best_score
            used.add(best_word)
    return total


def token_similarity(
    words_a: list[str],
    words_b: list[str],
    config: MatchingConfig | None = None,
) -> float:
    """Exact token overlap plus a discounted bonus for near-miss tokens."""
    if config is None:
        config = get_matching_config()

    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0

    exact = set(words_a) & set(words_b)

    if len(words_a) < len(words_b):
        partial = _partial_token_matches(words_a, words_b, exact, config)
    elif len(words_b) < len(words_a):
        partial = _partial_token_matches(words_b, words_a, exact, config)
    else:
        partial = min(
            _partial_token_matches(words_a, words_b, exact, config),
            _partial_token_matches(words_b, words_a, exact, config),
        )

    total = max(len(words_a), len(words_b))
    return len(exact) / total + (partial / total) * config.partial_token_factor


def _bigrams(text: str) -> set[str]:
    padded = f" {text} "
    return {padded[i : i + 2] for i in range(len(padded) - 1)}


def bigram_jaccard(a: str, b: str) -> float:
    """Jaccard index over space-padded character bigrams."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    grams_a, grams_b = _bigrams(a), _bigrams(b)
    return len(grams_a & grams_b) / len(grams_a | grams_b)


def similarity(a: str | None, b: str | None, config: MatchingConfig | None = None) -> float:
    """Similarity in [0, 1] between two raw strings.

    Both inputs are normalized first. Empty inputs score 0, identical forms
    score 1, and a substring relation scores at least ``substring_base_score``.

    Args:
        a: First string
        b: Second string
        config: Matching configuration (if None, loads from settings file)

    Returns:
        Similarity score between 0.0 and 1.0
    """
    if config is None:
        config = get_matching_config()

    norm_a = normalize_text(a)
    norm_b = normalize_text(b)

    if not norm_a or not norm_b:
        return 0.0
    if norm_a == norm_b:
        return 1.0

    if norm_a in norm_b or norm_b in norm_a:
        shorter, longer = sorted((norm_a, norm_b), key=len)
        return config.substring_base_score + config.substring_span * (len(shorter) / len(longer))

    score = (
        levenshtein_similarity(norm_a, norm_b) * config.levenshtein_weight
        + character_jaccard(norm_a, norm_b) * config.jaccard_weight
        + phonetic_similarity(norm_a, norm_b) * config.phonetic_weight
        + token_similarity(norm_a.split(" "), norm_b.split(" "), config) * config.token_weight
        + bigram_jaccard(norm_a, norm_b) * config.bigram_weight
    )
    return max(0.0, min(1.0, score))
