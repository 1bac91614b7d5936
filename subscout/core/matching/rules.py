"""Declarative rule tables used by the matching system.

Every family of hand-written variants (release tags, episode markers,
identifier markers, title noise) lives here as ordered data. Matchers walk
the tables in order; the first rule that hits wins. Tables are built once at
import time and never mutated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .results import MatchMethod

# Subtitle extensions accepted from listing providers
SUBTITLE_EXTENSIONS: tuple[str, ...] = ("srt", "vtt", "ass", "ssa", "sub")

SUBTITLE_EXTENSION_PATTERN = re.compile(r"\.(srt|vtt|ass|ssa|sub)$", re.IGNORECASE)

# --- Text normalization tables -------------------------------------------------

STOP_WORDS: frozenset[str] = frozenset(
    {
        # English
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "this", "that", "these", "those",
        "be", "been", "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "must", "can", "shall",
        # Spanish / French
        "de", "la", "le", "el", "les", "los", "las", "un", "une",
        # German
        "der", "die", "das", "ein", "eine",
        # Italian
        "il", "lo", "gli", "i",
    }
)  # fmt: skip

CHARACTER_FOLDS: dict[str, str] = {
    "à": "a", "á": "a", "â": "a", "ã": "a", "ä": "a", "å": "a", "æ": "ae",
    "ç": "c", "è": "e", "é": "e", "ê": "e", "ë": "e", "ì": "i", "í": "i",
    "î": "i", "ï": "i", "ñ": "n", "ò": "o", "ó": "o", "ô": "o", "õ": "o",
    "ö": "o", "ø": "o", "ù": "u", "ú": "u", "û": "u", "ü": "u", "ý": "y",
    "ÿ": "y", "ß": "ss", "œ": "oe",
}  # fmt: skip

CHARACTER_FOLD_TABLE = str.maketrans(CHARACTER_FOLDS)

# Whole-word abbreviation expansions, applied in order
ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("vs", "versus"),
    ("pt", "part"),
    ("vol", "volume"),
    ("ep", "episode"),
    ("ch", "chapter"),
    ("no", "number"),
    ("nr", "number"),
    ("num", "number"),
    ("&", "and"),
    ("w/", "with"),
    ("wo/", "without"),
)


def _abbreviation_rule(short: str, long: str) -> tuple[re.Pattern[str], str]:
    if short.isalnum():
        return re.compile(rf"\b{re.escape(short)}\b"), long
    # Symbolic forms ("&", "w/") may be glued to the next word
    prefix = r"\b" if short[0].isalnum() else ""
    return re.compile(prefix + re.escape(short)), f" {long} "


ABBREVIATION_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    _abbreviation_rule(short, long) for short, long in ABBREVIATIONS
)

# Release/quality/scene tags stripped before comparison, in order
RELEASE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Encoding, source and resolution tags
    re.compile(
        r"\b(yify|rarbg|etrg|ettv|x264|h264|h265|hevc|xvid|divx|ac3|dts|bluray|brrip|"
        r"webrip|hdtv|dvdrip|720p|1080p|2160p|4k|uhd)\b"
    ),
    # Scene tags
    re.compile(
        r"\b(internal|proper|repack|dubbed|subbed|unrated|extended|directors?.cut|"
        r"theatrical|imax|limited|festival|screener|cam|ts|tc)\b"
    ),
    # Audio formats
    re.compile(r"\b(aac|mp3|flac|dts-hd|truehd|atmos|dolby|surround|5\.1|7\.1)\b"),
    # Track and subtitle flags
    re.compile(r"\b(multi|dual|audio|subs?|hard\.?coded|hc|forced)\b"),
    # Bracketed and braced groups
    re.compile(r"\[.*?\]"),
    re.compile(r"\{.*?\}"),
    re.compile(
        r"\(.*?(720p|1080p|2160p|4k|x264|h264|h265|bluray|webrip|hdtv|dvdrip|year|\d{4}).*?\)"
    ),
    # Trailing release group, e.g. "-rarbg"
    re.compile(r"-\w+$"),
    # Video file extensions
    re.compile(r"\.(mkv|mp4|avi|mov|wmv|flv|webm|m4v)$"),
)

ROMAN_NUMERALS: dict[str, str] = {
    "i": "1", "ii": "2", "iii": "3", "iv": "4", "v": "5",
    "vi": "6", "vii": "7", "viii": "8", "ix": "9", "x": "10",
}  # fmt: skip

ROMAN_NUMERAL_PATTERN = re.compile(r"\b(?:part\s+)?([ivx]+)\b")

# --- Episode markers ------------------------------------------------------------

_SEP = r"[\s\-_\.]"


@dataclass(frozen=True)
class EpisodeRule:
    """One season/episode marker form.

    ``template`` is a regex with ``{s}``/``{e}`` (unpadded) and ``{sp}``/``{ep}``
    (zero-padded to two digits) placeholders. A trailing digit guard is added
    so ``s01e02`` never matches ``s01e021``.
    """

    name: str
    template: str
    score: float = 1.0
    method: MatchMethod = MatchMethod.EXACT_EPISODE

    def compile(self, season: int, episode: int) -> re.Pattern[str]:
        pattern = self.template.format(
            s=season,
            e=episode,
            sp=f"{season:02d}",
            ep=f"{episode:02d}",
        )
        return re.compile(pattern + r"(?!\d)", re.IGNORECASE)


# Tested in this order; first hit wins.
EPISODE_RULES: tuple[EpisodeRule, ...] = (
    EpisodeRule("sxxexx_padded", r"s{sp}e{ep}"),
    EpisodeRule("sxexx_unpadded", r"s{s}e{e}"),
    EpisodeRule("nxnn_padded", r"(?<!\d){s}x{ep}"),
    EpisodeRule("nxn_unpadded", r"(?<!\d){s}x{e}"),
    EpisodeRule("sxx_sep_exx_padded", r"s{sp}" + _SEP + r"*e{ep}"),
    EpisodeRule("sx_sep_ex_unpadded", r"s{s}" + _SEP + r"*e{e}"),
    EpisodeRule(
        "season_episode_words",
        r"season" + _SEP + r"*{s}" + _SEP + r"*episode" + _SEP + r"*{e}",
    ),
    EpisodeRule(
        "season_episode_words_padded",
        r"season" + _SEP + r"*{sp}" + _SEP + r"*episode" + _SEP + r"*{ep}",
    ),
    EpisodeRule("sx_ep_unpadded", r"s{s}" + _SEP + r"?ep?{e}"),
    EpisodeRule("sxx_ep_padded", r"s{sp}" + _SEP + r"?ep?{ep}"),
    EpisodeRule("sxnn_compact", r"\bs{s}{ep}"),
    EpisodeRule("sxxnn_compact", r"\bs{sp}{ep}"),
    EpisodeRule("dotted_sxx_exx", r"\.s{sp}\.e{ep}\."),
    EpisodeRule("dotted_nxnn", r"\.{s}x{ep}\."),
    EpisodeRule("bracketed_sxxexx", r"\[s{sp}e{ep}\]"),
    EpisodeRule("parenthesized_sxxexx", r"\(s{sp}e{ep}\)"),
    EpisodeRule("season_ep_words", r"season[\s\-_]*{s}[\s\-_]*ep[\s\-_]*{e}"),
    EpisodeRule("sx_space_nn", r"s{s}[\s\-_]*{ep}"),
)  # fmt: skip

# Standalone 1-3 digit numbers for fuzzy season/episode scanning
EPISODE_NUMBER_PATTERN = re.compile(r"(?<![a-z0-9])\d{1,3}(?![a-z0-9])")

EPISODE_ONLY_MAX = 50

SEASON_PACK_TEMPLATE = r"season[\s\-_]*{s}(?!\d)"

# --- Identifier markers ---------------------------------------------------------

# Direct forms; {num} is the numeric core, {full} the whole identifier.
IDENTIFIER_DIRECT_TEMPLATES: tuple[str, ...] = (
    r"\btt{num}\b",
    r"\b{num}\b",
    r"imdb[\s\-_]*{num}",
    r"\[{num}\]",
    r"\({num}\)",
    r"\b{full}\b",
)

# Separator-tolerant forms
IDENTIFIER_SEPARATOR_TEMPLATES: tuple[str, ...] = (
    r"imdb" + _SEP + r"*{num}",
    r"tt" + _SEP + r"*{num}",
    r"\b{num}" + _SEP + r"*imdb",
)

IDENTIFIER_NUMBER_PATTERN = re.compile(r"\b\d{6,8}\b")

# --- Title extraction -----------------------------------------------------------

TITLE_PREFIX_PATTERN = re.compile(r"^(www\.|download\.|get\.|watch\.|stream\.)", re.IGNORECASE)
TITLE_SUFFIX_PATTERN = re.compile(r"\.(com|org|net|tv|me|to)$", re.IGNORECASE)

# 4-digit year not glued to other letters/digits ("2160p" is not a year)
TITLE_YEAR_PATTERN = re.compile(r"(?<![0-9A-Za-z])(?:19|20)\d{2}(?![0-9A-Za-z])")
YEAR_TAIL_MAX_LENGTH = 10
YEAR_TAIL_NOISE_PATTERN = re.compile(r"[\s\-._\[\]()]*")

EPISODE_MARKER_CUT_PATTERN = re.compile(
    r"\b(s\d{1,2}e\d{1,2}|season\s*\d+|episode\s*\d+|\d+x\d+)\b.*$", re.IGNORECASE
)

TITLE_CUT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b\d{3,4}p\b.*$", re.IGNORECASE),
    re.compile(r"\bhdtv\b.*$", re.IGNORECASE),
    re.compile(r"\bbluray\b.*$", re.IGNORECASE),
    re.compile(r"\bwebrip\b.*$", re.IGNORECASE),
    re.compile(r"\bx264\b.*$", re.IGNORECASE),
    re.compile(r"\bh264\b.*$", re.IGNORECASE),
    re.compile(r"\[-.*?-\]$"),
)

YEAR_MIN = 1920
YEAR_MAX = 2030

SUSPICIOUS_MARKER_PATTERN = re.compile(
    r"\b(sample|trailer|teaser|preview|clip|demo|test)\b", re.IGNORECASE
)

SHORT_TITLE_LENGTH = 5

# --- Filename analysis ----------------------------------------------------------

QUALITY_TAG_PATTERN = re.compile(r"\b(1080p|720p|4k|bluray|web-dl|webrip)\b", re.IGNORECASE)
NEGATIVE_TAG_PATTERN = re.compile(r"\b(sample|trailer|preview|cam|ts|screener)\b", re.IGNORECASE)
