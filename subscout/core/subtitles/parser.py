"""Subtitle filename parsing: language, flags, quality and release group."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger("subscout.subtitles.parser")

# (pattern, language code, priority); the highest-priority hit wins
LANGUAGE_PATTERNS: tuple[tuple[re.Pattern[str], str, int], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), code, priority)
    for pattern, code, priority in (
        (r"\b(en|eng|english)\b", "en", 10),
        (r"\b(us|usa|american)\b", "en", 8),
        (r"\b(uk|british)\b", "en", 8),
        (r"\b(es|esp|spanish|espanol|español)\b", "es", 10),
        (r"\b(latin|latino|latam)\b", "es", 8),
        (r"\b(fr|fre|french|francais|français)\b", "fr", 10),
        (r"\b(de|ger|german|deutsch)\b", "de", 10),
        (r"\b(it|ita|italian|italiano)\b", "it", 10),
        (r"\b(pt|por|portuguese|portugues|português)\b", "pt", 10),
        (r"\b(br|brazil|brazilian)\b", "pt-br", 9),
        (r"\b(ru|rus|russian)\b", "ru", 10),
        (r"\b(zh|chi|chinese|mandarin)\b", "zh", 10),
        (r"\b(ja|jpn|japanese)\b", "ja", 10),
        (r"\b(ko|kor|korean)\b", "ko", 10),
        (r"\b(ar|ara|arabic)\b", "ar", 10),
        (r"\b(hi|hin|hindi)\b", "hi", 10),
        (r"\b(nl|dut|dutch)\b", "nl", 10),
        (r"\b(sv|swe|swedish)\b", "sv", 10),
        (r"\b(no|nor|norwegian)\b", "no", 10),
        (r"\b(da|dan|danish)\b", "da", 10),
        (r"\b(fi|fin|finnish)\b", "fi", 10),
    )
)

MULTI_LANGUAGE_PATTERN = re.compile(r"\b(multi|dual)\b", re.IGNORECASE)
FORCED_PATTERN = re.compile(r"\b(forced|foreign)\b", re.IGNORECASE)
SDH_PATTERN = re.compile(r"\b(sdh|deaf|hard\.?of\.?hearing|cc|closed\.?caption)\b", re.IGNORECASE)

QUALITY_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b2160p\b", re.IGNORECASE), "4K"),
    (re.compile(r"\b1080p\b", re.IGNORECASE), "1080p"),
    (re.compile(r"\b720p\b", re.IGNORECASE), "720p"),
    (re.compile(r"\b480p\b", re.IGNORECASE), "480p"),
    (re.compile(r"\b4k\b", re.IGNORECASE), "4K"),
    (re.compile(r"\buhd\b", re.IGNORECASE), "4K"),
    (re.compile(r"\bhd\b", re.IGNORECASE), "HD"),
)

RELEASE_GROUP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\[([A-Z0-9]+)\]$", re.IGNORECASE),  # [RARBG]
    re.compile(r"-([A-Z0-9]+)$", re.IGNORECASE),  # -YIFY
    re.compile(r"\.([A-Z0-9]+)$", re.IGNORECASE),  # .ETRG
    re.compile(r"\(([A-Z0-9]+)\)$", re.IGNORECASE),  # (FGT)
)

_CLEAN_RELEASE_TAGS = re.compile(
    r"\.(720p|1080p|2160p|4k|x264|h264|h265|bluray|webrip|hdtv|dvdrip)", re.IGNORECASE
)
_CLEAN_BRACKETS = re.compile(r"\[.*?\]")
_CLEAN_GROUP_SUFFIX = re.compile(r"-[A-Z0-9]+$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "pt-br": "Portuguese (Brazil)",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "nl": "Dutch",
    "sv": "Swedish",
    "no": "Norwegian",
    "da": "Danish",
    "fi": "Finnish",
    "multi": "Multiple Languages",
    "other": "Other",
}


class SubtitleFileInfo(BaseModel):
    """What a subtitle filename tells us besides its title."""

    filename: str
    basename: str = Field(..., description="Filename without directory and extension")
    extension: str = Field(..., description="Lowercase extension without the dot")
    language: str = Field(default="other", description="Language code, 'multi' or 'other'")
    is_forced: bool = False
    is_sdh: bool = False
    quality: str | None = None
    release_group: str | None = None

    @property
    def format(self) -> str:
        return self.extension


def detect_language(basename: str) -> str:
    """Detect a language code from a filename without extension.

    Multi/dual-language markers win over any single language.
    """
    if MULTI_LANGUAGE_PATTERN.search(basename):
        return "multi"

    best_code, best_priority = "other", 0
    for pattern, code, priority in LANGUAGE_PATTERNS:
        if priority > best_priority and pattern.search(basename):
            best_code, best_priority = code, priority
    return best_code


def detect_forced(basename: str) -> bool:
    return FORCED_PATTERN.search(basename) is not None


def detect_sdh(basename: str) -> bool:
    return SDH_PATTERN.search(basename) is not None


def detect_quality(basename: str) -> str | None:
    for pattern, quality in QUALITY_PATTERNS:
        if pattern.search(basename):
            return quality
    return None


def detect_release_group(basename: str) -> str | None:
    for pattern in RELEASE_GROUP_PATTERNS:
        match = pattern.search(basename)
        if match:
            return match.group(1).upper()
    return None


def parse_subtitle_filename(filename: str) -> SubtitleFileInfo:
    """Parse a subtitle filename into language, flags, quality and release group."""
    path = PurePosixPath(filename)
    basename = path.stem
    info = SubtitleFileInfo(
        filename=filename,
        basename=basename,
        extension=path.suffix.lower().lstrip("."),
        language=detect_language(basename),
        is_forced=detect_forced(basename),
        is_sdh=detect_sdh(basename),
        quality=detect_quality(basename),
        release_group=detect_release_group(basename),
    )
    logger.debug("Parsed subtitle filename", filename=filename, language=info.language)
    return info


def clean_filename(filename: str) -> str:
    """Human-friendly display name: release tags, brackets and dots removed."""
    cleaned = PurePosixPath(filename).stem
    cleaned = _CLEAN_RELEASE_TAGS.sub("", cleaned)
    cleaned = _CLEAN_BRACKETS.sub("", cleaned)
    cleaned = _CLEAN_GROUP_SUFFIX.sub("", cleaned)
    cleaned = cleaned.replace(".", " ")
    return _WHITESPACE.sub(" ", cleaned).strip()


def get_language_name(code: str) -> str:
    """English name of a language code (the code itself when unknown)."""
    return LANGUAGE_NAMES.get(code, code)
