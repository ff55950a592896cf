"""Text measurement and scoring helpers shared by the action handlers.

Every action handler post-processes raw provider text in the same few
ways: count sentences and words, pull out bullet points, drop a header
line the model added ("Here is the rewritten version:"), and derive a
heuristic 0.0--1.0 score.  Keeping the arithmetic here means the handlers
only decide *which* signals matter for their action.

Scores are heuristics, not model probabilities.  They exist so the UI can
badge a weak response, and so tests can pin behaviour down.
"""

from __future__ import annotations

import re
from enum import Enum

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_BULLET_RE = re.compile(r"^(?:[•\-*◦]|\d+[.)])\s*")
_NON_ALPHA_RE = re.compile(r"[^a-z]")

TRUNCATION_MARKER = "..."


class ConfidenceLevel(Enum):
    """Human-readable confidence tiers shown next to a result."""

    VERY_LOW = "very_low"    # < 0.2
    LOW = "low"              # 0.2 - 0.4
    MEDIUM = "medium"        # 0.4 - 0.6
    HIGH = "high"            # 0.6 - 0.8
    VERY_HIGH = "very_high"  # >= 0.8


def confidence_to_level(score: float) -> ConfidenceLevel:
    """Map a numeric score to a :class:`ConfidenceLevel` (0.2-wide bands)."""
    if score < 0.2:
        return ConfidenceLevel.VERY_LOW
    if score < 0.4:
        return ConfidenceLevel.LOW
    if score < 0.6:
        return ConfidenceLevel.MEDIUM
    if score < 0.8:
        return ConfidenceLevel.HIGH
    return ConfidenceLevel.VERY_HIGH


def clamp_score(value: float) -> float:
    """Clamp to [0.0, 1.0] and round to 3 places for stable JSON output."""
    return round(max(0.0, min(1.0, value)), 3)


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------

def truncate_text(text: str, max_length: int) -> tuple[str, bool]:
    """Cut *text* to *max_length* characters and append the marker.

    Returns the (possibly shortened) text and whether it was truncated.
    """
    if len(text) <= max_length:
        return text, False
    return f"{text[:max_length]}{TRUNCATION_MARKER}", True


def count_sentences(text: str) -> int:
    return len([s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()])


def count_words(text: str) -> int:
    return len(text.split())


def count_paragraphs(text: str) -> int:
    return len([p for p in _PARAGRAPH_SPLIT_RE.split(text.strip()) if p.strip()])


def count_syllables(word: str) -> int:
    """Approximate English syllables by counting vowel groups.

    A trailing silent ``e`` is discounted; every non-empty word has at
    least one syllable.
    """
    clean = _NON_ALPHA_RE.sub("", word.lower())
    if not clean:
        return 0

    syllables = 0
    previous_was_vowel = False
    for char in clean:
        is_vowel = char in "aeiouy"
        if is_vowel and not previous_was_vowel:
            syllables += 1
        previous_was_vowel = is_vowel

    if clean.endswith("e") and syllables > 1:
        syllables -= 1
    return max(1, syllables)


def readability_score(text: str) -> float:
    """Flesch reading-ease score clamped to [0, 100]; 0 for empty text."""
    sentences = count_sentences(text)
    words = text.split()
    if sentences == 0 or not words:
        return 0.0
    syllables = sum(count_syllables(w) for w in words)
    score = 206.835 - 1.015 * (len(words) / sentences) - 84.6 * (syllables / len(words))
    return round(max(0.0, min(100.0, score)), 1)


# ---------------------------------------------------------------------------
# Response clean-up
# ---------------------------------------------------------------------------

def extract_bullet_points(text: str) -> list[str]:
    """Return the content of every bulleted or numbered line in *text*."""
    points: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not _BULLET_RE.match(stripped):
            continue
        point = _BULLET_RE.sub("", stripped, count=1).strip()
        if point:
            points.append(point)
    return points


def strip_list_marker(line: str) -> str:
    return _BULLET_RE.sub("", line.strip(), count=1).strip()


def strip_header_lines(text: str, header_words: tuple[str, ...]) -> str:
    """Drop leading lines that mention any of *header_words*.

    Models like to open with "Here is the translated text:"; everything
    from the first line that does not look like such a header is kept.
    """
    lines = text.strip().split("\n")
    start = 0
    for index, line in enumerate(lines):
        lowered = line.strip().lower()
        if lowered and not any(word in lowered for word in header_words):
            start = index
            break
    else:
        # Every line looked like a header; keep the response untouched.
        return text.strip()
    return "\n".join(lines[start:]).strip()
