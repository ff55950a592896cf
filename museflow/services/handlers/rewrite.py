"""Rewrite action handler.

Besides the rewritten text, the result reports how the text changed:
word and sentence count deltas and Flesch reading-ease before and after.
"""

from __future__ import annotations

from typing import Any

from museflow.models.actions import ActionKind
from museflow.models.results import RewriteChanges, RewriteOptions, RewriteResult
from museflow.services.handlers.base import BaseActionHandler
from museflow.services.prompt_builder import build_rewrite_prompt
from museflow.utils.text_metrics import (
    clamp_score,
    confidence_to_level,
    count_sentences,
    count_words,
    readability_score,
    strip_header_lines,
)

_TEMPERATURE = 0.4
_MAX_TOKENS_CAP = 2000
_HEADER_WORDS = ("rewritten", "version")

# Words whose presence suggests the requested tone was actually applied.
TONE_INDICATORS: dict[str, tuple[str, ...]] = {
    "formal": ("therefore", "furthermore", "consequently", "moreover"),
    "casual": ("actually", "really", "pretty", "kind of"),
    "professional": ("recommend", "suggest", "propose", "indicate"),
    "creative": ("imagine", "picture", "envision", "visualize"),
    "academic": ("thus", "hence", "whereas", "notably"),
    "conversational": ("you", "we", "let's", "just"),
}


def score_rewrite(original: str, rewritten: str, tone: str) -> float:
    """Heuristic quality score for a rewrite.

    0.5 base; +0.2 if the length stays within 0.7-1.5x of the original;
    +0.2 if the sentence count did not balloon past 1.5x; +0.1 if any
    indicator word for the requested tone appears.
    """
    score = 0.5
    if original:
        ratio = len(rewritten) / len(original)
        if 0.7 <= ratio <= 1.5:
            score += 0.2

    original_sentences = count_sentences(original)
    rewritten_sentences = count_sentences(rewritten)
    if 0 < rewritten_sentences <= original_sentences * 1.5:
        score += 0.2

    lowered = rewritten.lower()
    if any(word in lowered for word in TONE_INDICATORS.get(tone, ())):
        score += 0.1
    return clamp_score(score)


class RewriteHandler(BaseActionHandler):
    action = ActionKind.REWRITE
    options_model = RewriteOptions

    def build_prompt(self, text: str, options: RewriteOptions, context: dict[str, Any]) -> str:
        return build_rewrite_prompt(text, options)

    def sampling(self, text: str, options: RewriteOptions) -> tuple[int, float]:
        return max(1, min(int(len(text) * 1.5), _MAX_TOKENS_CAP)), _TEMPERATURE

    def parse_response(
        self,
        raw_text: str,
        text: str,
        options: RewriteOptions,
        context: dict[str, Any],
    ) -> RewriteResult:
        rewritten = strip_header_lines(raw_text, _HEADER_WORDS)
        confidence = score_rewrite(text, rewritten, options.tone)
        return RewriteResult(
            rewritten_text=rewritten,
            original_text=text,
            tone=options.tone,
            changes=RewriteChanges(
                word_count_change=count_words(rewritten) - count_words(text),
                sentence_count_change=count_sentences(rewritten) - count_sentences(text),
                readability_score=readability_score(rewritten),
                original_readability_score=readability_score(text),
            ),
            confidence=confidence,
            confidence_level=confidence_to_level(confidence).value,
            original_length=len(text),
            rewritten_length=len(rewritten),
            provider="",
        )
