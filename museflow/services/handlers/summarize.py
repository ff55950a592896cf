"""Summarize action handler."""

from __future__ import annotations

from typing import Any

from museflow.models.actions import ActionKind
from museflow.models.results import SummarizeOptions, SummaryResult
from museflow.services.handlers.base import BaseActionHandler
from museflow.services.prompt_builder import build_summarize_prompt
from museflow.utils.text_metrics import (
    clamp_score,
    confidence_to_level,
    count_sentences,
    extract_bullet_points,
)

_MAX_TOKENS = {"short": 150, "medium": 300, "long": 500}
_TEMPERATURE = 0.3
_COHERENCE_MARKERS = ("The", "This", "It")


def score_summary(summary: str) -> float:
    """Heuristic quality score for a summary.

    0.5 base; +0.2 for a length of 50-1000 chars; +0.2 for 2-10 sentences;
    +0.1 if it reads like prose (contains "The", "This" or "It").
    """
    score = 0.5
    if 50 <= len(summary) <= 1000:
        score += 0.2
    if 2 <= count_sentences(summary) <= 10:
        score += 0.2
    if any(marker in summary for marker in _COHERENCE_MARKERS):
        score += 0.1
    return clamp_score(score)


class SummarizeHandler(BaseActionHandler):
    action = ActionKind.SUMMARIZE
    options_model = SummarizeOptions

    def build_prompt(self, text: str, options: SummarizeOptions, context: dict[str, Any]) -> str:
        return build_summarize_prompt(text, options)

    def sampling(self, text: str, options: SummarizeOptions) -> tuple[int, float]:
        return _MAX_TOKENS[options.summary_length], _TEMPERATURE

    def parse_response(
        self,
        raw_text: str,
        text: str,
        options: SummarizeOptions,
        context: dict[str, Any],
    ) -> SummaryResult:
        summary = raw_text.strip()
        confidence = score_summary(summary)
        return SummaryResult(
            summary=summary,
            key_points=extract_bullet_points(summary) if options.include_key_points else [],
            confidence=confidence,
            confidence_level=confidence_to_level(confidence).value,
            original_length=len(text),
            summary_length=len(summary),
            compression_ratio=round(len(summary) / len(text), 3) if text else 0.0,
            provider="",
        )
