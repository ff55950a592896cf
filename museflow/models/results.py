"""Per-action option and result models.

Options arrive as a free-form ``options`` map on the request.  Each
handler validates that map into its own options model, which fills in
defaults; the *effective* options (defaults applied, aliases resolved)
are what the cache fingerprints, so ``{}`` and ``{"summaryLength":
"medium"}`` address the same cache entry.

Unknown option keys are kept (``extra="allow"``) because hosts pass
UI-only hints through the same map; they still participate in the
fingerprint.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

_OPTIONS_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="allow",
    frozen=True,
)
_RESULT_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

Level = Literal["low", "medium", "high"]


class ActionOptions(BaseModel):
    """Common base: every options model can render its fingerprint form."""

    model_config = _OPTIONS_CONFIG

    def fingerprint_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Summarize
# ---------------------------------------------------------------------------

class SummarizeOptions(ActionOptions):
    summary_length: Literal["short", "medium", "long"] = "medium"
    include_key_points: bool = False
    focus_areas: list[str] = Field(default_factory=list)


class SummaryResult(BaseModel):
    model_config = _RESULT_CONFIG

    summary: str
    key_points: list[str] = Field(default_factory=list)
    confidence: float
    confidence_level: str
    original_length: int
    summary_length: int
    compression_ratio: float
    truncated: bool = False
    cached: bool = False
    provider: str


# ---------------------------------------------------------------------------
# Rewrite
# ---------------------------------------------------------------------------

class RewriteStyle(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    active_voice: bool = False
    simplify: bool = False
    descriptive: bool = False
    clarity: bool = False


class RewriteOptions(ActionOptions):
    tone: Literal[
        "formal", "casual", "professional", "creative", "academic", "conversational"
    ] = "professional"
    style: RewriteStyle = Field(default_factory=RewriteStyle)
    audience: Literal["general", "technical", "academic", "business", "casual"] | None = None
    improvements: list[str] = Field(default_factory=list)


class RewriteChanges(BaseModel):
    model_config = _RESULT_CONFIG

    word_count_change: int
    sentence_count_change: int
    readability_score: float
    original_readability_score: float


class RewriteResult(BaseModel):
    model_config = _RESULT_CONFIG

    rewritten_text: str
    original_text: str
    tone: str
    changes: RewriteChanges
    confidence: float
    confidence_level: str
    original_length: int
    rewritten_length: int
    truncated: bool = False
    cached: bool = False
    provider: str


# ---------------------------------------------------------------------------
# Ideate
# ---------------------------------------------------------------------------

class IdeateOptions(ActionOptions):
    idea_count: int = Field(default=5, ge=1, le=20)
    idea_type: Literal["creative", "practical", "strategic", "innovative", "mixed"] = "mixed"
    # Reframes the source text before ideating (what-if scenarios,
    # problem-solving, or opportunity spotting).
    framing: Literal["general", "scenario", "problem", "opportunity"] = "general"
    domain: str | None = None
    focus_areas: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    audience: str | None = None
    timeframe: Literal["short", "medium", "long"] | None = None


class Idea(BaseModel):
    model_config = _RESULT_CONFIG

    title: str = "Untitled Idea"
    description: str = "No description provided"
    implementation: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    effort_level: Level = "medium"
    impact_level: Level = "medium"


class IdeateResult(BaseModel):
    model_config = _RESULT_CONFIG

    ideas: list[Idea]
    idea_count: int
    creativity_score: float
    domain: str | None = None
    focus_areas: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    truncated: bool = False
    cached: bool = False
    provider: str


# ---------------------------------------------------------------------------
# Translate
# ---------------------------------------------------------------------------

class TranslateOptions(ActionOptions):
    target_language: str = "English"
    # None means "detect from the text".
    source_language: str | None = None
    style: Literal["formal", "informal", "technical", "literary", "conversational"] | None = None
    domain: Literal["business", "technical", "medical", "legal", "academic"] | None = None
    preserve_formatting: bool = True
    cultural_adaptation: bool = False

    @field_validator("target_language", "source_language", mode="before")
    @classmethod
    def _normalize_language(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, str):
            return value
        value = value.strip()
        if not value:
            return "English" if info.field_name == "target_language" else None
        return value.title() if len(value) > 3 else value.lower()


class TranslationResult(BaseModel):
    model_config = _RESULT_CONFIG

    translated_text: str
    original_text: str
    source_language: str
    target_language: str
    source_language_code: str | None = None
    target_language_code: str | None = None
    source_language_detected: bool = False
    confidence: float
    confidence_level: str
    quality_score: float
    original_length: int
    translated_length: int
    truncated: bool = False
    cached: bool = False
    provider: str
