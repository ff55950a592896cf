"""Pydantic v2 data models for MuseFlow."""

from museflow.models.actions import (
    CONTENT_ACTIONS,
    ActionKind,
    ActionRequest,
    ActionResponse,
    RequestSource,
    ResponseMetadata,
)
from museflow.models.cache import CacheEntry, CacheStats
from museflow.models.config import AppConfig, FeatureFlags, Limits
from museflow.models.provider import PromptRequest, ProviderResult
from museflow.models.results import (
    Idea,
    IdeateOptions,
    IdeateResult,
    RewriteOptions,
    RewriteResult,
    SummarizeOptions,
    SummaryResult,
    TranslateOptions,
    TranslationResult,
)

__all__ = [
    "CONTENT_ACTIONS",
    "ActionKind",
    "ActionRequest",
    "ActionResponse",
    "AppConfig",
    "CacheEntry",
    "CacheStats",
    "FeatureFlags",
    "Idea",
    "IdeateOptions",
    "IdeateResult",
    "Limits",
    "PromptRequest",
    "ProviderResult",
    "RequestSource",
    "ResponseMetadata",
    "RewriteOptions",
    "RewriteResult",
    "SummarizeOptions",
    "SummaryResult",
    "TranslateOptions",
    "TranslationResult",
]
