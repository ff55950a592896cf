"""Runtime configuration models.

``AppConfig`` is the read-only snapshot that CacheStore and the provider
orchestrator consult on every operation.  It is built once at startup by
:func:`museflow.config.loader.load_config` and replaced wholesale by
:class:`museflow.config.runtime.RuntimeConfig` when a caller sends an
``updateSettings`` request.

Field names are snake_case in Python and camelCase on the wire
(``features.enableCaching``, ``limits.cacheTtlMs``), matching what the
host extension already stores.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class FeatureFlags(BaseModel):
    """On/off switches for optional behaviour."""

    model_config = _CONFIG

    enable_caching: bool = True
    # When False, per-request info events are skipped; errors still log.
    enable_logging: bool = True
    # When False, the first provider failure is terminal.
    enable_fallback: bool = True


class Limits(BaseModel):
    """Numeric bounds applied to requests and to the cache."""

    model_config = _CONFIG

    max_text_length: int = Field(default=5000, ge=1)
    min_text_length: int = Field(default=10, ge=0)
    max_cache_entries: int = Field(default=100, ge=0)
    cache_ttl_ms: int = Field(default=24 * 60 * 60 * 1000, ge=0)
    provider_timeout_seconds: float = Field(default=10.0, gt=0)


class AppConfig(BaseModel):
    """Complete runtime configuration snapshot."""

    model_config = _CONFIG

    features: FeatureFlags = Field(default_factory=FeatureFlags)
    limits: Limits = Field(default_factory=Limits)
    # Provider names in the order they are attempted.
    provider_order: list[str] = Field(
        default_factory=lambda: ["openai", "anthropic", "gemini", "ollama"]
    )
