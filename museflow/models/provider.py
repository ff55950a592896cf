"""Provider-facing request and result models.

``PromptRequest`` is what an action handler hands to the orchestrator;
``ProviderResult`` is the one normalized shape that comes back regardless
of which upstream service answered.  Both are frozen: a ProviderResult is
embedded verbatim in a CacheEntry and must never change after it is
written.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PromptRequest(BaseModel):
    """A provider-agnostic completion request."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(min_length=1)
    max_tokens: int = Field(default=1000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class ProviderResult(BaseModel):
    """Normalized output of a successful provider call."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    text: str
    provider_name: str
    model: str | None = None
    timestamp_iso: str = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc).isoformat()  # noqa: UP017
    )
    tokens_used: int | None = None
