"""Shared request flow for content actions.

Every content action runs the same pipeline; subclasses only supply the
action-specific pieces (options model, prompt, sampling parameters, and
response parsing):

    validate length -> truncate -> effective options -> cache lookup
      -> hit:  parse cached text
      -> miss: build prompt -> orchestrator -> parse -> cache store

The cache key is derived from the *truncated* text and the *effective*
options (defaults applied), so requests that differ only in omitted
defaults share an entry.  A result is cached only after it has been
parsed successfully; a provider answer of ``INSUFFICIENT_CONTEXT`` is
surfaced as an input error and never cached.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from museflow.config.runtime import RuntimeConfig
from museflow.models.actions import ActionKind
from museflow.models.provider import PromptRequest, ProviderResult
from museflow.models.results import ActionOptions
from museflow.services.cache_store import CacheStore
from museflow.services.prompt_builder import INSUFFICIENT_CONTEXT_SENTINEL
from museflow.services.provider_orchestrator import ProviderOrchestrator
from museflow.utils.errors import InsufficientInputError, ValidationError
from museflow.utils.text_metrics import truncate_text

logger = structlog.get_logger(logger_name=__name__)


class BaseActionHandler(ABC):
    """Template for one content action.

    Parameters
    ----------
    cache:
        Result cache shared by every handler.
    orchestrator:
        Provider fallback chain shared by every handler.
    config:
        Runtime configuration, read on every request.
    """

    action: ActionKind
    options_model: type[ActionOptions]

    def __init__(
        self,
        cache: CacheStore,
        orchestrator: ProviderOrchestrator,
        config: RuntimeConfig,
    ) -> None:
        self._cache = cache
        self._orchestrator = orchestrator
        self._config = config

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def build_prompt(self, text: str, options: Any, context: dict[str, Any]) -> str:
        """Return the provider prompt for *text*."""

    @abstractmethod
    def sampling(self, text: str, options: Any) -> tuple[int, float]:
        """Return ``(max_tokens, temperature)`` for this request."""

    @abstractmethod
    def parse_response(
        self,
        raw_text: str,
        text: str,
        options: Any,
        context: dict[str, Any],
    ) -> BaseModel:
        """Turn raw provider text into this action's result model.

        ``cached``, ``provider`` and ``truncated`` are filled in by
        :meth:`handle`; implementations pass placeholder values.
        """

    def prepare(self, text: str, options: Any) -> dict[str, Any]:
        """Compute per-request context (e.g. detected language).  Optional."""
        return {}

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    def parse_options(self, options: Mapping[str, Any] | None) -> ActionOptions:
        """Validate the raw options map into the effective options model."""
        try:
            return self.options_model.model_validate(dict(options or {}))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "options"
            raise ValidationError(f"Invalid option '{field}': {first['msg']}") from exc

    async def handle(self, text: str, options: Mapping[str, Any] | None = None) -> BaseModel:
        """Run the full cache-or-provider flow for one request."""
        limits = self._config.get().limits
        text = (text or "").strip()
        if len(text) < limits.min_text_length:
            raise InsufficientInputError(min_length=limits.min_text_length)

        text, truncated = truncate_text(text, limits.max_text_length)
        if truncated:
            logger.warning("input_truncated", action=self.action.value, max_length=limits.max_text_length)

        effective = self.parse_options(options)
        context = self.prepare(text, effective)
        fingerprint_options = effective.fingerprint_dict()

        cached = await self._cache.lookup(self.action.value, text, fingerprint_options)
        if cached is not None:
            result = self.parse_response(cached.text, text, effective, context)
            return self._finish(result, cached, truncated=truncated, from_cache=True)

        max_tokens, temperature = self.sampling(text, effective)
        provider_result = await self._orchestrator.call(
            PromptRequest(
                prompt=self.build_prompt(text, effective, context),
                max_tokens=max_tokens,
                temperature=temperature,
            )
        )

        if provider_result.text.strip().upper().startswith(INSUFFICIENT_CONTEXT_SENTINEL):
            raise InsufficientInputError(
                min_length=limits.min_text_length,
                provider_name=provider_result.provider_name,
            )

        result = self.parse_response(provider_result.text, text, effective, context)
        await self._cache.store(self.action.value, text, fingerprint_options, provider_result)
        return self._finish(result, provider_result, truncated=truncated, from_cache=False)

    def _finish(
        self,
        result: BaseModel,
        provider_result: ProviderResult,
        *,
        truncated: bool,
        from_cache: bool,
    ) -> BaseModel:
        if self._config.get().features.enable_logging:
            logger.info(
                "action_completed",
                action=self.action.value,
                provider=provider_result.provider_name,
                cached=from_cache,
            )
        return result.model_copy(
            update={
                "cached": from_cache,
                "provider": provider_result.provider_name,
                "truncated": truncated,
            }
        )
