"""Ordered fallback across LLM providers.

The orchestrator owns three things no individual adapter can:

1. **Ordering** -- providers are attempted in the configured order; the
   first success wins and no later provider is called.
2. **Deadlines** -- every attempt is wrapped in ``asyncio.wait_for`` with
   ``limits.provider_timeout_seconds``, so a hung provider costs one
   bounded slice of the request instead of stalling the chain.
3. **Classification** -- every failed attempt is reduced to a
   :class:`ProviderUnavailableError` carrying an :class:`ErrorKind`, and
   logged.  Callers only ever see the terminal
   :class:`NoProviderAvailableError`.

With ``features.enable_fallback`` off, the first failure is terminal.
An empty or whitespace-only completion counts as a failure.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import structlog

from museflow.config.runtime import RuntimeConfig
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.models.provider import PromptRequest, ProviderResult
from museflow.utils.errors import (
    ErrorKind,
    NoProviderAvailableError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

logger = structlog.get_logger(logger_name=__name__)

# Substrings used to classify exceptions raised outside our hierarchy
# (host-supplied callables, unexpected SDK errors).
_RATE_LIMIT_HINTS = ("rate limit", "rate_limit", "429", "too many requests", "quota")
_AUTH_HINTS = ("401", "403", "unauthorized", "forbidden", "api key", "api_key", "authentication")
_UNAVAILABLE_HINTS = ("unavailable", "503", "502", "connection", "unreachable", "not available")


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any exception raised by a provider attempt to an :class:`ErrorKind`."""
    if isinstance(exc, ProviderUnavailableError):
        return exc.kind
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ErrorKind.TIMEOUT

    text = str(exc).lower()
    if any(hint in text for hint in _RATE_LIMIT_HINTS):
        return ErrorKind.RATE_LIMIT
    if any(hint in text for hint in _AUTH_HINTS):
        return ErrorKind.AUTH
    if isinstance(exc, ConnectionError) or any(hint in text for hint in _UNAVAILABLE_HINTS):
        return ErrorKind.UNAVAILABLE
    return ErrorKind.UNKNOWN


class ProviderOrchestrator:
    """Call providers in order until one returns usable text.

    Parameters
    ----------
    providers:
        The registered chain, re-sorted by ``provider_order`` on each
        call.  Providers whose :meth:`is_available` is false
        at call time are skipped without counting as an attempt.
    config:
        Runtime configuration, read on every call.
    """

    def __init__(self, providers: Sequence[ILLMProvider], config: RuntimeConfig) -> None:
        self._providers = list(providers)
        self._config = config

    @property
    def providers(self) -> list[ILLMProvider]:
        return list(self._providers)

    def provider_names(self) -> list[str]:
        return [p.get_provider_name() for p in self._providers]

    def get_provider(self, name: str) -> ILLMProvider | None:
        """Return the provider registered under *name*, if any."""
        wanted = name.strip().lower()
        for provider in self._providers:
            if provider.get_provider_name().lower() == wanted:
                return provider
        return None

    def ordered_providers(self, order: Sequence[str]) -> list[ILLMProvider]:
        """Arrange the chain by *order*.

        Named providers come first, in *order*; names with no registered
        provider are skipped.  Providers *order* does not name follow in
        registration order.
        """
        ordered: list[ILLMProvider] = []
        for name in order:
            provider = self.get_provider(name)
            if provider is not None and provider not in ordered:
                ordered.append(provider)
        ordered.extend(p for p in self._providers if p not in ordered)
        return ordered

    async def call(self, request: PromptRequest) -> ProviderResult:
        """Run *request* through the chain and return the first success.

        Raises:
            NoProviderAvailableError: If no provider is configured, or
                every attempted provider failed (or the first failed with
                fallback disabled).
        """
        config = self._config.get()
        candidates = [p for p in self.ordered_providers(config.provider_order) if p.is_available()]
        if not candidates:
            logger.error("no_providers_configured")
            raise NoProviderAvailableError("No AI providers configured")

        timeout = config.limits.provider_timeout_seconds
        failures: list[ProviderUnavailableError] = []

        for attempt, provider in enumerate(candidates, start=1):
            name = provider.get_provider_name()
            started = time.perf_counter()
            try:
                text = await asyncio.wait_for(
                    provider.complete(
                        request.prompt,
                        temperature=request.temperature,
                        max_tokens=request.max_tokens,
                    ),
                    timeout=timeout,
                )
                if not isinstance(text, str) or not text.strip():
                    raise ProviderUnavailableError(
                        message="Provider returned empty response",
                        provider_name=name,
                        kind=ErrorKind.EMPTY_RESPONSE,
                    )
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001 -- every failure is classified
                failure = self._to_failure(exc, name, timeout)
                failures.append(failure)
                logger.warning(
                    "provider_failed",
                    provider=name,
                    attempt=attempt,
                    kind=failure.kind.value,
                    error=failure.message,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                if not config.features.enable_fallback:
                    break
                continue

            logger.info(
                "provider_succeeded",
                provider=name,
                attempt=attempt,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return ProviderResult(
                text=text,
                provider_name=name,
                model=provider.get_model_name(),
            )

        summary = "; ".join(f"{f.provider_name}: {f.kind.value}" for f in failures)
        logger.error("all_providers_failed", attempts=len(failures), failures=summary)
        raise NoProviderAvailableError(
            message=f"All AI providers failed ({summary})",
            failures=failures,
        )

    @staticmethod
    def _to_failure(exc: Exception, name: str, timeout: float) -> ProviderUnavailableError:
        if isinstance(exc, ProviderUnavailableError):
            if exc.provider_name:
                return exc
            return ProviderUnavailableError(message=exc.message, provider_name=name, kind=exc.kind)
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
            return ProviderTimeoutError(timeout_seconds=timeout, provider_name=name)
        return ProviderUnavailableError(
            message=str(exc) or type(exc).__name__,
            provider_name=name,
            kind=classify_error(exc),
        )
