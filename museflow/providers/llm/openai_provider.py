"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
When ``openai_base_url`` is configured (TogetherAI, Groq, Fireworks, ...)
the client points at that URL instead of the default OpenAI endpoint, so
one adapter covers every service that speaks the chat-completions
protocol.

SDK exceptions are translated into the MuseFlow hierarchy here so the
orchestrator can classify failures without importing ``openai``.
"""

from __future__ import annotations

import openai
import structlog

from museflow.config.settings import Settings
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.utils.errors import ErrorKind, LLMError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat-completions API.

    Uses ``gpt-4o-mini`` unless ``OPENAI_MODEL`` overrides it.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key

        # The orchestrator owns the overall per-attempt deadline; the SDK
        # timeout only bounds a single HTTP exchange, and the SDK must not
        # retry behind the orchestrator's back.
        client_kwargs: dict = {
            "api_key": self._api_key or "unset",
            "timeout": openai.Timeout(settings.provider_timeout_seconds, connect=5.0),
            "max_retries": 0,
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_model or "gpt-4o-mini"
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a completion via the chat-completions API."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.RateLimitError as exc:
            raise RateLimitError(
                message=f"{self._provider_label} rate limit exceeded",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.AuthenticationError as exc:
            raise LLMError(
                message=f"{self._provider_label} rejected the API key",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.AUTH,
            ) from exc
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} request timed out",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.TIMEOUT,
            ) from exc
        except openai.APIConnectionError as exc:
            raise LLMError(
                message=f"{self._provider_label} is unreachable: {exc}",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.UNAVAILABLE,
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.EMPTY_RESPONSE,
            )
        logger.info(
            "openai_completion",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """List models to verify the key without incurring inference cost."""
        if not self.is_available():
            return False
        try:
            await self._client.models.list()
            return True
        except openai.APIError:
            return False

    def get_provider_name(self) -> str:
        return self._provider_label

    def get_model_name(self) -> str | None:
        return self._model
