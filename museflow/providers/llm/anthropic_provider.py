"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`
via the Messages API.  Response content is a list of blocks, so text
blocks are filtered and joined.
"""

from __future__ import annotations

import anthropic
import structlog

from museflow.config.settings import Settings
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.utils.errors import ErrorKind, LLMError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.anthropic_api_key
        self._client = anthropic.AsyncAnthropic(
            api_key=self._api_key or "unset",
            timeout=settings.provider_timeout_seconds,
            max_retries=0,
        )
        self._model = settings.anthropic_model

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a completion via the Anthropic Messages API."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                # Anthropic caps temperature at 1.0.
                temperature=min(temperature, 1.0),
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError(
                message="Anthropic rate limit exceeded",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.AuthenticationError as exc:
            raise LLMError(
                message="Anthropic rejected the API key",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.AUTH,
            ) from exc
        except anthropic.APITimeoutError as exc:
            raise LLMError(
                message="Anthropic request timed out",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.TIMEOUT,
            ) from exc
        except anthropic.APIConnectionError as exc:
            raise LLMError(
                message=f"Anthropic is unreachable: {exc}",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.UNAVAILABLE,
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise LLMError(
                message="Anthropic returned no text content",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.EMPTY_RESPONSE,
            )
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return "\n".join(text_blocks)

    def is_available(self) -> bool:
        """Return ``True`` if an Anthropic API key is configured."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """Try a minimal completion to verify the API key works."""
        if not self.is_available():
            return False
        try:
            await self._client.messages.create(
                model=self._model,
                max_tokens=10,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except anthropic.APIError:
            return False

    def get_provider_name(self) -> str:
        return "anthropic"

    def get_model_name(self) -> str | None:
        return self._model
