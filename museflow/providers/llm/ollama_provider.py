"""Ollama LLM provider adapter.

Talks to a local Ollama server through its OpenAI-compatible ``/v1``
endpoint, reusing the ``openai`` client pointed at the local URL.  Useful
as the last link of the chain: free, offline, and usually slower.

Setup: install Ollama, ``ollama pull llama3.1``, then set
``OLLAMA_BASE_URL=http://localhost:11434``.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from museflow.config.settings import Settings
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.utils.errors import ErrorKind, LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaLLMProvider(ILLMProvider):
    """LLM provider backed by a local Ollama server."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.ollama_base_url
        self._client = openai.AsyncOpenAI(
            base_url=f"{(self._base_url or _DEFAULT_BASE_URL).rstrip('/')}/v1",
            # Ollama ignores the key, but the SDK requires a non-empty value.
            api_key="ollama",
            timeout=settings.provider_timeout_seconds,
            max_retries=0,
        )
        self._model = settings.ollama_model

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a completion via Ollama's OpenAI-compatible API."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIConnectionError as exc:
            raise LLMError(
                message=f"Ollama server is unreachable at {self._base_url}",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.UNAVAILABLE,
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"Ollama API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError(
                message="Ollama returned empty response",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.EMPTY_RESPONSE,
            )
        logger.info("ollama_completion", model=self._model)
        return content

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama base URL is configured."""
        return bool(self._base_url)

    async def validate_credentials(self) -> bool:
        """Check the server is running by listing installed models (/api/tags)."""
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._base_url.rstrip('/')}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    def get_provider_name(self) -> str:
        return "ollama"

    def get_model_name(self) -> str | None:
        return self._model
