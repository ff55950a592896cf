"""Google Gemini LLM provider adapter.

Gemini is called through its public REST endpoint
(``models/{model}:generateContent``) with ``httpx`` rather than an SDK,
so the adapter has no dependency beyond the shared HTTP client.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from museflow.config.settings import Settings
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.utils.errors import ErrorKind, LLMError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)


class GeminiLLMProvider(ILLMProvider):
    """LLM provider backed by the Gemini ``generateContent`` REST API.

    Parameters
    ----------
    settings:
        Supplies ``gemini_api_key``, ``gemini_model`` and ``gemini_base_url``.
    http_client:
        Optional shared ``httpx.AsyncClient``.  When omitted a short-lived
        client is created per call.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model
        self._base_url = settings.gemini_base_url.rstrip("/")
        self._timeout = settings.provider_timeout_seconds
        self._http_client = http_client

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a completion via ``generateContent``."""
        url = f"{self._base_url}/models/{self._model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        try:
            response = await self._post(url, body)
        except httpx.TimeoutException as exc:
            raise LLMError(
                message="Gemini request timed out",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.TIMEOUT,
            ) from exc
        except httpx.HTTPError as exc:
            raise LLMError(
                message=f"Gemini is unreachable: {exc}",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.UNAVAILABLE,
            ) from exc

        if response.status_code == 429:
            raise RateLimitError(
                message="Gemini rate limit exceeded",
                provider_name=self.get_provider_name(),
            )
        if response.status_code in (401, 403):
            raise LLMError(
                message="Gemini rejected the API key",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.AUTH,
            )
        if response.status_code >= 400:
            raise LLMError(
                message=f"Gemini API error: {response.status_code} {_error_detail(response)}",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.UNAVAILABLE if response.status_code >= 500 else ErrorKind.UNKNOWN,
            )

        text = _extract_text(response.json())
        if not text:
            raise LLMError(
                message="Gemini returned empty response",
                provider_name=self.get_provider_name(),
                kind=ErrorKind.EMPTY_RESPONSE,
            )
        logger.info("gemini_completion", model=self._model)
        return text

    def is_available(self) -> bool:
        """Return ``True`` if a Gemini API key is configured."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """Fetch the configured model's metadata to verify the key."""
        if not self.is_available():
            return False
        try:
            if self._http_client is not None:
                response = await self._http_client.get(
                    f"{self._base_url}/models/{self._model}",
                    params={"key": self._api_key},
                    timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(
                        f"{self._base_url}/models/{self._model}",
                        params={"key": self._api_key},
                    )
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def get_provider_name(self) -> str:
        return "gemini"

    def get_model_name(self) -> str | None:
        return self._model

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _post(self, url: str, body: dict[str, Any]) -> httpx.Response:
        params = {"key": self._api_key}
        if self._http_client is not None:
            return await self._http_client.post(url, params=params, json=body, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, params=params, json=body)


def _extract_text(payload: dict[str, Any]) -> str:
    """Join the text parts of the first candidate; "" if there are none."""
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts).strip()


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message", response.reason_phrase)
    except ValueError:
        return response.reason_phrase
