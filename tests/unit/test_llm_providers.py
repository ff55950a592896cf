"""Unit tests for LLM provider adapters: OpenAI, Anthropic, Gemini, Ollama, callable."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from museflow.config.settings import Settings
from museflow.utils.errors import ErrorKind, LLMError, RateLimitError

_REQUEST = httpx.Request("POST", "https://api.example.test/v1")


# ======================================================================
# Shared helpers
# ======================================================================

def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "anthropic_api_key": "test-anthropic",
        "gemini_api_key": "test-gemini",
        "ollama_base_url": "http://localhost:11434",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _chat_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(total_tokens=100)
    return response


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_is_available_with_key(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider
        assert OpenAILLMProvider(settings).is_available() is True

    def test_is_available_without_key(self) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider
        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    def test_compatible_endpoint_label(self) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider
        provider = OpenAILLMProvider(_settings(openai_base_url="https://api.groq.test/v1"))
        assert provider.get_provider_name() == "openai-compatible"
        assert provider.get_model_name() == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_complete_success(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("LLM response text"))

        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            result = await provider.complete("prompt", temperature=0.3, max_tokens=150)

        assert result == "LLM response text"
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 150
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_empty_content_is_empty_response(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response(None))

        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(LLMError) as exc_info:
                await provider.complete("prompt")

        assert exc_info.value.kind is ErrorKind.EMPTY_RESPONSE

    @pytest.mark.asyncio
    async def test_rate_limit_is_translated(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.RateLimitError(
                message="Rate limit exceeded",
                response=httpx.Response(429, request=_REQUEST),
                body=None,
            )
        )

        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(RateLimitError) as exc_info:
                await provider.complete("prompt")

        assert exc_info.value.provider_name == "openai"

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=_REQUEST)
        )

        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(LLMError) as exc_info:
                await provider.complete("prompt")

        assert exc_info.value.kind is ErrorKind.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_validate_credentials_success(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.models.list = AsyncMock(return_value=MagicMock())

        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            assert await provider.validate_credentials() is True

    @pytest.mark.asyncio
    async def test_validate_credentials_failure(self, settings: Settings) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.models.list = AsyncMock(
            side_effect=openai.APIError(message="Invalid key", request=_REQUEST, body=None)
        )

        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            assert await provider.validate_credentials() is False

    @pytest.mark.asyncio
    async def test_validate_without_key_skips_network(self) -> None:
        from museflow.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        with patch("museflow.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings(openai_api_key=""))
            assert await provider.validate_credentials() is False

        mock_client.models.list.assert_not_called()


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_provider_name(self, settings: Settings) -> None:
        from museflow.providers.llm.anthropic_provider import AnthropicLLMProvider
        assert AnthropicLLMProvider(settings).get_provider_name() == "anthropic"

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self, settings: Settings) -> None:
        from museflow.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(type="text", text="First part."),
            MagicMock(type="tool_use", text="ignored"),
            MagicMock(type="text", text="Second part."),
        ]
        mock_response.usage = MagicMock(input_tokens=10, output_tokens=20)

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("museflow.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(settings)
            result = await provider.complete("prompt", temperature=1.4, max_tokens=300)

        assert result == "First part.\nSecond part."
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["temperature"] == 1.0
        assert kwargs["max_tokens"] == 300

    @pytest.mark.asyncio
    async def test_no_text_blocks_is_empty_response(self, settings: Settings) -> None:
        from museflow.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = []
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("museflow.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(settings)
            with pytest.raises(LLMError) as exc_info:
                await provider.complete("prompt")

        assert exc_info.value.kind is ErrorKind.EMPTY_RESPONSE

    @pytest.mark.asyncio
    async def test_api_error_is_translated(self, settings: Settings) -> None:
        from museflow.providers.llm.anthropic_provider import AnthropicLLMProvider
        import anthropic

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIError(message="overloaded", request=_REQUEST, body=None)
        )

        with patch("museflow.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(settings)
            with pytest.raises(LLMError) as exc_info:
                await provider.complete("prompt")

        assert exc_info.value.provider_name == "anthropic"
        assert "overloaded" in exc_info.value.message


# ======================================================================
# Gemini LLM Provider (REST via httpx)
# ======================================================================


class TestGeminiLLMProvider:
    @staticmethod
    def _client(response: httpx.Response) -> MagicMock:
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(return_value=response)
        client.get = AsyncMock(return_value=response)
        return client

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        from museflow.providers.llm.gemini_provider import GeminiLLMProvider

        payload = {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}}]}
        client = self._client(httpx.Response(200, json=payload))
        provider = GeminiLLMProvider(_settings(), http_client=client)

        assert await provider.complete("prompt", temperature=0.8, max_tokens=1500) == "Hello world"

        url = client.post.call_args.args[0]
        assert url.endswith("/models/gemini-1.5-flash:generateContent")
        body = client.post.call_args.kwargs["json"]
        assert body["generationConfig"] == {"temperature": 0.8, "maxOutputTokens": 1500}
        assert client.post.call_args.kwargs["params"] == {"key": "test-gemini"}

    @pytest.mark.parametrize(
        ("status", "error_type", "kind"),
        [
            (429, RateLimitError, ErrorKind.RATE_LIMIT),
            (403, LLMError, ErrorKind.AUTH),
            (503, LLMError, ErrorKind.UNAVAILABLE),
            (400, LLMError, ErrorKind.UNKNOWN),
        ],
    )
    @pytest.mark.asyncio
    async def test_error_statuses(self, status: int, error_type: type, kind: ErrorKind) -> None:
        from museflow.providers.llm.gemini_provider import GeminiLLMProvider

        client = self._client(httpx.Response(status, json={"error": {"message": "nope"}}))
        provider = GeminiLLMProvider(_settings(), http_client=client)

        with pytest.raises(error_type) as exc_info:
            await provider.complete("prompt")

        assert exc_info.value.kind is kind

    @pytest.mark.asyncio
    async def test_no_candidates_is_empty_response(self) -> None:
        from museflow.providers.llm.gemini_provider import GeminiLLMProvider

        provider = GeminiLLMProvider(_settings(), http_client=self._client(httpx.Response(200, json={})))
        with pytest.raises(LLMError) as exc_info:
            await provider.complete("prompt")
        assert exc_info.value.kind is ErrorKind.EMPTY_RESPONSE

    @pytest.mark.asyncio
    async def test_transport_timeout(self) -> None:
        from museflow.providers.llm.gemini_provider import GeminiLLMProvider

        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(side_effect=httpx.ReadTimeout("slow", request=_REQUEST))
        provider = GeminiLLMProvider(_settings(), http_client=client)

        with pytest.raises(LLMError) as exc_info:
            await provider.complete("prompt")
        assert exc_info.value.kind is ErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_validate_credentials(self) -> None:
        from museflow.providers.llm.gemini_provider import GeminiLLMProvider

        ok = GeminiLLMProvider(_settings(), http_client=self._client(httpx.Response(200, json={})))
        bad = GeminiLLMProvider(_settings(), http_client=self._client(httpx.Response(400, json={})))

        assert await ok.validate_credentials() is True
        assert await bad.validate_credentials() is False


# ======================================================================
# Ollama LLM Provider
# ======================================================================


class TestOllamaLLMProvider:
    def test_availability_follows_base_url(self) -> None:
        from museflow.providers.llm.ollama_provider import OllamaLLMProvider
        assert OllamaLLMProvider(_settings()).is_available() is True
        assert OllamaLLMProvider(_settings(ollama_base_url="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_uses_openai_compatible_endpoint(self) -> None:
        from museflow.providers.llm.ollama_provider import OllamaLLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("local answer"))

        with patch(
            "museflow.providers.llm.ollama_provider.openai.AsyncOpenAI", return_value=mock_client
        ) as client_cls:
            provider = OllamaLLMProvider(_settings())
            result = await provider.complete("prompt")

        assert result == "local answer"
        assert client_cls.call_args.kwargs["base_url"] == "http://localhost:11434/v1"


# ======================================================================
# Callable provider and registry
# ======================================================================


class TestCallableProvider:
    @pytest.mark.asyncio
    async def test_params_shape(self) -> None:
        from museflow.providers.llm.callable_provider import CallableProvider

        seen = {}

        async def call(prompt: str, params: dict) -> str:
            seen.update(params, prompt=prompt)
            return "done"

        provider = CallableProvider(name="host", call=call)
        assert await provider.complete("p", temperature=0.4, max_tokens=99) == "done"
        assert seen == {"prompt": "p", "temperature": 0.4, "maxTokens": 99}
        assert await provider.validate_credentials() is True
        assert provider.get_model_name() is None


class TestRegistry:
    def test_unknown_name_raises(self) -> None:
        from museflow.providers.llm.registry import create_llm_provider
        from museflow.utils.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            create_llm_provider("skynet", _settings())

    def test_chain_skips_unconfigured_and_unknown(self) -> None:
        from museflow.providers.llm.registry import build_provider_chain

        settings = _settings(anthropic_api_key="", gemini_api_key="", ollama_base_url="")
        chain = build_provider_chain(settings, ["anthropic", "bogus", "openai", "gemini", "ollama"])

        assert [p.get_provider_name() for p in chain] == ["openai"]

    def test_chain_keeps_order(self) -> None:
        from museflow.providers.llm.registry import build_provider_chain

        chain = build_provider_chain(_settings(), ["ollama", "gemini", "anthropic", "openai"])
        assert [p.get_provider_name() for p in chain] == ["ollama", "gemini", "anthropic", "openai"]
