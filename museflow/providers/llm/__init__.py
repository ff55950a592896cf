"""LLM provider adapters."""

from museflow.providers.llm.anthropic_provider import AnthropicLLMProvider
from museflow.providers.llm.callable_provider import CallableProvider
from museflow.providers.llm.gemini_provider import GeminiLLMProvider
from museflow.providers.llm.ollama_provider import OllamaLLMProvider
from museflow.providers.llm.openai_provider import OpenAILLMProvider
from museflow.providers.llm.registry import (
    PROVIDER_NAMES,
    build_provider_chain,
    create_llm_provider,
)

__all__ = [
    "PROVIDER_NAMES",
    "AnthropicLLMProvider",
    "CallableProvider",
    "GeminiLLMProvider",
    "OllamaLLMProvider",
    "OpenAILLMProvider",
    "build_provider_chain",
    "create_llm_provider",
]
