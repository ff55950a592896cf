"""Provider factory: turn configured names into an ordered adapter chain."""

from __future__ import annotations

import httpx
import structlog

from museflow.config.settings import Settings
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.providers.llm.anthropic_provider import AnthropicLLMProvider
from museflow.providers.llm.gemini_provider import GeminiLLMProvider
from museflow.providers.llm.ollama_provider import OllamaLLMProvider
from museflow.providers.llm.openai_provider import OpenAILLMProvider
from museflow.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

PROVIDER_NAMES = ("openai", "anthropic", "gemini", "ollama")


def create_llm_provider(
    name: str,
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> ILLMProvider:
    """Create a provider adapter by name.

    Raises:
        ConfigurationError: If *name* is not a known provider.
    """
    key = name.strip().lower()
    if key == "openai":
        return OpenAILLMProvider(settings=settings)
    if key == "anthropic":
        return AnthropicLLMProvider(settings=settings)
    if key == "gemini":
        return GeminiLLMProvider(settings=settings, http_client=http_client)
    if key == "ollama":
        return OllamaLLMProvider(settings=settings)
    raise ConfigurationError(f"Unknown provider type: {name}")


def build_provider_chain(
    settings: Settings,
    order: list[str],
    http_client: httpx.AsyncClient | None = None,
) -> list[ILLMProvider]:
    """Instantiate every provider in *order* that has credentials configured.

    Unknown names are logged and skipped so a typo in ``PROVIDER_ORDER``
    degrades the chain instead of preventing startup.
    """
    chain: list[ILLMProvider] = []
    for name in order:
        try:
            provider = create_llm_provider(name, settings, http_client=http_client)
        except ConfigurationError:
            logger.warning("provider_unknown", provider=name)
            continue
        if not provider.is_available():
            logger.debug("provider_not_configured", provider=name)
            continue
        chain.append(provider)

    logger.info("provider_chain_built", providers=[p.get_provider_name() for p in chain])
    return chain
