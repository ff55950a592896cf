"""Abstract base class for LLM text-generation providers.

Every upstream model service (OpenAI, Anthropic, Gemini, a local Ollama
server, or a host-supplied callable) is wrapped in an adapter that
implements this contract.  The orchestrator only ever sees this shape:
an async ``complete(prompt, temperature, max_tokens) -> str`` that may
raise.  No other provider-specific behaviour leaks past the adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider,
# GeminiLLMProvider, OllamaLLMProvider, CallableProvider
# Located in: museflow/providers/llm/
class ILLMProvider(ABC):
    """Contract for one link in the provider fallback chain."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a text completion for *prompt*.

        Parameters
        ----------
        prompt:
            The full, provider-agnostic prompt built by the action handler.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0+ = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        museflow.utils.errors.LLMError
            If the API call fails or returns an invalid response.
        museflow.utils.errors.RateLimitError
            If the provider reports that the rate limit was exceeded.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the identifier used in results and logs, e.g. ``"openai"``."""

    @abstractmethod
    def get_model_name(self) -> str | None:
        """Return the model this provider will call, if it knows it."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations check that credentials are present without making
        a network call.  Unavailable providers are skipped by the
        orchestrator rather than counted as failures.
        """

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm credentials are valid.

        Returns
        -------
        bool
            ``True`` if the provider accepted the credentials.  Unlike
            :meth:`is_available`, this actively contacts the service.
        """
