"""Adapter for a provider supplied by the host as a plain async function.

The host application may own a model capability MuseFlow cannot import
(an on-device model exposed by the browser, a proxy with its own auth).
It hands over ``async def call(prompt, params) -> str`` where ``params``
is ``{"temperature": float, "maxTokens": int}``; this adapter gives that
function the :class:`ILLMProvider` shape so it can sit anywhere in the
fallback chain.  Tests use it to script provider behaviour.

Exceptions raised by the function propagate unchanged; the orchestrator
classifies them.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from museflow.interfaces.llm_provider import ILLMProvider

ProviderCall = Callable[[str, dict[str, Any]], Awaitable[str]]


class CallableProvider(ILLMProvider):
    """Wrap ``call(prompt, params) -> str`` as a named provider.

    Parameters
    ----------
    name:
        Identifier reported in results and logs.
    call:
        The async function to invoke.
    model:
        Optional model name reported in results.
    validator:
        Optional async function used by :meth:`validate_credentials`.
    """

    def __init__(
        self,
        name: str,
        call: ProviderCall,
        model: str | None = None,
        validator: Callable[[], Awaitable[bool]] | None = None,
    ) -> None:
        self._name = name
        self._call = call
        self._model = model
        self._validator = validator

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        return await self._call(prompt, {"temperature": temperature, "maxTokens": max_tokens})

    def get_provider_name(self) -> str:
        return self._name

    def get_model_name(self) -> str | None:
        return self._model

    def is_available(self) -> bool:
        return True

    async def validate_credentials(self) -> bool:
        if self._validator is None:
            return True
        return await self._validator()
