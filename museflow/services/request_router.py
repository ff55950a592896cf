"""Single entry point that turns any inbound request into a response envelope.

The router never raises.  Whatever happens below it (bad input, unknown
action, every provider down, a bug) comes back as an
:class:`ActionResponse` with ``success=False``, a stable user-facing
``error`` string, the caller's ``requestId`` and the usual metadata.
Timing covers the whole handler call: cache lookup, provider call and
cache store.
"""

from __future__ import annotations

import hashlib
import secrets
import string
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog
from cachetools import TTLCache
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from museflow.config.runtime import RuntimeConfig
from museflow.config.settings import Settings
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.models.actions import ActionKind, ActionRequest, ActionResponse, ResponseMetadata
from museflow.providers.llm.registry import PROVIDER_NAMES, create_llm_provider
from museflow.services.cache_store import CacheStore
from museflow.services.handlers.base import BaseActionHandler
from museflow.services.provider_orchestrator import ProviderOrchestrator
from museflow.utils.errors import (
    MuseFlowError,
    UnknownActionError,
    UnknownError,
    ValidationError,
)
from museflow.utils.logging import bind_request_context, clear_request_context

logger = structlog.get_logger(logger_name=__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_VERIFY_CACHE_SIZE = 32
_VERIFY_CACHE_TTL_SECONDS = 300

ProviderFactory = Callable[[str, Settings], ILLMProvider]


def generate_request_id() -> str:
    """Return ``req_<epoch_ms>_<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class RequestRouter:
    """Validate, dispatch and wrap every action request.

    Parameters
    ----------
    handlers:
        One handler per content action.
    cache:
        Shared cache, used directly by ``clearCache`` / ``getCacheStats``.
    orchestrator:
        Shared provider chain, used by ``verifyKey``.
    config:
        Runtime configuration, read and patched by the settings actions.
    settings:
        Environment settings; ``verifyKey`` with an explicit ``apiKey``
        builds a throwaway adapter from a copy of them.
    provider_factory:
        Builds that throwaway adapter.  Defaults to
        :func:`create_llm_provider`.
    """

    def __init__(
        self,
        handlers: Mapping[ActionKind, BaseActionHandler],
        cache: CacheStore,
        orchestrator: ProviderOrchestrator,
        config: RuntimeConfig,
        settings: Settings | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> None:
        self._handlers = dict(handlers)
        self._cache = cache
        self._orchestrator = orchestrator
        self._config = config
        self._settings = settings or Settings()
        self._provider_factory = provider_factory or create_llm_provider
        # (provider, sha256(apiKey)) -> bool; avoids a billable credential check per click.
        self._verified: TTLCache[tuple[str, str], bool] = TTLCache(
            maxsize=_VERIFY_CACHE_SIZE, ttl=_VERIFY_CACHE_TTL_SECONDS
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle(self, raw: Mapping[str, Any] | ActionRequest) -> ActionResponse:
        """Process one request and return its response envelope."""
        started = time.perf_counter()
        request_id = self._incoming_request_id(raw) or generate_request_id()
        action_name: str | None = None
        bind_request_context(request_id)

        try:
            request = raw if isinstance(raw, ActionRequest) else self._parse(raw)
            action_name = request.action
            bind_request_context(request_id, action_name)
            data = await self._dispatch(request)
        except MuseFlowError as exc:
            return self._failure(exc, request_id, action_name, started)
        except Exception:  # noqa: BLE001 -- the envelope must always be returned
            logger.exception("request_unhandled_error")
            return self._failure(UnknownError(), request_id, action_name, started)
        else:
            response = ActionResponse(
                success=True,
                data=data,
                request_id=request_id,
                metadata=self._metadata(started, action_name),
            )
            if self._config.get().features.enable_logging:
                logger.info(
                    "request_completed",
                    processing_time_ms=response.metadata.processing_time_ms,
                )
            return response
        finally:
            clear_request_context()

    async def handle_batch(
        self, requests: Iterable[Mapping[str, Any] | ActionRequest]
    ) -> list[ActionResponse]:
        """Process *requests* one after another, returning responses in order."""
        return [await self.handle(request) for request in requests]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, request: ActionRequest) -> Any:
        if not request.action:
            raise ValidationError("Action is required")
        try:
            action = ActionKind(request.action)
        except ValueError:
            raise UnknownActionError(request.action) from None

        if action.is_content_action:
            if request.text is None or not request.text.strip():
                raise ValidationError(f"Text is required for {action.value}")
            handler = self._handlers.get(action)
            if handler is None:
                raise UnknownActionError(action.value)
            result = await handler.handle(request.text, request.options)
            return _to_wire(result)

        if action is ActionKind.PING:
            return {"status": "ok"}
        if action is ActionKind.CLEAR_CACHE:
            return {"cleared": await self._cache.clear()}
        if action is ActionKind.GET_CACHE_STATS:
            return _to_wire(await self._cache.get_stats())
        if action is ActionKind.GET_SETTINGS:
            return self._config.to_wire()
        if action is ActionKind.UPDATE_SETTINGS:
            self._config.update(request.options)
            return self._config.to_wire()
        return await self._verify_key(request.options)

    async def _verify_key(self, options: Mapping[str, Any]) -> dict[str, Any]:
        name = str(options.get("provider") or "").strip().lower()
        if name not in PROVIDER_NAMES:
            raise ValidationError(f"Unknown provider: {name or '(none)'}")
        api_key = str(options.get("apiKey") or "")

        cache_key = (name, hashlib.sha256(api_key.encode("utf-8")).hexdigest())
        if cache_key in self._verified:
            return {"provider": name, "valid": self._verified[cache_key]}

        if api_key:
            settings = self._settings.model_copy(update={f"{name}_api_key": api_key})
            provider: ILLMProvider | None = self._provider_factory(name, settings)
        else:
            provider = self._orchestrator.get_provider(name)

        valid = False
        if provider is not None and provider.is_available():
            try:
                valid = await provider.validate_credentials()
            except MuseFlowError as exc:
                logger.warning("verify_key_failed", provider=name, error=exc.message)

        self._verified[cache_key] = valid
        return {"provider": name, "valid": valid}

    # ------------------------------------------------------------------
    # Envelope helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _incoming_request_id(raw: Mapping[str, Any] | ActionRequest) -> str | None:
        if isinstance(raw, ActionRequest):
            return raw.request_id
        if isinstance(raw, Mapping):
            value = raw.get("requestId", raw.get("request_id"))
            if isinstance(value, str) and value:
                return value
        return None

    @staticmethod
    def _parse(raw: Any) -> ActionRequest:
        if not isinstance(raw, Mapping):
            raise ValidationError("Request must be a JSON object")
        try:
            return ActionRequest.model_validate(dict(raw))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "request"
            raise ValidationError(f"'{field}' {first['msg'].lower()}") from exc

    @staticmethod
    def _metadata(started: float, action: str | None) -> ResponseMetadata:
        return ResponseMetadata(
            processing_time_ms=round((time.perf_counter() - started) * 1000, 2),
            action=action,
        )

    def _failure(
        self,
        exc: MuseFlowError,
        request_id: str,
        action: str | None,
        started: float,
    ) -> ActionResponse:
        logger.warning(
            "request_failed",
            error_type=type(exc).__name__,
            error=exc.message,
            provider=exc.provider_name,
        )
        return ActionResponse(
            success=False,
            error=exc.user_message(),
            request_id=request_id,
            metadata=self._metadata(started, action),
        )


def _to_wire(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)
