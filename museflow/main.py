"""MuseFlow FastAPI application entry point.

Wires the key-value store, cache, provider chain, action handlers and
router into one :class:`AppContext` and exposes it over HTTP.  The same
:func:`build_context` is used by the CLI, and by tests with in-memory
storage and scripted providers.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from museflow import __version__
from museflow.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from museflow.api.routes import router as api_router
from museflow.config.loader import load_config
from museflow.config.runtime import RuntimeConfig
from museflow.config.settings import Settings
from museflow.interfaces.kv_store import IKeyValueStore
from museflow.interfaces.llm_provider import ILLMProvider
from museflow.models.actions import ActionKind
from museflow.models.config import AppConfig
from museflow.providers.kv.memory_kv import MemoryKeyValueStore
from museflow.providers.kv.sqlite_kv import SQLiteKeyValueStore
from museflow.providers.llm.registry import build_provider_chain
from museflow.services.cache_store import CacheStore
from museflow.services.handlers import (
    BaseActionHandler,
    IdeateHandler,
    RewriteHandler,
    SummarizeHandler,
    TranslateHandler,
)
from museflow.services.provider_orchestrator import ProviderOrchestrator
from museflow.services.request_router import RequestRouter
from museflow.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Dependency assembly
# ---------------------------------------------------------------------------


@dataclass
class AppContext:
    """Every long-lived component, built once per process (or per test)."""

    settings: Settings
    config: RuntimeConfig
    kv: IKeyValueStore
    cache: CacheStore
    orchestrator: ProviderOrchestrator
    handlers: dict[ActionKind, BaseActionHandler]
    router: RequestRouter
    http_client: httpx.AsyncClient | None = None
    _initialized: bool = field(default=False, repr=False)

    async def startup(self) -> None:
        """Prepare storage; safe to call more than once."""
        if self._initialized:
            return
        if isinstance(self.kv, SQLiteKeyValueStore):
            await self.kv.initialize()
        self._initialized = True

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


def _build_kv(app_settings: Settings) -> IKeyValueStore:
    backend = app_settings.kv_backend.strip().lower()
    if backend == "sqlite":
        return SQLiteKeyValueStore(db_path=app_settings.kv_db_path)
    if backend != "memory":
        _logger.warning("kv_backend_unknown", backend=backend, fallback="memory")
    return MemoryKeyValueStore()


def build_context(
    app_settings: Settings | None = None,
    config: AppConfig | None = None,
    kv: IKeyValueStore | None = None,
    providers: Sequence[ILLMProvider] | None = None,
) -> AppContext:
    """Construct every service with its dependencies injected.

    Parameters
    ----------
    app_settings:
        Environment settings.  Read from the environment if omitted.
    config:
        Initial configuration snapshot.  Loaded from YAML + env if omitted.
    kv:
        Key-value store.  Chosen by ``settings.kv_backend`` if omitted.
    providers:
        Explicit provider chain.  Built from ``config.provider_order`` and
        the configured credentials if omitted.
    """
    app_settings = app_settings or Settings()
    runtime = RuntimeConfig(config or load_config(app_settings))

    http_client: httpx.AsyncClient | None = None
    if providers is None:
        http_client = httpx.AsyncClient(timeout=runtime.get().limits.provider_timeout_seconds)
        providers = build_provider_chain(
            app_settings, runtime.get().provider_order, http_client=http_client
        )

    store = kv or _build_kv(app_settings)
    cache = CacheStore(kv=store, config=runtime)
    orchestrator = ProviderOrchestrator(providers=providers, config=runtime)

    handler_types: list[type[BaseActionHandler]] = [
        SummarizeHandler,
        RewriteHandler,
        IdeateHandler,
        TranslateHandler,
    ]
    handlers = {
        handler_type.action: handler_type(cache=cache, orchestrator=orchestrator, config=runtime)
        for handler_type in handler_types
    }
    router = RequestRouter(
        handlers=handlers,
        cache=cache,
        orchestrator=orchestrator,
        config=runtime,
        settings=app_settings,
    )

    return AppContext(
        settings=app_settings,
        config=runtime,
        kv=store,
        cache=cache,
        orchestrator=orchestrator,
        handlers=handlers,
        router=router,
        http_client=http_client,
    )


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    context: AppContext | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    A prebuilt *context* is used as-is (tests); otherwise one is built
    from the environment when the app starts.
    """
    app_settings = app_settings or (context.settings if context else Settings())

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        ctx = context or build_context(app_settings)
        await ctx.startup()
        application.state.context = ctx
        application.state.router = ctx.router
        application.state.cache = ctx.cache

        _logger.info(
            "app_startup",
            version=__version__,
            environment=app_settings.app_env,
            providers=ctx.orchestrator.provider_names(),
            kv_backend=ctx.kv.get_provider_name(),
        )

        yield

        await ctx.aclose()
        _logger.info("app_shutdown")

    application = FastAPI(
        title="MuseFlow API",
        version=__version__,
        description=(
            "Summarize, rewrite, ideate and translate text with cached results "
            "and automatic fallback across AI providers."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())

    application.include_router(api_router)
    return application


settings = Settings()
configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
app = create_app(app_settings=settings)


if __name__ == "__main__":
    uvicorn.run(
        "museflow.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
