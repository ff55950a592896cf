"""FastAPI routes for MuseFlow.

Endpoint                 Method  Description
-----------------------  ------  ---------------------------------------
/api/v1/actions          POST    One action request -> response envelope
/api/v1/actions/batch    POST    JSON array of requests, run in order
/api/v1/health           GET     Liveness + configured providers
/api/v1/cache/stats      GET     Cache size, age range and hit rate
/api/v1/cache            DELETE  Remove every cache entry

Action endpoints always answer HTTP 200; success or failure is carried
in the envelope's ``success`` / ``error`` fields.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from museflow.api.schemas import CacheClearResponse, HealthResponse
from museflow.services.cache_store import CacheStore
from museflow.services.request_router import RequestRouter
from museflow.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


def _get_router(request: Request) -> RequestRouter:
    return request.app.state.router


def _get_cache(request: Request) -> CacheStore:
    return request.app.state.cache


RouterDep = Annotated[RequestRouter, Depends(_get_router)]
CacheDep = Annotated[CacheStore, Depends(_get_cache)]


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        # The router reports a non-object body as a validation failure.
        return None


@router.post("/actions")
async def run_action(request: Request, action_router: RouterDep) -> dict[str, Any]:
    response = await action_router.handle(await _json_body(request))
    return response.to_wire()


@router.post("/actions/batch")
async def run_batch(request: Request, action_router: RouterDep) -> list[dict[str, Any]]:
    body = await _json_body(request)
    if isinstance(body, dict):
        body = body.get("requests")
    if not isinstance(body, list):
        raise HTTPException(status_code=400, detail="Batch body must be a JSON array of requests")

    responses = await action_router.handle_batch(body)
    return [response.to_wire() for response in responses]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    ctx = request.app.state.context
    return HealthResponse(
        status="healthy",
        version=request.app.version,
        providers={p.get_provider_name(): p.is_available() for p in ctx.orchestrator.providers},
        kv_backend=ctx.kv.get_provider_name(),
        features=ctx.config.get().features.model_dump(by_alias=True),
    )


@router.get("/cache/stats")
async def cache_stats(cache: CacheDep) -> dict[str, Any]:
    stats = await cache.get_stats()
    return stats.model_dump(by_alias=True)


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(cache: CacheDep) -> CacheClearResponse:
    cleared = await cache.clear()
    _logger.info("cache_cleared_via_api", cleared=cleared)
    return CacheClearResponse(cleared=cleared)
