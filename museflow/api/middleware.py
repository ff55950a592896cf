"""API middleware: CORS, request logging and a last-resort error handler.

Starlette runs middleware last-added-first, so with the order used in
``museflow.main``::

    Client -> RequestLogging -> ErrorHandling -> route

and the logged status is the one the client actually receives.  Action
routes never raise (the router answers every failure with an envelope);
the error handler exists for the non-action routes.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from museflow.api.schemas import ErrorResponse
from museflow.utils.errors import MuseFlowError
from museflow.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; ``["*"]`` when no origins are configured.

    The browser extension calls from a ``chrome-extension://`` origin, so
    production deployments should list that origin explicitly.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin.
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn escaped ``MuseFlowError`` subclasses into JSON error bodies.

    Only the user-facing message reaches the client; details stay in the
    server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except MuseFlowError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.user_message())
            return JSONResponse(status_code=500, content=body.model_dump())
