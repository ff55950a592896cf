"""Pydantic response schemas for the MuseFlow HTTP API.

Action requests and responses are not modelled here: ``POST /actions``
takes the raw envelope and answers with
:class:`~museflow.models.actions.ActionResponse` so HTTP callers see
exactly what the extension's message bus sees.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, bool] = Field(default_factory=dict)
    kv_backend: str
    features: dict[str, Any] = Field(default_factory=dict)


class CacheClearResponse(BaseModel):
    cleared: int = Field(ge=0)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
