"""Wire-level request and response envelope models.

Every caller -- the browser extension's message bus, the HTTP API, the
CLI -- speaks the same envelope:

    request:  {action, text?, options?, requestId?, source?}
    response: {success, data?, error?, requestId, metadata}

Exactly one of ``data`` / ``error`` is populated.  ``requestId`` is always
present on the response, even for a request that failed validation, so
asynchronous callers can always match a reply to what they sent.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ActionKind(str, Enum):  # noqa: UP042
    """Every action the router knows how to dispatch."""

    # Content actions: need ``text``, go through cache + providers.
    SUMMARIZE = "summarize"
    REWRITE = "rewrite"
    IDEATE = "ideate"
    TRANSLATE = "translate"

    # Control actions: answered locally.
    PING = "ping"
    CLEAR_CACHE = "clearCache"
    GET_CACHE_STATS = "getCacheStats"
    GET_SETTINGS = "getSettings"
    UPDATE_SETTINGS = "updateSettings"
    VERIFY_KEY = "verifyKey"

    @property
    def is_content_action(self) -> bool:
        return self in CONTENT_ACTIONS


CONTENT_ACTIONS = frozenset(
    {ActionKind.SUMMARIZE, ActionKind.REWRITE, ActionKind.IDEATE, ActionKind.TRANSLATE}
)


class RequestSource(str, Enum):  # noqa: UP042
    """Where a request originated; used only for logging."""

    POPUP = "popup"
    CONTENT_SCRIPT = "content_script"
    BACKGROUND = "background"
    CONTEXT_MENU = "context_menu"
    API = "api"
    CLI = "cli"
    UNKNOWN = "unknown"


_SOURCE_VALUES = frozenset(s.value for s in RequestSource)

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActionRequest(BaseModel):
    """A validated inbound request.

    ``action`` stays a plain string here; the router resolves it to an
    :class:`ActionKind` so an unrecognised value can be reported as
    ``Unknown action: X`` rather than a schema error.
    """

    model_config = _WIRE_CONFIG

    action: str | None = None
    text: str | None = None
    options: dict[str, Any] = Field(default_factory=dict)
    request_id: str | None = None
    source: RequestSource = RequestSource.UNKNOWN

    @model_validator(mode="before")
    @classmethod
    def _coerce_loose_fields(cls, data: Any) -> Any:
        # Hosts send ``options: null`` and free-form source strings.
        if isinstance(data, dict):
            data = dict(data)
            if data.get("options") is None:
                data.pop("options", None)
            source = data.get("source")
            if source is not None and source not in _SOURCE_VALUES:
                data["source"] = RequestSource.UNKNOWN
        return data


class ResponseMetadata(BaseModel):
    model_config = _WIRE_CONFIG

    processing_time_ms: float
    timestamp_iso: str = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc).isoformat()  # noqa: UP017
    )
    action: str | None = None


class ActionResponse(BaseModel):
    """The single envelope every request is answered with."""

    model_config = _WIRE_CONFIG

    success: bool
    data: Any = None
    error: str | None = None
    request_id: str
    metadata: ResponseMetadata

    @model_validator(mode="after")
    def _check_exclusive(self) -> ActionResponse:
        if self.success and self.error is not None:
            raise ValueError("a successful response cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("a failed response must carry an error")
        return self

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting the unused data/error slot."""
        payload = self.model_dump(mode="json", by_alias=True)
        if self.success:
            payload.pop("error", None)
        else:
            payload.pop("data", None)
        return payload
