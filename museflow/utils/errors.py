"""Custom exception hierarchy for MuseFlow.

All application exceptions inherit from :class:`MuseFlowError`, which
carries an optional ``provider_name`` so error handlers can identify which
upstream service (e.g. "openai", "gemini", "sqlite") caused the failure.

The hierarchy is organized by where the failure surfaces:

    MuseFlowError  (base -- catch-all for any MuseFlow error)
    +-- ValidationError            (malformed request: missing action/text)
    +-- InsufficientInputError     (text present but shorter than the minimum)
    +-- UnknownActionError         (action is not a member of ActionKind)
    +-- ProviderUnavailableError   (one provider attempt failed)
    |   +-- ProviderTimeoutError   (attempt exceeded its time budget)
    |   +-- RateLimitError         (provider rate-limit exceeded)
    |   +-- LLMError               (SDK / HTTP call failed or returned junk)
    +-- NoProviderAvailableError   (every provider in the chain failed)
    +-- StorageError               (PersistentKV failure -- never fatal)
    +-- ConfigurationError         (startup / invalid settings patch)
    +-- UnknownError               (anything we did not anticipate)

Each class knows how to render itself for the wire via
:meth:`MuseFlowError.user_message`.  The prefixes produced there
("INSUFFICIENT_CONTEXT: ...", "AI service unavailable: ...",
"Unknown action: ...") are a stable contract with callers, who
pattern-match on them.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):  # noqa: UP042
    """Classification attached to every failed provider attempt.

    The orchestrator logs this value so operators can tell a hung provider
    from a revoked key without reading stack traces.
    """

    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    UNAVAILABLE = "unavailable"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"


class MuseFlowError(Exception):
    """Base exception for all MuseFlow errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def user_message(self) -> str:
        """Return the caller-facing error string placed in the response envelope."""
        return self._message

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Request validation errors -- surfaced immediately, no provider calls made
# ---------------------------------------------------------------------------

class ValidationError(MuseFlowError):
    """Raised when a request is structurally invalid (missing action or text)."""

    _PREFIX = "Invalid request: "

    def __init__(
        self,
        message: str = "Request validation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)

    def user_message(self) -> str:
        # "Action is required" is matched verbatim by existing callers.
        if self.message == "Action is required":
            return self.message
        return f"{self._PREFIX}{self.message}"


class InsufficientInputError(MuseFlowError):
    """Raised when text is present but too short to act on.

    Also raised when a provider itself answers ``INSUFFICIENT_CONTEXT``.
    """

    def __init__(
        self,
        min_length: int = 10,
        provider_name: str | None = None,
    ) -> None:
        self._min_length = min_length
        super().__init__(
            message=f"Please provide at least {min_length} characters of text",
            provider_name=provider_name,
        )

    @property
    def min_length(self) -> int:
        return self._min_length

    def user_message(self) -> str:
        return f"INSUFFICIENT_CONTEXT: {self.message}"


class UnknownActionError(MuseFlowError):
    """Raised when the requested action is not a known ActionKind."""

    def __init__(self, action: str, provider_name: str | None = None) -> None:
        self._action = action
        super().__init__(message=f"Unknown action: {action}", provider_name=provider_name)

    @property
    def action(self) -> str:
        return self._action


# ---------------------------------------------------------------------------
# Provider errors -- one attempt in the fallback chain
# ---------------------------------------------------------------------------

class ProviderUnavailableError(MuseFlowError):
    """Raised when a single provider attempt fails.

    The orchestrator catches this to try the next provider in the
    configured order.  ``kind`` records why the attempt failed.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
        kind: ErrorKind = ErrorKind.UNAVAILABLE,
    ) -> None:
        self._kind = kind
        super().__init__(message=message, provider_name=provider_name)

    @property
    def kind(self) -> ErrorKind:
        return self._kind


class ProviderTimeoutError(ProviderUnavailableError):
    """Raised when a provider attempt exceeds its per-call timeout."""

    def __init__(
        self,
        timeout_seconds: float,
        provider_name: str | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        super().__init__(
            message=f"Provider timed out after {timeout_seconds:g}s",
            provider_name=provider_name,
            kind=ErrorKind.TIMEOUT,
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds


class RateLimitError(ProviderUnavailableError):
    """Raised when an API rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, kind=ErrorKind.RATE_LIMIT)


class LLMError(ProviderUnavailableError):
    """Raised when an LLM API call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
        kind: ErrorKind = ErrorKind.UNKNOWN,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, kind=kind)


class NoProviderAvailableError(MuseFlowError):
    """Raised when every provider in the chain failed, or none is configured.

    ``failures`` holds the per-provider errors in the order they were tried.
    """

    _PREFIX = "AI service unavailable: "

    def __init__(
        self,
        message: str = "No AI providers configured",
        failures: list[ProviderUnavailableError] | None = None,
    ) -> None:
        self._failures = list(failures or [])
        super().__init__(message=message)

    @property
    def failures(self) -> list[ProviderUnavailableError]:
        return list(self._failures)

    def user_message(self) -> str:
        return f"{self._PREFIX}{self.message}"


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------

class StorageError(MuseFlowError):
    """Raised by a PersistentKV adapter; the cache always swallows it."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(MuseFlowError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnknownError(MuseFlowError):
    """Catch-all used by the router for exceptions outside this hierarchy."""

    def __init__(
        self,
        message: str = "Unknown error occurred",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
