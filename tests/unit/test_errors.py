"""Unit tests for the exception hierarchy and its wire messages."""

from __future__ import annotations

import pytest

from museflow.utils.errors import (
    ConfigurationError,
    ErrorKind,
    InsufficientInputError,
    LLMError,
    MuseFlowError,
    NoProviderAvailableError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitError,
    StorageError,
    UnknownActionError,
    UnknownError,
    ValidationError,
)


class TestUserMessages:
    def test_action_required_is_verbatim(self) -> None:
        assert ValidationError("Action is required").user_message() == "Action is required"

    def test_validation_prefix(self) -> None:
        assert ValidationError("Text is required for rewrite").user_message() == (
            "Invalid request: Text is required for rewrite"
        )

    def test_insufficient_input(self) -> None:
        error = InsufficientInputError(min_length=25)
        assert error.min_length == 25
        assert error.user_message() == "INSUFFICIENT_CONTEXT: Please provide at least 25 characters of text"

    def test_unknown_action(self) -> None:
        error = UnknownActionError("dance")
        assert error.action == "dance"
        assert error.user_message() == "Unknown action: dance"

    def test_no_provider_available(self) -> None:
        error = NoProviderAvailableError("All providers failed", failures=[RateLimitError(provider_name="openai")])
        assert error.user_message() == "AI service unavailable: All providers failed"
        assert error.failures[0].kind is ErrorKind.RATE_LIMIT

    def test_unknown_error_default(self) -> None:
        assert UnknownError().user_message() == "Unknown error occurred"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            ValidationError(),
            InsufficientInputError(min_length=10),
            UnknownActionError("x"),
            LLMError(),
            NoProviderAvailableError(),
            StorageError(),
            ConfigurationError(),
            UnknownError(),
        ],
    )
    def test_all_are_museflow_errors(self, error: MuseFlowError) -> None:
        assert isinstance(error, MuseFlowError)

    def test_provider_errors_share_base(self) -> None:
        for error in (ProviderTimeoutError(timeout_seconds=2.5), RateLimitError(), LLMError()):
            assert isinstance(error, ProviderUnavailableError)

    def test_timeout_kind_and_message(self) -> None:
        error = ProviderTimeoutError(timeout_seconds=2.5, provider_name="gemini")
        assert error.kind is ErrorKind.TIMEOUT
        assert error.timeout_seconds == 2.5
        assert str(error) == "[gemini] Provider timed out after 2.5s"

    def test_str_without_provider(self) -> None:
        assert str(StorageError("disk full")) == "disk full"
