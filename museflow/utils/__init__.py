"""Utility modules for MuseFlow.

- **errors** -- Exception hierarchy rooted at MuseFlowError; each class
  renders its own stable user-facing message prefix.
- **logging** -- structlog setup with a dual-renderer pattern, plus
  request-scoped context binding for correlation ids.
- **text_metrics** -- Truncation, sentence/word counting, readability and
  response clean-up helpers shared by the action handlers.
"""

# -- Domain exception hierarchy --------------------------------------------
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

# -- Structured logging ----------------------------------------------------
from museflow.utils.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

# -- Text metrics ----------------------------------------------------------
from museflow.utils.text_metrics import (
    ConfidenceLevel,
    confidence_to_level,
    readability_score,
    truncate_text,
)

__all__ = [
    "ConfidenceLevel",
    "ConfigurationError",
    "ErrorKind",
    "InsufficientInputError",
    "LLMError",
    "MuseFlowError",
    "NoProviderAvailableError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RateLimitError",
    "StorageError",
    "UnknownActionError",
    "UnknownError",
    "ValidationError",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "confidence_to_level",
    "get_logger",
    "readability_score",
    "truncate_text",
]
