"""Mutable holder for the current configuration snapshot.

CacheStore and ProviderOrchestrator are handed a :class:`RuntimeConfig`
and call :meth:`RuntimeConfig.get` on every operation, so an
``updateSettings`` request takes effect on the very next call without
rebuilding any component.  Snapshots themselves are frozen; an update
validates a merged copy and swaps the reference in one assignment.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from museflow.config.loader import deep_merge
from museflow.models.config import AppConfig
from museflow.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


def _snake_keys(value: Any) -> Any:
    """Recursively convert camelCase mapping keys to snake_case."""
    if isinstance(value, Mapping):
        return {to_snake(str(k)): _snake_keys(v) for k, v in value.items()}
    return value


class RuntimeConfig:
    """The configuration collaborator shared by every service."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()

    def get(self) -> AppConfig:
        return self._config

    def update(self, patch: Mapping[str, Any]) -> AppConfig:
        """Deep-merge *patch* (camelCase or snake_case keys) into the config.

        Raises:
            ConfigurationError: If the merged config fails validation.  The
                                current snapshot is left untouched.
        """
        merged = self._config.model_dump()
        deep_merge(merged, _snake_keys(patch))
        try:
            updated = AppConfig.model_validate(merged)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid settings update: {exc.errors()[0]['msg']}") from exc

        self._config = updated
        logger.info("config_updated", keys=sorted(_snake_keys(patch).keys()))
        return updated

    def to_wire(self) -> dict[str, Any]:
        """Serialize the snapshot with camelCase keys for callers."""
        return self._config.model_dump(mode="json", by_alias=True)
