"""In-memory key-value store.

Default backend for development, the CLI, and tests.  Values are deep
copied on the way in and out so callers cannot mutate stored state
through a reference they kept, mirroring the copy semantics of a real
serialising store.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from museflow.interfaces.kv_store import IKeyValueStore

logger = structlog.get_logger(logger_name=__name__)


class MemoryKeyValueStore(IKeyValueStore):
    """Process-local dict with insertion-ordered enumeration.

    Parameters
    ----------
    initial:
        Optional seed data, e.g. a fixture in tests.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = {k: copy.deepcopy(v) for k, v in (initial or {}).items()}

    # ------------------------------------------------------------------
    # IKeyValueStore implementation
    # ------------------------------------------------------------------

    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        return {key: copy.deepcopy(self._data[key]) for key in keys if key in self._data}

    async def set(self, items: Mapping[str, Any]) -> None:
        for key, value in items.items():
            # Re-inserting moves an overwritten key to the end, so get_all()
            # reflects write order.
            self._data.pop(key, None)
            self._data[key] = copy.deepcopy(value)
        logger.debug("kv_set", keys=len(items))

    async def remove(self, keys: Iterable[str]) -> None:
        removed = 0
        for key in keys:
            if key in self._data:
                del self._data[key]
                removed += 1
        logger.debug("kv_remove", removed=removed)

    async def get_all(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def get_provider_name(self) -> str:
        return "memory"

    def __len__(self) -> int:
        return len(self._data)
