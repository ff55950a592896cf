"""Abstract base class for the persistent key-value store.

The host application owns a namespaced, best-effort key-value store
(browser extension storage, a SQLite file, a plain dict in tests).  The
cache is the only consumer, and it treats every call as fallible and
possibly slow.  The contract is batch-oriented because the host's
native API is: ``get(keys) -> map``, ``set(map)``, ``remove(keys)``,
``get_all() -> map``.  No transactions are assumed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any


# Concrete implementations: MemoryKeyValueStore, SQLiteKeyValueStore
# Located in: museflow/providers/kv/
class IKeyValueStore(ABC):
    """Contract for namespaced key-value persistence.

    Values are JSON-compatible (dicts, lists, str, numbers, bools, None).
    Implementations raise :class:`museflow.utils.errors.StorageError` on
    any backend failure.
    """

    @abstractmethod
    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return the stored values for *keys*.

        Parameters
        ----------
        keys:
            Keys to read.  Keys that are absent are simply missing from the
            returned mapping.

        Returns
        -------
        dict
            ``{key: value}`` for every requested key that exists.
        """

    @abstractmethod
    async def set(self, items: Mapping[str, Any]) -> None:
        """Write every ``key: value`` pair in *items*, overwriting existing keys."""

    @abstractmethod
    async def remove(self, keys: Iterable[str]) -> None:
        """Delete *keys*.  Missing keys are ignored."""

    @abstractmethod
    async def get_all(self) -> dict[str, Any]:
        """Return every stored ``key: value`` pair, in insertion order.

        Used for enumeration during cleanup, clear, and stats.
        """

    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and StorageError messages."""
        return type(self).__name__
