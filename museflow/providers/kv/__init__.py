"""Key-value store adapters."""

from museflow.providers.kv.memory_kv import MemoryKeyValueStore
from museflow.providers.kv.sqlite_kv import SQLiteKeyValueStore

__all__ = ["MemoryKeyValueStore", "SQLiteKeyValueStore"]
