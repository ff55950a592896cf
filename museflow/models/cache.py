"""Cache record and statistics models.

A :class:`CacheEntry` is persisted as a camelCase JSON object under a
``cache_``-prefixed key in the PersistentKV:

    {id, inputText, response, timestampMs, ttlMs, action, inputHash}

Entries are frozen; the only lifecycle transitions are *created* (after a
successful provider call) and *deleted* (clear, lazy expiry, eviction).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from museflow.models.provider import ProviderResult


class CacheEntry(BaseModel):
    """One cached provider result, addressed by its fingerprint."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    # Storage key: "cache_" + input_hash.
    id: str
    input_text: str
    response: ProviderResult
    timestamp_ms: int = Field(ge=0)
    ttl_ms: int = Field(ge=0)
    action: str
    # Hex SHA-256 fingerprint of (action, text, canonical options).
    input_hash: str

    @property
    def expires_at_ms(self) -> int:
        return self.timestamp_ms + self.ttl_ms

    def is_expired(self, now_ms: int) -> bool:
        """An entry is live up to and including its expiry instant."""
        return now_ms > self.expires_at_ms


class CacheStats(BaseModel):
    """Point-in-time snapshot of the cache."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total_entries: int = Field(default=0, ge=0)
    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    hit_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    oldest_entry_ms: int = 0
    newest_entry_ms: int = 0
