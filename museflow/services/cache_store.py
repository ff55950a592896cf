"""Content-addressable result cache over the persistent key-value store.

Entries are addressed by a *fingerprint*: the SHA-256 hex digest of a
canonical JSON encoding of ``{"action", "text", "options"}`` with sorted
keys and compact separators.  Structurally equal option maps therefore
hash identically regardless of key order, while any change to the action,
the text, or any option value produces a different key.  Entries live in
the KV under ``cache_<fingerprint>`` so they can be told apart from
unrelated keys the host keeps in the same namespace.

Lifecycle rules enforced here:

* an entry past ``timestamp_ms + ttl_ms`` is a miss and is deleted by the
  lookup that notices it;
* after every store the entry count is brought back to
  ``limits.max_cache_entries`` by evicting the oldest entries first;
* every KV failure is logged and downgraded to a miss or a no-op.  The
  cache never makes a content action fail.

Each call to :meth:`store` and :meth:`cleanup_old_entries` enumerates the
whole namespace.  That is fine for a personal cache of a few hundred
entries and is the first thing to revisit for anything larger.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from museflow.config.runtime import RuntimeConfig
from museflow.interfaces.kv_store import IKeyValueStore
from museflow.models.cache import CacheEntry, CacheStats
from museflow.models.provider import ProviderResult

logger = structlog.get_logger(logger_name=__name__)

CACHE_KEY_PREFIX = "cache_"


def _now_ms() -> int:
    return int(time.time() * 1000)


def canonicalize_options(options: Mapping[str, Any] | None) -> str:
    """Encode *options* as deterministic JSON (sorted keys, no whitespace)."""
    return json.dumps(
        dict(options or {}),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def compute_fingerprint(action: str, text: str, options: Mapping[str, Any] | None = None) -> str:
    """Return the hex SHA-256 fingerprint of ``(action, text, options)``."""
    payload = json.dumps(
        {"action": str(action), "text": text, "options": json.loads(canonicalize_options(options))},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class CacheStore:
    """Best-effort cache of provider results with TTL and size bounds.

    Parameters
    ----------
    kv:
        The persistent key-value store holding the entries.
    config:
        Runtime configuration, read on every operation.
    clock:
        Returns "now" in epoch milliseconds.  Injectable for tests.
    """

    def __init__(
        self,
        kv: IKeyValueStore,
        config: RuntimeConfig,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._kv = kv
        self._config = config
        self._clock = clock or _now_ms
        self._hits = 0
        self._misses = 0
        # Serialises eviction so two interleaved stores cannot both decide
        # to remove the same "oldest" entries.
        self._cleanup_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @staticmethod
    def compute_fingerprint(action: str, text: str, options: Mapping[str, Any] | None = None) -> str:
        return compute_fingerprint(action, text, options)

    @staticmethod
    def storage_key(fingerprint: str) -> str:
        return f"{CACHE_KEY_PREFIX}{fingerprint}"

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    # ------------------------------------------------------------------
    # Lookup / store
    # ------------------------------------------------------------------

    async def lookup(
        self,
        action: str,
        text: str,
        options: Mapping[str, Any] | None = None,
    ) -> ProviderResult | None:
        """Return the cached result for these inputs, or ``None`` on a miss.

        Every call records exactly one hit or one miss.
        """
        if not self._config.get().features.enable_caching:
            self._misses += 1
            return None

        key = self.storage_key(self.compute_fingerprint(action, text, options))
        try:
            stored = await self._kv.get([key])
        except Exception as exc:  # noqa: BLE001 -- any KV failure is a miss
            self._misses += 1
            logger.warning("cache_read_failed", key=key, error=str(exc), error_type=type(exc).__name__)
            return None

        raw = stored.get(key)
        if raw is None:
            self._misses += 1
            logger.debug("cache_miss", key=key)
            return None

        entry = self._parse_entry(key, raw)
        if entry is None:
            self._misses += 1
            await self._safe_remove([key], reason="corrupt")
            return None

        if entry.is_expired(self._clock()):
            self._misses += 1
            logger.debug("cache_expired", key=key, expired_at_ms=entry.expires_at_ms)
            await self._safe_remove([key], reason="expired")
            return None

        self._hits += 1
        logger.debug("cache_hit", key=key, action=entry.action)
        return entry.response

    async def store(
        self,
        action: str,
        text: str,
        options: Mapping[str, Any] | None,
        result: ProviderResult,
    ) -> CacheEntry | None:
        """Persist *result* and then evict down to the size limit.

        Returns the written entry, or ``None`` when caching is disabled or
        the write failed.  Storing the same inputs twice overwrites the
        single entry for that fingerprint.
        """
        config = self._config.get()
        if not config.features.enable_caching:
            return None

        fingerprint = self.compute_fingerprint(action, text, options)
        key = self.storage_key(fingerprint)
        entry = CacheEntry(
            id=key,
            input_text=text,
            response=result,
            timestamp_ms=self._clock(),
            ttl_ms=config.limits.cache_ttl_ms,
            action=str(action),
            input_hash=fingerprint,
        )
        try:
            await self._kv.set({key: entry.model_dump(mode="json", by_alias=True)})
        except Exception as exc:  # noqa: BLE001 -- caching is best-effort
            logger.warning("cache_write_failed", key=key, error=str(exc), error_type=type(exc).__name__)
            return None

        logger.debug("cache_stored", key=key, action=entry.action)
        await self.cleanup_old_entries()
        return entry

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear(self) -> int:
        """Remove every cache entry and reset counters.

        Returns the number of entries removed; ``0`` if the KV failed, in
        which case counters are left as they were.
        """
        try:
            keys = [key for key in await self._kv.get_all() if key.startswith(CACHE_KEY_PREFIX)]
            if keys:
                await self._kv.remove(keys)
        except Exception as exc:  # noqa: BLE001
            logger.warning("cache_clear_failed", error=str(exc), error_type=type(exc).__name__)
            return 0

        self._hits = 0
        self._misses = 0
        logger.info("cache_cleared", removed=len(keys))
        return len(keys)

    async def cleanup_old_entries(self) -> int:
        """Evict the oldest entries until at most ``max_cache_entries`` remain.

        Idempotent: a second call with nothing new stored removes nothing.
        Returns the number of entries removed.
        """
        limit = self._config.get().limits.max_cache_entries
        async with self._cleanup_lock:
            entries = await self._load_entries()
            if entries is None or len(entries) <= limit:
                return 0

            # sorted() is stable, so equal timestamps keep KV write order.
            oldest_first = sorted(entries, key=lambda e: e.timestamp_ms)
            excess = len(oldest_first) - limit
            doomed = [entry.id for entry in oldest_first[:excess]]
            if not await self._safe_remove(doomed, reason="evicted"):
                return 0

        logger.info("cache_evicted", removed=len(doomed), limit=limit)
        return len(doomed)

    async def purge_expired(self) -> int:
        """Delete every expired entry without touching hit/miss counters."""
        entries = await self._load_entries()
        if not entries:
            return 0
        now = self._clock()
        doomed = [entry.id for entry in entries if entry.is_expired(now)]
        if doomed and await self._safe_remove(doomed, reason="expired"):
            return len(doomed)
        return 0

    async def remove_entry(self, key: str) -> bool:
        """Delete one entry by storage key (or bare fingerprint)."""
        if not key.startswith(CACHE_KEY_PREFIX):
            key = self.storage_key(key)
        return await self._safe_remove([key], reason="removed")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    async def get_all_entries(self) -> list[CacheEntry]:
        """Return every readable entry, newest first."""
        entries = await self._load_entries() or []
        return sorted(entries, key=lambda e: e.timestamp_ms, reverse=True)

    async def get_stats(self) -> CacheStats:
        """Return a point-in-time snapshot of size, age range, and hit rate."""
        entries = await self._load_entries() or []
        observations = self._hits + self._misses
        timestamps = [entry.timestamp_ms for entry in entries]
        return CacheStats(
            total_entries=len(entries),
            hits=self._hits,
            misses=self._misses,
            hit_rate=(self._hits / observations) if observations else 0.0,
            oldest_entry_ms=min(timestamps, default=0),
            newest_entry_ms=max(timestamps, default=0),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_entries(self) -> list[CacheEntry] | None:
        """Read and parse every cache entry; ``None`` if the KV failed."""
        try:
            stored = await self._kv.get_all()
        except Exception as exc:  # noqa: BLE001
            logger.warning("cache_enumerate_failed", error=str(exc), error_type=type(exc).__name__)
            return None

        entries: list[CacheEntry] = []
        for key, raw in stored.items():
            if not key.startswith(CACHE_KEY_PREFIX):
                continue
            entry = self._parse_entry(key, raw)
            if entry is not None:
                entries.append(entry)
        return entries

    @staticmethod
    def _parse_entry(key: str, raw: Any) -> CacheEntry | None:
        try:
            entry = CacheEntry.model_validate(raw)
        except PydanticValidationError as exc:
            logger.warning("cache_entry_corrupt", key=key, errors=exc.error_count())
            return None
        # The stored id must match the key it lives under.
        if entry.id != key:
            logger.warning("cache_entry_mismatch", key=key, entry_id=entry.id)
            return None
        return entry

    async def _safe_remove(self, keys: list[str], reason: str) -> bool:
        try:
            await self._kv.remove(keys)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "cache_remove_failed",
                keys=len(keys),
                reason=reason,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False
        logger.debug("cache_removed", keys=len(keys), reason=reason)
        return True
