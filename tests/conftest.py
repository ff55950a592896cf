"""Shared pytest fixtures for the MuseFlow test suite."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import pytest

from museflow.config.runtime import RuntimeConfig
from museflow.interfaces.kv_store import IKeyValueStore
from museflow.main import AppContext, build_context
from museflow.models.config import AppConfig, FeatureFlags, Limits
from museflow.providers.kv.memory_kv import MemoryKeyValueStore
from museflow.providers.llm.callable_provider import CallableProvider
from museflow.services.cache_store import CacheStore
from museflow.utils.errors import StorageError

# Comfortably above the 10-character minimum.
SAMPLE_TEXT = (
    "The city council approved a new plan to expand bike lanes across the "
    "downtown core. Construction starts next spring and will take two years."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeClock:
    """Deterministic epoch-millisecond clock for cache tests."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FailingKeyValueStore(IKeyValueStore):
    """A store whose every operation raises, like an unreachable backend."""

    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        raise StorageError("backend down", provider_name="failing")

    async def set(self, items: Mapping[str, Any]) -> None:
        raise StorageError("backend down", provider_name="failing")

    async def remove(self, keys: Iterable[str]) -> None:
        raise StorageError("backend down", provider_name="failing")

    async def get_all(self) -> dict[str, Any]:
        raise StorageError("backend down", provider_name="failing")


class RecordingProvider(CallableProvider):
    """CallableProvider that remembers every prompt and parameter set.

    *responses* are returned in order (the last one repeats); an
    exception instance in the list is raised instead of returned.
    """

    def __init__(self, name: str, responses: list[Any] | None = None) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._responses = list(responses or ["ok"])
        super().__init__(name=name, call=self._respond, model=f"{name}-model")

    async def _respond(self, prompt: str, params: dict[str, Any]) -> str:
        self.calls.append((prompt, params))
        index = min(len(self.calls) - 1, len(self._responses) - 1)
        response = self._responses[index]
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def call_count(self) -> int:
        return len(self.calls)


def make_config(**sections: Any) -> AppConfig:
    """Build an AppConfig, e.g. ``make_config(limits={"max_cache_entries": 2})``."""
    return AppConfig(
        features=FeatureFlags(**sections.get("features", {})),
        limits=Limits(**sections.get("limits", {})),
        provider_order=sections.get("provider_order", ["primary", "fallback"]),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    return RuntimeConfig(make_config())


@pytest.fixture
def cache_store(memory_kv: MemoryKeyValueStore, runtime_config: RuntimeConfig, clock: FakeClock) -> CacheStore:
    return CacheStore(kv=memory_kv, config=runtime_config, clock=clock)


@pytest.fixture
def primary() -> RecordingProvider:
    return RecordingProvider("primary", ["The plan expands bike lanes downtown. It starts next spring."])


@pytest.fixture
def app_context(primary: RecordingProvider, memory_kv: MemoryKeyValueStore) -> AppContext:
    """A fully wired context with one scripted provider and in-memory storage."""
    return build_context(config=make_config(), kv=memory_kv, providers=[primary])
