"""Public interface definitions for MuseFlow's external collaborators.

Business logic never talks to a storage backend or a model SDK directly;
it talks to one of these abstract base classes, and concrete adapters are
injected at startup by :mod:`museflow.main`.

    Interface        ->  Concrete implementations (in museflow/providers/)
    ---------------------------------------------------------------------
    IKeyValueStore   ->  MemoryKeyValueStore, SQLiteKeyValueStore
    ILLMProvider     ->  OpenAILLMProvider, AnthropicLLMProvider,
                         GeminiLLMProvider, OllamaLLMProvider,
                         CallableProvider
"""

from museflow.interfaces.kv_store import IKeyValueStore
from museflow.interfaces.llm_provider import ILLMProvider

__all__ = ["IKeyValueStore", "ILLMProvider"]
