"""Core services: cache, provider orchestration, handlers and routing."""

from museflow.services.cache_store import CacheStore, compute_fingerprint
from museflow.services.provider_orchestrator import ProviderOrchestrator, classify_error
from museflow.services.request_router import RequestRouter, generate_request_id

__all__ = [
    "CacheStore",
    "ProviderOrchestrator",
    "RequestRouter",
    "classify_error",
    "compute_fingerprint",
    "generate_request_id",
]
