"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, highest priority first:

  1. Environment variables -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. ``.env`` file in the working directory (local development)

Field ``openai_api_key`` maps to ``OPENAI_API_KEY`` automatically.
Defaults apply when neither source sets a field.

Only fields that were explicitly supplied (``model_fields_set``) override
``config/config.yaml``; see :func:`museflow.config.loader.load_config`.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """MuseFlow application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === LLM Providers ===
    # Empty key = "not configured"; the provider is skipped in the chain.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, Groq, ...)
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-haiku-latest"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    ollama_base_url: str = ""  # e.g. http://localhost:11434; empty disables Ollama
    ollama_model: str = "llama3.1"
    # Comma-separated provider names, tried in this order.
    provider_order: str = "openai,anthropic,gemini,ollama"

    # === Features ===
    enable_caching: bool = True
    enable_logging: bool = True
    enable_fallback: bool = True

    # === Limits ===
    max_text_length: int = 5000
    min_text_length: int = 10
    max_cache_entries: int = 100
    cache_ttl_ms: int = 24 * 60 * 60 * 1000
    provider_timeout_seconds: float = 10.0

    # === Storage ===
    kv_backend: str = "memory"  # "memory" or "sqlite"
    kv_db_path: str = "data/museflow.db"

    # === App Config ===
    config_path: str = "config/config.yaml"
    app_host: str = "0.0.0.0"  # noqa: S104
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"

    def get_provider_order(self) -> list[str]:
        """Return ``provider_order`` as a cleaned, de-duplicated list."""
        seen: list[str] = []
        for name in self.provider_order.split(","):
            name = name.strip().lower()
            if name and name not in seen:
                seen.append(name)
        return seen

    def get_available_llm_providers(self) -> list[str]:
        """Return provider names whose credentials (or base URL) are configured."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.gemini_api_key:
            providers.append("gemini")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
