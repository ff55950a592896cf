"""Unit tests for configuration loading and runtime updates."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from museflow.config.loader import deep_merge, load_config
from museflow.config.runtime import RuntimeConfig
from museflow.config.settings import Settings
from museflow.models.config import AppConfig
from museflow.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDeepMerge:
    def test_nested_keys_are_merged(self) -> None:
        base = {"limits": {"max_text_length": 5000, "cache_ttl_ms": 1}}
        deep_merge(base, {"limits": {"cache_ttl_ms": 60000}})
        assert base == {"limits": {"max_text_length": 5000, "cache_ttl_ms": 60000}}

    def test_non_dict_value_replaces(self) -> None:
        base = {"provider_order": ["openai"]}
        deep_merge(base, {"provider_order": ["gemini", "ollama"]})
        assert base["provider_order"] == ["gemini", "ollama"]


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(_settings(), path=str(tmp_path / "absent.yaml"))
        assert config == AppConfig()

    def test_yaml_values_apply(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "features:\n  enable_fallback: false\nlimits:\n  max_cache_entries: 7\n"
            "provider_order: [gemini]\n",
            encoding="utf-8",
        )

        config = load_config(_settings(), path=str(path))

        assert config.features.enable_fallback is False
        assert config.features.enable_caching is True
        assert config.limits.max_cache_entries == 7
        assert config.provider_order == ["gemini"]

    def test_explicit_settings_override_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("limits:\n  max_cache_entries: 7\n  cache_ttl_ms: 1000\n", encoding="utf-8")

        config = load_config(
            _settings(max_cache_entries=3, provider_order="Ollama, openai, ollama"),
            path=str(path),
        )

        assert config.limits.max_cache_entries == 3
        # Not explicitly set, so the YAML value survives.
        assert config.limits.cache_ttl_ms == 1000
        assert config.provider_order == ["ollama", "openai"]

    def test_environment_variables_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENABLE_CACHING", "false")
        config = load_config(_settings(), path=str(tmp_path / "absent.yaml"))
        assert config.features.enable_caching is False

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("limits: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(_settings(), path=str(path))

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(_settings(), path=str(path))

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("limits:\n  max_text_length: 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(_settings(), path=str(path))


class TestRuntimeConfig:
    def test_update_accepts_camel_case(self) -> None:
        runtime = RuntimeConfig()
        updated = runtime.update({"limits": {"cacheTtlMs": 5000}, "features": {"enableLogging": False}})

        assert updated.limits.cache_ttl_ms == 5000
        assert updated.features.enable_logging is False
        assert runtime.get() is updated
        # Untouched siblings keep their values.
        assert updated.limits.max_cache_entries == 100

    def test_update_accepts_snake_case(self) -> None:
        runtime = RuntimeConfig()
        runtime.update({"provider_order": ["anthropic"]})
        assert runtime.get().provider_order == ["anthropic"]

    def test_invalid_update_keeps_snapshot(self) -> None:
        runtime = RuntimeConfig()
        before = runtime.get()

        with pytest.raises(ConfigurationError):
            runtime.update({"limits": {"maxTextLength": -1}})

        assert runtime.get() is before

    def test_snapshots_are_frozen(self) -> None:
        config = RuntimeConfig().get()
        with pytest.raises(PydanticValidationError):
            config.limits.max_cache_entries = 1  # type: ignore[misc]

    def test_to_wire_uses_camel_case(self) -> None:
        wire = RuntimeConfig().to_wire()
        assert set(wire) == {"features", "limits", "providerOrder"}
        assert wire["limits"]["providerTimeoutSeconds"] == 10.0


class TestSettings:
    def test_cors_origins_split(self) -> None:
        assert _settings(cors_origins="http://a, http://b ,").get_cors_origins() == ["http://a", "http://b"]

    def test_available_providers(self) -> None:
        settings = _settings(
            openai_api_key="sk-1",
            anthropic_api_key="",
            gemini_api_key="",
            ollama_base_url="http://localhost:11434",
        )
        assert settings.get_available_llm_providers() == ["openai", "ollama"]
