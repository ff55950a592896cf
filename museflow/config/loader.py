"""YAML configuration loader with environment variable overrides.

Configuration is resolved in layers (later layers override earlier):

  1. ``AppConfig`` model defaults
  2. ``config/config.yaml``  -- static defaults checked into the repo
  3. Settings fields explicitly supplied by ``.env`` or the environment

Only Settings fields present in ``settings.model_fields_set`` count as
overrides; a Settings default never clobbers a YAML value.

``deep_merge`` does recursive dict merging:
    base = {"limits": {"max_text_length": 5000}}
    overrides = {"limits": {"cache_ttl_ms": 60000}}
    result = {"limits": {"max_text_length": 5000, "cache_ttl_ms": 60000}}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError as PydanticValidationError

from museflow.config.settings import Settings
from museflow.models.config import AppConfig
from museflow.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

# Settings field -> (AppConfig section, key).  ``None`` section = top level.
_ENV_OVERRIDE_MAP: dict[str, tuple[str | None, str]] = {
    "enable_caching": ("features", "enable_caching"),
    "enable_logging": ("features", "enable_logging"),
    "enable_fallback": ("features", "enable_fallback"),
    "max_text_length": ("limits", "max_text_length"),
    "min_text_length": ("limits", "min_text_length"),
    "max_cache_entries": ("limits", "max_cache_entries"),
    "cache_ttl_ms": ("limits", "cache_ttl_ms"),
    "provider_timeout_seconds": ("limits", "provider_timeout_seconds"),
}


def load_config(settings: Settings | None = None, path: str | None = None) -> AppConfig:
    """Load YAML config and merge explicitly-set environment Settings on top.

    Args:
        settings: Settings instance; a fresh one is read from the
                  environment when omitted.
        path: Path to the YAML file; defaults to ``settings.config_path``.

    Returns:
        A validated :class:`AppConfig`.

    Raises:
        ConfigurationError: If the YAML is malformed or the merged values
                            fail validation.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.config_path)

    resolved: dict[str, Any] = AppConfig().model_dump()
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Malformed config file {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        deep_merge(resolved, yaml_config)
    else:
        logger.debug("config_file_missing", path=str(config_path))

    deep_merge(resolved, _env_overrides(settings))

    try:
        return AppConfig.model_validate(resolved)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def _env_overrides(settings: Settings) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    explicit = settings.model_fields_set
    for field, (section, key) in _ENV_OVERRIDE_MAP.items():
        if field not in explicit:
            continue
        value = getattr(settings, field)
        if section is None:
            overrides[key] = value
        else:
            overrides.setdefault(section, {})[key] = value
    if "provider_order" in explicit:
        overrides["provider_order"] = settings.get_provider_order()
    return overrides


def deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
