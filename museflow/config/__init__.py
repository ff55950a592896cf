"""Configuration module: exports Settings, load_config, and RuntimeConfig."""

from museflow.config.loader import load_config
from museflow.config.runtime import RuntimeConfig
from museflow.config.settings import Settings

__all__ = ["RuntimeConfig", "Settings", "load_config"]
