"""Lanes configuration: layered YAML, env overrides, schema validation."""
from __future__ import annotations

from .cache import clear_all_caches, get_cached_config
from .manager import ConfigManager, deep_merge

__all__ = [
    "ConfigManager",
    "deep_merge",
    "get_cached_config",
    "clear_all_caches",
]
