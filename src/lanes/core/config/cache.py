"""Centralized configuration caching.

Provides a single source of truth for loaded configuration across all domain
configs. Cache keys fingerprint ``LANES_*`` environment variables and project
config file mtimes so that edits made by tests or long-running processes are
picked up without an explicit clear.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

_config_cache: Dict[str, Dict[str, Any]] = {}
_cache_clearers: Dict[str, Callable[[], None]] = {}


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        from lanes.core.utils.paths import resolve_project_root

        return resolve_project_root()
    return Path(repo_root).expanduser().resolve()


def _cache_key(repo_root: Path, validate: bool) -> str:
    base = str(repo_root)

    env_items = sorted(
        (k, os.environ.get(k, "")) for k in os.environ.keys() if k.startswith("LANES_")
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    from .manager import PROJECT_CONFIG_FILES
    from lanes.core.utils.paths import get_project_config_dir

    files = []
    cfg_dir = get_project_config_dir(repo_root)
    for name in PROJECT_CONFIG_FILES:
        path = cfg_dir / name
        try:
            st = path.stat()
            files.append((name, int(st.st_mtime_ns), int(st.st_size)))
        except FileNotFoundError:
            files.append((name, 0, 0))
    cfg_fp = hashlib.sha256(repr(files).encode("utf-8")).hexdigest()[:12]

    return f"{base}:validate={int(validate)}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None, validate: bool = True) -> Dict[str, Any]:
    """Get configuration with caching.

    Returns the same config dict instance for the same repo_root and
    fingerprint, avoiding repeated file I/O. Treat the result as immutable.
    """
    normalized_root = _normalize_repo_root(repo_root)
    key = _cache_key(normalized_root, validate)

    if key not in _config_cache:
        from .manager import ConfigManager

        manager = ConfigManager(repo_root=normalized_root)
        _config_cache[key] = manager._load_config_uncached(validate=validate)
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear the config dict cache and every registered dependent cache."""
    _config_cache.clear()
    for clearer in list(_cache_clearers.values()):
        clearer()


def register_cache_clearer(name: str, clearer: Callable[[], None]) -> None:
    """Register an additional cache clearer to run inside ``clear_all_caches()``."""
    _cache_clearers[name] = clearer


__all__ = [
    "get_cached_config",
    "clear_all_caches",
    "register_cache_clearer",
]
