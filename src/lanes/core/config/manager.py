"""Layered YAML configuration loader.

Configuration sources (highest to lowest priority):
1. Environment variables: ``LANES_<section>__<key>``
2. Project-local config: ``<repo>/.lanes/config.local.yaml`` (uncommitted)
3. Project config: ``<repo>/.lanes/config.yaml``
4. Bundled defaults: ``lanes.data/config/defaults.yaml``
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema
import yaml

from lanes.core.exceptions import ConfigError
from lanes.core.utils.paths import get_project_config_dir, resolve_project_root
from lanes.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "LANES_"
PROJECT_CONFIG_FILES = ("config.yaml", "config.local.yaml")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            merged[key] = deep_merge(existing, value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Load, merge, override, and validate Lanes configuration for a repo."""

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root else resolve_project_root()
        self.defaults_path = get_data_path("config", "defaults.yaml")
        self.project_config_dir = get_project_config_dir(self.repo_root)
        self.schema_path = get_data_path("schemas", "config.schema.yaml")

    def project_config_paths(self) -> List[Path]:
        return [self.project_config_dir / name for name in PROJECT_CONFIG_FILES]

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            # Fail closed: configuration must never silently ignore invalid YAML.
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file must contain a mapping: {path}", context={"path": str(path)}
            )
        return data

    # ---------- environment overrides ----------

    def _coerce_type(self, value: str) -> Any:
        s = value.strip()
        low = s.lower()
        if low in {"true", "false"}:
            return low == "true"
        if re.fullmatch(r"[-+]?\d+", s):
            return int(s)
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return s
        return s

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            # Only section__key forms are overrides; LANES_PROJECT_ROOT and
            # similar single-segment variables are not config.
            if "__" not in raw:
                continue
            segments = raw.split("__")
            if any(not seg for seg in segments):
                logger.warning("Ignoring malformed config override %s", key)
                continue
            yield [seg.lower() for seg in segments], self._coerce_type(os.environ[key])

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self._iter_env_overrides():
            cur = cfg
            for part in path[:-1]:
                nxt = cur.get(part)
                if not isinstance(nxt, dict):
                    nxt = {}
                    cur[part] = nxt
                cur = nxt
            cur[path[-1]] = value

    # ---------- validation ----------

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = yaml.safe_load(self.schema_path.read_text(encoding="utf-8"))
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            where = ".".join(str(p) for p in first.path) or "<root>"
            raise ConfigError(
                f"Invalid configuration at {where}: {first.message}",
                context={"path": where, "errors": [e.message for e in errors]},
            )

    # ---------- loading ----------

    def _load_config_uncached(self, *, validate: bool = True) -> Dict[str, Any]:
        cfg = self.load_yaml(self.defaults_path)
        for path in self.project_config_paths():
            cfg = deep_merge(cfg, self.load_yaml(path))
        self.apply_env_overrides(cfg)
        if validate:
            self.validate_schema(cfg)
        return cfg

    def load_config(self, *, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration (cached per repo root)."""
        from .cache import get_cached_config

        return get_cached_config(repo_root=self.repo_root, validate=validate)


__all__ = ["ConfigManager", "deep_merge", "ENV_PREFIX"]
