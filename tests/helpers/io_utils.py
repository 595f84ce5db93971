"""I/O utilities for writing test files.

All functions create parent directories automatically if they don't exist.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml


def write_yaml(path: Path, data: Any, *, sort_keys: bool = True) -> None:
    """Write data to YAML file, creating parent directories if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = yaml.safe_dump(data, default_flow_style=False, sort_keys=sort_keys, allow_unicode=True)
    path.write_text(content, encoding="utf-8")


def write_json(path: Path, data: Any, *, indent: int = 2) -> None:
    """Write data to JSON file, creating parent directories if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=indent), encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))
