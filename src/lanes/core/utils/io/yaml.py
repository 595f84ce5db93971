"""YAML I/O utilities."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .core import read_text

_MISSING = object()


def read_yaml(path: Path | str, *, default: Any = _MISSING, raise_on_error: bool = False) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Args:
        path: File to read
        default: Returned when the file is missing, or when it is malformed
            and ``raise_on_error`` is False
        raise_on_error: Propagate ``yaml.YAMLError`` instead of returning default
    """
    p = Path(path)
    if not p.exists():
        if default is _MISSING:
            raise FileNotFoundError(f"YAML file not found: {p}")
        return default
    try:
        return yaml.safe_load(read_text(p))
    except yaml.YAMLError:
        if raise_on_error or default is _MISSING:
            raise
        return default


__all__ = ["read_yaml"]
