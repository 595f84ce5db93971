"""File I/O helpers: atomic writes, JSON, YAML."""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    ensure_lines_present,
    ensure_parent_dir,
    read_text,
    write_text,
)
from .json import read_json, update_json, write_json_atomic
from .yaml import read_yaml

__all__ = [
    "PathLike",
    "atomic_write",
    "ensure_directory",
    "ensure_lines_present",
    "ensure_parent_dir",
    "read_text",
    "write_text",
    "read_json",
    "update_json",
    "write_json_atomic",
    "read_yaml",
]
