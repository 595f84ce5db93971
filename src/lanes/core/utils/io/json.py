"""JSON I/O utilities with atomic writes and advisory locks."""
from __future__ import annotations

import fcntl
import json
from pathlib import Path
from typing import Any, Callable, Dict, TextIO

from .core import atomic_write

DEFAULT_JSON_CONFIG: Dict[str, Any] = {
    "indent": 2,
    "sort_keys": False,
    "ensure_ascii": False,
    "encoding": "utf-8",
}

_MISSING = object()  # Sentinel for unset default


def _json_writer(data: Any, cfg: Dict[str, Any]) -> Callable[[TextIO], None]:
    def _writer(f: TextIO) -> None:
        json.dump(
            data,
            f,
            indent=cfg["indent"],
            sort_keys=cfg["sort_keys"],
            ensure_ascii=cfg["ensure_ascii"],
        )
        f.write("\n")

    return _writer


def read_json(file_path: Path | str, *, default: Any = _MISSING) -> Any:
    """Read JSON with a shared lock.

    Args:
        file_path: Path to JSON file
        default: Value to return if the file doesn't exist. If not provided,
            FileNotFoundError is raised.

    Raises:
        FileNotFoundError: If the file does not exist and no default is provided
        json.JSONDecodeError: If the file is not valid JSON
    """
    path = Path(file_path)
    if not path.exists():
        if default is not _MISSING:
            return default
        raise FileNotFoundError(f"JSON file not found: {path}")

    with open(path, "r", encoding=DEFAULT_JSON_CONFIG["encoding"]) as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return json.load(f)
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def write_json_atomic(
    file_path: Path | str,
    data: Any,
    *,
    indent: int | None = None,
    sort_keys: bool | None = None,
    ensure_ascii: bool | None = None,
) -> None:
    """Atomically write JSON to ``file_path`` (indent 2, trailing newline)."""
    cfg = DEFAULT_JSON_CONFIG.copy()
    if indent is not None:
        cfg["indent"] = indent
    if sort_keys is not None:
        cfg["sort_keys"] = sort_keys
    if ensure_ascii is not None:
        cfg["ensure_ascii"] = ensure_ascii

    atomic_write(Path(file_path), _json_writer(data, cfg), encoding=cfg["encoding"])


def update_json(
    file_path: Path | str,
    update_fn: Callable[[Dict[str, Any]], Dict[str, Any] | None],
) -> Dict[str, Any]:
    """Read-modify-write helper with atomic replacement.

    ``update_fn`` receives the current object (``{}`` when the file is missing
    or holds a non-object) and returns the new one; returning None keeps the
    mutated input.
    """
    current = read_json(file_path, default={})
    if not isinstance(current, dict):
        current = {}
    updated = update_fn(current)
    result = current if updated is None else updated
    write_json_atomic(file_path, result)
    return result


__all__ = ["read_json", "write_json_atomic", "update_json"]
