"""Core I/O utilities for Lanes.

Single source of truth for safe file access patterns:
- Atomic writes with fsync and advisory locks
- Text file read/write operations
- Directory management utilities
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Callable, ContextManager, Iterable, List, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory for ``path`` exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def ensure_directory(path: Path, create: bool = True) -> Path:
    """Ensure directory exists.

    Raises:
        FileNotFoundError: If create=False and directory doesn't exist
        NotADirectoryError: If path exists but is not a directory
    """
    path = Path(path)

    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {path}")
        return path

    if create:
        path.mkdir(parents=True, exist_ok=True)
        return path
    raise FileNotFoundError(f"Directory does not exist: {path}")


def atomic_write(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    lock_cm: Optional[ContextManager[Any]] = None,
    encoding: str = "utf-8",
) -> None:
    """Write to ``path`` atomically using a temp file + fsync + rename.

    - Parent directory is created if missing
    - Data is written to a temporary file in the same directory
    - File is fsync'd, unlocked, then atomically replaced
    - Any leftover temp file is cleaned up on failure

    A reader never observes a half-written file: it sees either the old
    content or the new content.
    """
    path = Path(path)
    ensure_parent_dir(path)

    lock_context = lock_cm or nullcontext()
    tmp_path: Optional[Path] = None
    try:
        with lock_context:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=encoding,
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                write_fn(f)
                f.flush()
                os.fsync(f.fileno())
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

            os.replace(str(tmp_path), str(path))
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def ensure_lines_present(
    path: PathLike,
    lines: Iterable[str],
    *,
    create: bool = True,
    ensure_trailing_newline: bool = True,
) -> bool:
    """Append each of ``lines`` that is not already present in ``path``.

    Existing content is never rewritten; comparison ignores surrounding
    whitespace.

    Returns:
        True if the file changed.
    """
    target = Path(path)
    if not target.exists():
        if not create:
            return False
        content = ""
    else:
        content = target.read_text(encoding="utf-8")

    present = {line.strip() for line in content.splitlines()}
    missing: List[str] = []
    for line in lines:
        if line.strip() and line.strip() not in present and line not in missing:
            missing.append(line)
    if not missing:
        return False

    separator = "\n" if content and not content.endswith("\n") else ""
    suffix = "\n" if ensure_trailing_newline else ""
    write_text(target, content + separator + "\n".join(missing) + suffix)
    return True


def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {path}")
    return path.read_text(encoding="utf-8")


def write_text(path: PathLike, content: str) -> None:
    """Atomically write UTF-8 text to ``path``."""
    target = Path(path)

    def _writer(f: TextIO) -> None:
        f.write(content)

    atomic_write(target, _writer)


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "write_text",
    "ensure_lines_present",
]
