"""Project root resolution for Lanes.

The project root is the directory that owns ``.lanes/`` (config, session
metadata, custom workflows). Inside a session worktree, callers that need
the *base* repository should ask the git gateway instead
(``GitGateway.get_base_repo_path``).
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

PROJECT_ROOT_ENV = "LANES_PROJECT_ROOT"
PROJECT_CONFIG_DIRNAME = ".lanes"


class ProjectRootError(RuntimeError):
    """Raised when the project root cannot be resolved."""


def find_git_root(start: Path) -> Optional[Path]:
    """Walk up from ``start`` until a directory holding ``.git`` is found.

    ``.git`` may be a directory (main checkout) or a file (linked worktree).
    """
    current = Path(start).expanduser().resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """Resolve the project root.

    Resolution priority:
    1. ``LANES_PROJECT_ROOT`` environment variable
    2. Nearest ancestor of ``start`` (default: cwd) containing ``.git``

    Raises:
        ProjectRootError: If the env override points at a missing path or no
            git root is found.
    """
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        path = Path(env_root).expanduser().resolve()
        if not path.exists():
            raise ProjectRootError(f"{PROJECT_ROOT_ENV} points at missing path: {path}")
        return path

    root = find_git_root(start or Path.cwd())
    if root is None:
        raise ProjectRootError(
            f"Not inside a git repository: {Path(start or Path.cwd()).resolve()}"
        )
    return root


def get_project_config_dir(repo_root: Path) -> Path:
    """Return ``<repo_root>/.lanes``."""
    return Path(repo_root) / PROJECT_CONFIG_DIRNAME


__all__ = [
    "PROJECT_ROOT_ENV",
    "PROJECT_CONFIG_DIRNAME",
    "ProjectRootError",
    "find_git_root",
    "resolve_project_root",
    "get_project_config_dir",
]
