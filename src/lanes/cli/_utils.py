"""Shared CLI helpers."""
from __future__ import annotations

import argparse
from pathlib import Path

from lanes.core.utils.paths import resolve_project_root


def get_repo_root(args: argparse.Namespace) -> Path:
    """Repository root from ``--repo-root`` or auto-detection.

    Raises:
        ProjectRootError: No root was given and none could be detected.
    """
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return resolve_project_root()


__all__ = ["get_repo_root"]
