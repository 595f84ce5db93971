"""Propagate untracked agent settings from the base repo into new worktrees.

Agent-local files such as ``.claude/settings.local.json`` are usually
git-ignored, so a fresh worktree would not see them. They are copied or
symlinked in; a failure for one file is reported and skipped.
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Literal, Optional

from lanes.core.agents.base import CodeAgent, LocalSettingsFile
from lanes.core.utils.reporting import WarningCallback, emit_warning

logger = logging.getLogger(__name__)

PropagationMode = Literal["copy", "symlink", "disabled"]

# Used when no agent is known (sessions predating agent selection).
DEFAULT_LOCAL_SETTINGS = (LocalSettingsFile(dir=".claude", file="settings.local.json"),)


def _propagate_one(
    base_repo: Path,
    worktree: Path,
    mode: PropagationMode,
    entry: LocalSettingsFile,
) -> Optional[Path]:
    source = base_repo / entry.dir / entry.file
    if not source.is_file():
        return None

    target_dir = worktree / entry.dir
    target = target_dir / entry.file
    target_dir.mkdir(parents=True, exist_ok=True)

    if mode == "symlink":
        if target.is_symlink() or target.exists():
            target.unlink()
        # Relative links survive moving the repo and its worktrees together.
        target.symlink_to(os.path.relpath(source, target_dir))
    else:
        shutil.copy2(source, target)
    return target


def propagate_local_settings(
    base_repo: Path | str,
    worktree: Path | str,
    mode: PropagationMode,
    agent: Optional[CodeAgent] = None,
    *,
    on_warning: Optional[WarningCallback] = None,
) -> List[Path]:
    """Copy or link the agent's local settings files into ``worktree``.

    Returns:
        Target paths that were written.
    """
    if mode == "disabled":
        return []

    entries = agent.get_local_settings_files() if agent is not None else list(DEFAULT_LOCAL_SETTINGS)
    written: List[Path] = []
    for entry in entries:
        try:
            target = _propagate_one(Path(base_repo), Path(worktree), mode, entry)
        except OSError as exc:
            message = f"Failed to propagate local settings ({entry.dir}/{entry.file}): {exc}"
            emit_warning(message, on_warning, logger=logger)
            continue
        if target is not None:
            logger.debug("Propagated %s (%s) into %s", entry.file, mode, target)
            written.append(target)
    return written


__all__ = ["PropagationMode", "DEFAULT_LOCAL_SETTINGS", "propagate_local_settings"]
