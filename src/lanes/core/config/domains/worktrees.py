"""Domain-specific configuration for session worktrees."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from lanes.core.exceptions import ConfigError

from ..base import BaseDomainConfig

PROPAGATION_MODES = ("copy", "symlink", "disabled")


class WorktreesConfig(BaseDomainConfig):
    """Access to the ``worktrees`` section."""

    def _config_section(self) -> str:
        return "worktrees"

    @cached_property
    def folder(self) -> str:
        folder = str(self.section.get("folder") or ".worktrees")
        if ".." in Path(folder).parts:
            raise ConfigError(
                f"worktrees.folder must stay inside the repository: {folder}",
                context={"folder": folder},
            )
        return folder

    @property
    def folder_path(self) -> Path:
        """Absolute worktrees folder under the repository root."""
        return self.repo_root / self.folder

    @cached_property
    def local_settings_propagation(self) -> str:
        mode = str(self.section.get("local_settings_propagation") or "copy")
        if mode not in PROPAGATION_MODES:
            raise ConfigError(
                f"worktrees.local_settings_propagation must be one of {PROPAGATION_MODES}, got {mode!r}"
            )
        return mode

    @cached_property
    def default_remote(self) -> str:
        return str(self.section.get("default_remote") or "origin")


__all__ = ["WorktreesConfig", "PROPAGATION_MODES"]
