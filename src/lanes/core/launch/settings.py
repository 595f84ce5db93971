"""Generate the per-session settings file handed to an agent CLI.

Agents that take a settings path on the command line get a file under the
session's metadata directory. Agents that only read a fixed project file
(``get_project_settings_path``) get that file updated in place: existing
user keys are kept, the hooks are replaced and the MCP table is merged.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from lanes.core.agents.base import CodeAgent
from lanes.core.agents.mcp import McpConfig
from lanes.core.session.metadata import SessionMetadataStore
from lanes.core.settings.formats import get_settings_format
from lanes.core.utils.io import ensure_lines_present

logger = logging.getLogger(__name__)

SettingsObject = Dict[str, Any]


class SettingsFileBuilder:
    """Builds and writes one agent's settings file for a session worktree."""

    def __init__(self, agent: CodeAgent, store: SessionMetadataStore) -> None:
        self.agent = agent
        self.store = store

    def settings_path_for(self, worktree_path: Path | str) -> Path:
        project_path = self.agent.get_project_settings_path(worktree_path)
        if project_path is not None:
            return Path(project_path)
        return self.store.session_dir(worktree_path) / self.agent.get_settings_file_name()

    def build_hooks(self, worktree_path: Path | str) -> Optional[Dict[str, List[Dict[str, Any]]]]:
        """Hooks table ``{event: [{matcher?, hooks: [...]}]}``, or None without hook support."""
        if not self.agent.supports_hooks():
            return None
        hooks: Dict[str, List[Dict[str, Any]]] = {}
        configs = self.agent.generate_hooks_config(
            worktree_path,
            self.store.path_for(worktree_path),
            self.store.status_path_for(worktree_path),
        )
        for cfg in configs:
            entry: Dict[str, Any] = {"hooks": [cmd.to_dict() for cmd in cfg.commands]}
            if cfg.matcher:
                entry["matcher"] = cfg.matcher
            hooks.setdefault(cfg.event, []).append(entry)
        return hooks

    def build(
        self,
        worktree_path: Path | str,
        *,
        mcp_config: Optional[McpConfig] = None,
    ) -> SettingsObject:
        """Settings object for the session, merged over the project file if any.

        ``mcp_config`` is embedded in the agent's settings shape; pass it only
        for agents whose MCP delivery mode is ``settings``.

        Raises:
            SettingsParseError: The existing project settings file is malformed.
        """
        hooks = self.build_hooks(worktree_path)
        mcp_fragment = self.agent.format_mcp_for_settings(mcp_config) if mcp_config else {}

        settings: SettingsObject = {}
        project_path = self.agent.get_project_settings_path(worktree_path)
        if project_path is not None:
            fmt = get_settings_format(self.agent.get_settings_file_name())
            settings.update(fmt.read(project_path))

        if hooks is not None:
            settings["hooks"] = hooks
        for key, value in mcp_fragment.items():
            existing = settings.get(key)
            if isinstance(existing, dict) and isinstance(value, dict):
                settings[key] = {**existing, **value}
            else:
                settings[key] = value
        return settings

    def write(
        self,
        worktree_path: Path | str,
        *,
        mcp_config: Optional[McpConfig] = None,
    ) -> Path:
        """Write the settings file atomically and return its path."""
        path = self.settings_path_for(worktree_path)
        settings = self.build(worktree_path, mcp_config=mcp_config)
        self.store.ensure_ignored()
        get_settings_format(self.agent.get_settings_file_name()).write(path, settings)
        logger.debug("Wrote %s settings to %s", self.agent.name, path)

        if self.agent.get_project_settings_path(worktree_path) is not None:
            self._ignore_in_worktree(Path(worktree_path), path)
        return path

    def _ignore_in_worktree(self, worktree_path: Path, settings_path: Path) -> None:
        rel = os.path.relpath(settings_path, worktree_path)
        if rel.startswith(".."):
            return
        try:
            ensure_lines_present(worktree_path / ".gitignore", [Path(rel).as_posix()])
        except OSError as exc:
            logger.warning("Could not add %s to %s/.gitignore: %s", rel, worktree_path, exc)


__all__ = ["SettingsFileBuilder", "SettingsObject"]
