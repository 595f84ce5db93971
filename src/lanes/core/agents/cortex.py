"""Snowflake Cortex Code CLI descriptor.

Cortex Code is a fork of Claude Code: same hook events, session ids and
session files. It reads ``.cortex/settings.local.json`` from the project by
itself, takes no positional prompt and has no per-project MCP servers.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .base import UUID_PATTERN, AgentConfig, CodeAgent, CommandOptions, HookConfig, PermissionMode
from .hooks import STATUS_WAITING, STATUS_WORKING, session_capture_hook, status_hook


class CortexCodeAgent(CodeAgent):
    default_config = AgentConfig(
        name="cortex",
        display_name="Cortex Code",
        cli_command="cortex",
        settings_file_name="cortex-settings.json",
        data_dir=".cortex",
    )

    def get_terminal_name(self, session_name: str) -> str:
        return f"Cortex: {session_name}"

    def get_project_settings_path(self, worktree_path: Path | str) -> Optional[Path]:
        return Path(worktree_path) / ".cortex" / "settings.local.json"

    def build_start_command(self, options: CommandOptions) -> str:
        parts = [self.cli_command]
        if options.permission_mode:
            flag = self.get_permission_flag(options.permission_mode)
            if flag:
                parts.append(flag)
        return " ".join(parts)

    def build_resume_command(self, session_id: str, options: CommandOptions) -> str:
        self._require_session_id(session_id, "UUID format")
        return " ".join([self.cli_command, f"--resume {session_id}"])

    def validate_session_id(self, session_id: str) -> bool:
        return bool(UUID_PATTERN.match(session_id))

    def get_permission_modes(self) -> List[PermissionMode]:
        return [
            PermissionMode("acceptEdits", "Accept Edits"),
            PermissionMode("bypassPermissions", "Bypass Permissions", "--bypass"),
        ]

    def supports_hooks(self) -> bool:
        return True

    def get_hook_events(self) -> List[str]:
        return ["SessionStart", "Stop", "UserPromptSubmit", "Notification", "PreToolUse"]

    def generate_hooks_config(
        self,
        worktree_path: Path | str,
        session_file_path: Path | str,
        status_file_path: Path | str,
    ) -> List[HookConfig]:
        waiting = status_hook(status_file_path, STATUS_WAITING)
        working = status_hook(status_file_path, STATUS_WORKING)
        # Matchers are only accepted on tool events.
        return [
            HookConfig("SessionStart", [session_capture_hook(session_file_path)]),
            HookConfig("Stop", [waiting]),
            HookConfig("UserPromptSubmit", [working]),
            HookConfig("Notification", [waiting]),
            HookConfig("PreToolUse", [working], matcher=".*"),
        ]


__all__ = ["CortexCodeAgent"]
