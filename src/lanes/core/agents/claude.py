"""Claude Code CLI descriptor."""
from __future__ import annotations

from pathlib import Path
from typing import List

from .base import (
    UUID_PATTERN,
    AgentConfig,
    CodeAgent,
    CommandOptions,
    HookConfig,
    LocalSettingsFile,
    PermissionMode,
    quote_path,
    quote_prompt,
)
from .hooks import STATUS_WAITING, STATUS_WORKING, session_capture_hook, status_hook
from .mcp import McpConfigDelivery


class ClaudeCodeAgent(CodeAgent):
    """Claude Code: JSON settings passed with ``--settings``, MCP via ``--mcp-config``."""

    default_config = AgentConfig(
        name="claude",
        display_name="Claude",
        cli_command="claude",
        settings_file_name="claude-settings.json",
        data_dir=".claude",
    )

    def get_local_settings_files(self) -> List[LocalSettingsFile]:
        return [LocalSettingsFile(dir=".claude", file="settings.local.json")]

    def _config_flags(self, options: CommandOptions) -> List[str]:
        parts: List[str] = []
        if options.mcp_config_path:
            parts.append(f"--mcp-config {quote_path(options.mcp_config_path)}")
        if options.settings_path:
            parts.append(f"--settings {quote_path(options.settings_path)}")
        return parts

    def build_start_command(self, options: CommandOptions) -> str:
        parts = [self.cli_command, *self._config_flags(options)]
        if options.permission_mode and options.permission_mode != "default":
            flag = self.get_permission_flag(options.permission_mode)
            if flag:
                parts.append(flag)
        if options.prompt:
            parts.append(quote_prompt(options.prompt))
        return " ".join(parts)

    def build_resume_command(self, session_id: str, options: CommandOptions) -> str:
        self._require_session_id(session_id, "UUID format")
        parts = [self.cli_command, *self._config_flags(options), f"--resume {session_id}"]
        return " ".join(parts)

    def validate_session_id(self, session_id: str) -> bool:
        return bool(UUID_PATTERN.match(session_id))

    def get_permission_modes(self) -> List[PermissionMode]:
        return [
            PermissionMode("default", "Default"),
            PermissionMode("acceptEdits", "Accept Edits", "--permission-mode acceptEdits"),
            PermissionMode("bypassPermissions", "Bypass Permissions", "--dangerously-skip-permissions"),
            PermissionMode("dontAsk", "Don't Ask", "--permission-mode dontAsk"),
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
        return [
            HookConfig("SessionStart", [session_capture_hook(session_file_path)]),
            HookConfig("Stop", [waiting]),
            HookConfig("UserPromptSubmit", [working]),
            HookConfig("Notification", [waiting], matcher="permission_prompt"),
            HookConfig("PreToolUse", [working], matcher=".*"),
        ]

    def supports_mcp(self) -> bool:
        return True

    def get_mcp_config_delivery(self) -> McpConfigDelivery:
        return "cli"


__all__ = ["ClaudeCodeAgent"]
