"""Gemini CLI descriptor.

Gemini reads ``<worktree>/.gemini/settings.json`` on its own, so hooks and
MCP servers are merged into that file rather than passed on the command line.
Gemini hooks must answer with a JSON object on stdout.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from .base import (
    UUID_PATTERN,
    AgentConfig,
    CodeAgent,
    CommandOptions,
    HookConfig,
    LocalSettingsFile,
    PermissionMode,
    quote_prompt,
)
from .hooks import (
    STATUS_IDLE,
    STATUS_WAITING,
    STATUS_WORKING,
    session_capture_hook,
    status_hook,
)
from .mcp import McpConfigDelivery

LATEST_SENTINEL = "latest"
_NUMERIC_INDEX = re.compile(r"^\d+$")


class GeminiAgent(CodeAgent):
    default_config = AgentConfig(
        name="gemini",
        display_name="Gemini CLI",
        cli_command="gemini",
        settings_file_name="settings.json",
        data_dir=".gemini",
    )

    def get_local_settings_files(self) -> List[LocalSettingsFile]:
        return [LocalSettingsFile(dir=".gemini", file="settings.json")]

    def get_project_settings_path(self, worktree_path: Path | str) -> Optional[Path]:
        return Path(worktree_path) / ".gemini" / "settings.json"

    def build_start_command(self, options: CommandOptions) -> str:
        parts = [self.cli_command]
        if options.permission_mode:
            flag = self.get_permission_flag(options.permission_mode)
            if flag:
                parts.append(flag)
        if options.prompt:
            parts.append(quote_prompt(options.prompt))
        return " ".join(parts)

    def build_resume_command(self, session_id: str, options: CommandOptions) -> str:
        self._require_session_id(session_id, "UUID, numeric index, or 'latest'")
        parts = [self.cli_command, "--resume"]
        if session_id != LATEST_SENTINEL:
            parts.append(session_id)
        return " ".join(parts)

    def validate_session_id(self, session_id: str) -> bool:
        return bool(
            UUID_PATTERN.match(session_id)
            or _NUMERIC_INDEX.match(session_id)
            or session_id == LATEST_SENTINEL
        )

    def get_permission_modes(self) -> List[PermissionMode]:
        return [
            PermissionMode("default", "Default"),
            PermissionMode("acceptEdits", "Accept Edits", "--approval-mode auto_edit"),
            PermissionMode("bypassPermissions", "Bypass Permissions", "--approval-mode yolo"),
        ]

    def supports_hooks(self) -> bool:
        return True

    def get_hook_events(self) -> List[str]:
        return [
            "SessionStart",
            "BeforeAgent",
            "AfterAgent",
            "BeforeTool",
            "AfterTool",
            "Notification",
            "SessionEnd",
        ]

    def generate_hooks_config(
        self,
        worktree_path: Path | str,
        session_file_path: Path | str,
        status_file_path: Path | str,
    ) -> List[HookConfig]:
        capture = session_capture_hook(session_file_path, emit_json=True)
        waiting = status_hook(status_file_path, STATUS_WAITING, emit_json=True)
        working = status_hook(status_file_path, STATUS_WORKING, emit_json=True)
        idle = status_hook(status_file_path, STATUS_IDLE, emit_json=True)
        return [
            *(
                HookConfig("SessionStart", [capture, waiting], matcher=m)
                for m in ("startup", "resume", "clear")
            ),
            HookConfig("BeforeAgent", [working]),
            HookConfig("AfterAgent", [waiting]),
            HookConfig("BeforeTool", [working], matcher=".*"),
            HookConfig("AfterTool", [working], matcher=".*"),
            HookConfig("Notification", [waiting], matcher="*"),
            HookConfig("SessionEnd", [idle], matcher="*"),
        ]

    def supports_mcp(self) -> bool:
        return True

    def get_mcp_config_delivery(self) -> McpConfigDelivery:
        return "settings"


__all__ = ["GeminiAgent", "LATEST_SENTINEL"]
