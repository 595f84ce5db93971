"""OpenCode CLI descriptor.

OpenCode reads ``opencode.jsonc`` from its working directory and configures
permissions there rather than through flags, so the permission modes exist
for display only.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import AgentConfig, CodeAgent, CommandOptions, PermissionMode, quote_prompt
from .mcp import McpConfig, McpConfigDelivery

SESSION_ID_PATTERN = re.compile(r"^ses_[A-Za-z0-9]+$")


class OpenCodeAgent(CodeAgent):
    default_config = AgentConfig(
        name="opencode",
        display_name="OpenCode",
        cli_command="opencode",
        settings_file_name="opencode.jsonc",
        data_dir=".opencode",
    )

    def get_project_settings_path(self, worktree_path: Path | str) -> Optional[Path]:
        return Path(worktree_path) / "opencode.jsonc"

    def build_start_command(self, options: CommandOptions) -> str:
        # A positional argument would be taken as a project directory.
        parts = [self.cli_command]
        if options.prompt:
            parts.extend(["--prompt", quote_prompt(options.prompt)])
        return " ".join(parts)

    def build_resume_command(self, session_id: str, options: CommandOptions) -> str:
        self._require_session_id(session_id, "OpenCode ses_ format")
        return " ".join([self.cli_command, "--session", session_id])

    def validate_session_id(self, session_id: str) -> bool:
        return bool(SESSION_ID_PATTERN.match(session_id))

    def get_permission_modes(self) -> List[PermissionMode]:
        return [
            PermissionMode("acceptEdits", "Accept Edits"),
            PermissionMode("bypassPermissions", "Bypass Permissions"),
        ]

    def supports_mcp(self) -> bool:
        return True

    def get_mcp_config_delivery(self) -> McpConfigDelivery:
        return "settings"

    def format_mcp_for_settings(self, config: McpConfig) -> Dict[str, Any]:
        return {
            "mcp": {
                name: {"type": "local", "command": [server.command, *server.args]}
                for name, server in config.servers.items()
            }
        }


__all__ = ["OpenCodeAgent", "SESSION_ID_PATTERN"]
