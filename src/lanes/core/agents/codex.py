"""Codex CLI descriptor.

Codex has no hook system, so the execution surface of a Codex session is
recorded in session metadata at creation time. MCP servers are injected per
invocation with ``-c mcp_servers.<id>.*`` overrides instead of editing the
user's global ``~/.codex/config.toml``.
"""
from __future__ import annotations

import shlex
from typing import List

from .base import UUID_PATTERN, AgentConfig, CodeAgent, CommandOptions, PermissionMode, quote_prompt
from .mcp import McpConfig, McpConfigDelivery, build_codex_mcp_config_overrides


class CodexAgent(CodeAgent):
    default_config = AgentConfig(
        name="codex",
        display_name="Codex",
        cli_command="codex",
        settings_file_name="config.toml",
        data_dir=".codex",
    )

    def build_start_command(self, options: CommandOptions) -> str:
        parts = [self.cli_command]
        if options.mcp_overrides:
            parts.append(shlex.join(options.mcp_overrides))
        if options.permission_mode:
            flag = self.get_permission_flag(options.permission_mode)
            if flag:
                parts.append(flag)
        if options.prompt:
            parts.append(quote_prompt(options.prompt))
        return " ".join(parts)

    def build_resume_command(self, session_id: str, options: CommandOptions) -> str:
        self._require_session_id(session_id, "UUID format")
        parts = [self.cli_command, "resume", session_id]
        if options.mcp_overrides:
            parts.append(shlex.join(options.mcp_overrides))
        return " ".join(parts)

    def validate_session_id(self, session_id: str) -> bool:
        return bool(UUID_PATTERN.match(session_id))

    def get_permission_modes(self) -> List[PermissionMode]:
        return [
            PermissionMode(
                "acceptEdits",
                "Accept Edits",
                "--sandbox workspace-write --ask-for-approval on-failure",
            ),
            PermissionMode(
                "bypassPermissions",
                "Bypass Permissions",
                "--sandbox danger-full-access --ask-for-approval never",
            ),
        ]

    def supports_mcp(self) -> bool:
        return True

    def get_mcp_config_delivery(self) -> McpConfigDelivery:
        return "cli-overrides"

    def build_mcp_overrides(self, config: McpConfig) -> List[str]:
        return build_codex_mcp_config_overrides(config)


__all__ = ["CodexAgent"]
