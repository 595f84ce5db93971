"""Domain-specific configuration for code agents and the MCP server."""
from __future__ import annotations

from functools import cached_property
from typing import Dict, List

from ..base import BaseDomainConfig


class AgentsConfig(BaseDomainConfig):
    """Access to the ``agents`` section."""

    def _config_section(self) -> str:
        return "agents"

    @cached_property
    def default(self) -> str:
        return str(self.section.get("default") or "claude")

    @cached_property
    def mcp_server_command(self) -> str:
        return str(self.section.get("mcp_server_command") or "lanes-mcp")

    @cached_property
    def mcp_server_args(self) -> List[str]:
        return [str(a) for a in (self.section.get("mcp_server_args") or [])]

    @cached_property
    def cli_overrides(self) -> Dict[str, str]:
        """Per-agent replacement for the CLI executable (e.g. a wrapper script)."""
        raw = self.section.get("cli_overrides") or {}
        return {str(k): str(v) for k, v in raw.items()}


__all__ = ["AgentsConfig"]
