"""MCP server configuration model and delivery helpers.

Agents receive the workflow MCP server in one of three ways:

- ``cli``: a JSON file ``{"mcpServers": {...}}`` passed on the command line
- ``cli-overrides``: literal ``-c key=value`` flags (Codex style)
- ``settings``: embedded in the agent's own settings file
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Sequence

from lanes.core.utils.io import write_json_atomic

McpConfigDelivery = Literal["cli", "cli-overrides", "settings"]
MCP_DELIVERY_MODES: tuple[str, ...] = ("cli", "cli-overrides", "settings")

WORKFLOW_SERVER_NAME = "lanes-workflow"
MCP_CONFIG_FILE_NAME = "mcp-config.json"


@dataclass
class McpServerConfig:
    """Configuration for a single MCP server."""

    name: str
    command: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"command": self.command, "args": list(self.args)}
        if self.env:
            payload["env"] = dict(self.env)
        return payload


@dataclass
class McpConfig:
    """A set of MCP servers keyed by name."""

    servers: Dict[str, McpServerConfig] = field(default_factory=dict)

    def add_server(self, server: McpServerConfig) -> None:
        self.servers[server.name] = server

    def to_dict(self) -> Dict[str, Any]:
        return {"mcpServers": {name: cfg.to_dict() for name, cfg in self.servers.items()}}

    def save(self, path: Path) -> Path:
        """Write the ``{"mcpServers": ...}`` document atomically and return ``path``."""
        write_json_atomic(path, self.to_dict())
        return path

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "McpConfig":
        servers: Dict[str, McpServerConfig] = {}
        for name, raw in (data.get("mcpServers") or {}).items():
            servers[name] = McpServerConfig(
                name=name,
                command=str(raw.get("command", "")),
                args=[str(a) for a in raw.get("args", [])],
                env={str(k): str(v) for k, v in (raw.get("env") or {}).items()},
            )
        return cls(servers=servers)


def build_workflow_server(
    *,
    command: str,
    base_args: Sequence[str],
    worktree_path: Path | str,
    workflow_path: Path | str,
    repo_root: Path | str,
) -> McpConfig:
    """MCP config exposing the workflow server for one session."""
    config = McpConfig()
    config.add_server(
        McpServerConfig(
            name=WORKFLOW_SERVER_NAME,
            command=command,
            args=[
                *base_args,
                "--worktree",
                str(worktree_path),
                "--workflow-path",
                str(workflow_path),
                "--repo-root",
                str(repo_root),
            ],
        )
    )
    return config


def _toml_escape_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _toml_array_of_strings(values: Sequence[str]) -> str:
    inner = ", ".join(_toml_escape_string(v) for v in values)
    return f"[{inner}]"


def _toml_inline_table_string_map(values: Mapping[str, str]) -> str:
    items = ", ".join(f"{k}={_toml_escape_string(v)}" for k, v in sorted(values.items()))
    return f"{{{items}}}"


def build_codex_mcp_config_overrides(config: McpConfig) -> List[str]:
    """Build ``codex -c key=value`` overrides registering every server in ``config``.

    Returns:
        A flat list of CLI args, e.g. ``["-c", 'mcp_servers.foo.command="node"', ...]``.
    """
    args: List[str] = []
    for server_id, cfg in config.servers.items():
        base = f"mcp_servers.{server_id}"
        args.extend(["-c", f"{base}.command={_toml_escape_string(cfg.command)}"])
        args.extend(["-c", f"{base}.args={_toml_array_of_strings(cfg.args)}"])
        if cfg.env:
            args.extend(["-c", f"{base}.env={_toml_inline_table_string_map(cfg.env)}"])
    return args


__all__ = [
    "MCP_CONFIG_FILE_NAME",
    "MCP_DELIVERY_MODES",
    "McpConfig",
    "McpConfigDelivery",
    "McpServerConfig",
    "WORKFLOW_SERVER_NAME",
    "build_codex_mcp_config_overrides",
    "build_workflow_server",
]
