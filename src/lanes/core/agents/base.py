"""Base class for code agent descriptors.

A :class:`CodeAgent` describes everything that differs between coding-agent
CLIs: the names of its session/status/settings files, how to build its start
and resume commands, how it wants MCP configuration delivered, and which
lifecycle hooks it supports. Orchestration code only ever calls these
capabilities; it never branches on ``agent.name``.

Subclasses must implement:
- ``build_start_command()`` / ``build_resume_command()``
- ``validate_session_id()``
- ``get_permission_modes()``

and may override the hook, MCP, and settings-path capabilities, whose
defaults describe a backend with no hooks, no MCP, and no fixed project
settings file.
"""
from __future__ import annotations

import re
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from lanes.core.exceptions import InvalidSessionId

from .mcp import McpConfig, McpConfigDelivery, build_workflow_server

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

DEFAULT_SESSION_FILE_NAME = ".claude-session"
DEFAULT_STATUS_FILE_NAME = ".claude-status"


@dataclass(frozen=True)
class AgentConfig:
    """Static identity and file naming for one backend."""

    name: str
    display_name: str
    cli_command: str
    settings_file_name: str
    data_dir: str
    session_file_name: str = DEFAULT_SESSION_FILE_NAME
    status_file_name: str = DEFAULT_STATUS_FILE_NAME


@dataclass(frozen=True)
class PermissionMode:
    id: str
    label: str
    flag: str = ""


@dataclass(frozen=True)
class LocalSettingsFile:
    """A file under ``<repo>/<dir>/<file>`` to propagate into new worktrees."""

    dir: str
    file: str


@dataclass(frozen=True)
class HookCommand:
    command: str
    type: str = "command"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "command": self.command}


@dataclass(frozen=True)
class HookConfig:
    event: str
    commands: Sequence[HookCommand]
    matcher: Optional[str] = None


@dataclass
class CommandOptions:
    """Inputs for ``build_start_command`` and ``build_resume_command``.

    ``prompt`` is only used when starting a new agent session.
    """

    permission_mode: Optional[str] = None
    settings_path: Optional[str] = None
    mcp_config_path: Optional[str] = None
    mcp_overrides: List[str] = field(default_factory=list)
    prompt: Optional[str] = None


def escape_for_single_quotes(value: str) -> str:
    """Escape ``value`` for embedding inside a single-quoted shell string."""
    return value.replace("'", "'\\''")


def quote_prompt(prompt: str) -> str:
    return f"'{escape_for_single_quotes(prompt)}'"


def quote_path(path: Path | str) -> str:
    return shlex.quote(str(path))


class CodeAgent(ABC):
    """Capability set for one coding-agent CLI."""

    default_config: AgentConfig

    def __init__(
        self,
        *,
        cli_command: Optional[str] = None,
        mcp_server_command: str = "lanes-mcp",
        mcp_server_args: Sequence[str] = (),
    ) -> None:
        cfg = self.default_config
        self.config = (
            AgentConfig(
                name=cfg.name,
                display_name=cfg.display_name,
                cli_command=cli_command,
                settings_file_name=cfg.settings_file_name,
                data_dir=cfg.data_dir,
                session_file_name=cfg.session_file_name,
                status_file_name=cfg.status_file_name,
            )
            if cli_command
            else cfg
        )
        self.mcp_server_command = mcp_server_command
        self.mcp_server_args = list(mcp_server_args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, cli={self.cli_command!r})"

    # ---------- identity ----------

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def display_name(self) -> str:
        return self.config.display_name

    @property
    def cli_command(self) -> str:
        return self.config.cli_command

    # ---------- file naming ----------

    def get_session_file_name(self) -> str:
        return self.config.session_file_name

    def get_status_file_name(self) -> str:
        return self.config.status_file_name

    def get_settings_file_name(self) -> str:
        return self.config.settings_file_name

    def get_data_directory(self) -> str:
        return self.config.data_dir

    def get_terminal_name(self, session_name: str) -> str:
        return f"{self.display_name}: {session_name}"

    def get_local_settings_files(self) -> List[LocalSettingsFile]:
        return []

    def get_project_settings_path(self, worktree_path: Path | str) -> Optional[Path]:
        """Fixed settings location the CLI reads by itself, or None."""
        return None

    # ---------- commands ----------

    @abstractmethod
    def build_start_command(self, options: CommandOptions) -> str:
        ...

    @abstractmethod
    def build_resume_command(self, session_id: str, options: CommandOptions) -> str:
        """Build the resume command.

        Raises:
            InvalidSessionId: When ``session_id`` does not have this backend's shape.
        """

    @abstractmethod
    def validate_session_id(self, session_id: str) -> bool:
        ...

    def _require_session_id(self, session_id: str, expected: str) -> None:
        if not isinstance(session_id, str) or not self.validate_session_id(session_id):
            raise InvalidSessionId(self.name, str(session_id), expected)

    # ---------- permissions ----------

    @abstractmethod
    def get_permission_modes(self) -> List[PermissionMode]:
        ...

    def validate_permission_mode(self, mode: str) -> bool:
        return any(m.id == mode for m in self.get_permission_modes())

    def get_permission_flag(self, mode: Optional[str]) -> str:
        for m in self.get_permission_modes():
            if m.id == mode:
                return m.flag
        return ""

    # ---------- hooks ----------

    def supports_hooks(self) -> bool:
        return False

    def get_hook_events(self) -> List[str]:
        return []

    def generate_hooks_config(
        self,
        worktree_path: Path | str,
        session_file_path: Path | str,
        status_file_path: Path | str,
    ) -> List[HookConfig]:
        return []

    # ---------- MCP ----------

    def supports_mcp(self) -> bool:
        return False

    def get_mcp_config_delivery(self) -> McpConfigDelivery:
        return "cli"

    def get_mcp_config(
        self,
        worktree_path: Path | str,
        workflow_path: Path | str,
        repo_root: Path | str,
    ) -> Optional[McpConfig]:
        if not self.supports_mcp():
            return None
        return build_workflow_server(
            command=self.mcp_server_command,
            base_args=self.mcp_server_args,
            worktree_path=worktree_path,
            workflow_path=workflow_path,
            repo_root=repo_root,
        )

    def build_mcp_overrides(self, config: McpConfig) -> List[str]:
        """CLI flags carrying ``config``; only meaningful for ``cli-overrides`` delivery."""
        return []

    def format_mcp_for_settings(self, config: McpConfig) -> Dict[str, Any]:
        """Fragment merged into the settings object for ``settings`` delivery."""
        return config.to_dict()


__all__ = [
    "AgentConfig",
    "CodeAgent",
    "CommandOptions",
    "HookCommand",
    "HookConfig",
    "LocalSettingsFile",
    "PermissionMode",
    "UUID_PATTERN",
    "escape_for_single_quotes",
    "quote_path",
    "quote_prompt",
]
