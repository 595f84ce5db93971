"""Registry of code agent descriptors keyed by stable agent name.

The agent that owns a session is chosen once, at creation, and persisted by
name in session metadata. Later lookups go through
:meth:`AgentRegistry.resolve_for_session` rather than any process-wide
"current agent".
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Type

from lanes.core.exceptions import AgentNotFound

from .base import CodeAgent
from .claude import ClaudeCodeAgent
from .codex import CodexAgent
from .cortex import CortexCodeAgent
from .gemini import GeminiAgent
from .opencode import OpenCodeAgent

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NAME = "claude"

AGENT_CLASSES: Dict[str, Type[CodeAgent]] = {
    cls.default_config.name: cls
    for cls in (ClaudeCodeAgent, CodexAgent, CortexCodeAgent, GeminiAgent, OpenCodeAgent)
}


def is_cli_available(cli_command: str) -> bool:
    """Whether ``cli_command`` resolves to an executable on PATH."""
    return shutil.which(cli_command) is not None


class AgentRegistry:
    """Creates and caches one descriptor instance per agent name."""

    def __init__(
        self,
        *,
        default_agent: str = DEFAULT_AGENT_NAME,
        mcp_server_command: str = "lanes-mcp",
        mcp_server_args: Sequence[str] = (),
        cli_overrides: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.default_agent = default_agent
        self.mcp_server_command = mcp_server_command
        self.mcp_server_args = list(mcp_server_args)
        self.cli_overrides = dict(cli_overrides or {})
        self._instances: Dict[str, CodeAgent] = {}

    @classmethod
    def from_config(cls, repo_root: Optional[Path] = None) -> "AgentRegistry":
        from lanes.core.config.domains.agents import AgentsConfig

        cfg = AgentsConfig(repo_root=repo_root)
        return cls(
            default_agent=cfg.default,
            mcp_server_command=cfg.mcp_server_command,
            mcp_server_args=cfg.mcp_server_args,
            cli_overrides=cfg.cli_overrides,
        )

    def available_agents(self) -> List[str]:
        return sorted(AGENT_CLASSES)

    def get_agent(self, name: str) -> CodeAgent:
        """Return the descriptor for ``name``.

        Raises:
            AgentNotFound: If no backend is registered under ``name``.
        """
        agent = self._instances.get(name)
        if agent is not None:
            return agent
        cls = AGENT_CLASSES.get(name)
        if cls is None:
            raise AgentNotFound(name, self.available_agents())
        agent = cls(
            cli_command=self.cli_overrides.get(name),
            mcp_server_command=self.mcp_server_command,
            mcp_server_args=self.mcp_server_args,
        )
        self._instances[name] = agent
        return agent

    def get_default_agent(self) -> CodeAgent:
        return self.get_agent(self.default_agent)

    def resolve_for_session(self, agent_name: Optional[str]) -> CodeAgent:
        """Descriptor for a session's persisted ``agentName``.

        Sessions created before agent names were recorded, or by a backend
        that is no longer registered, fall back to the default agent.
        """
        if agent_name:
            try:
                return self.get_agent(agent_name)
            except AgentNotFound:
                logger.warning(
                    "Session references unknown agent %r; using %r", agent_name, self.default_agent
                )
        return self.get_default_agent()


__all__ = [
    "AGENT_CLASSES",
    "AgentRegistry",
    "DEFAULT_AGENT_NAME",
    "is_cli_available",
]
