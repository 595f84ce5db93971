"""Domain-specific configuration accessors."""
from __future__ import annotations

from .agents import AgentsConfig
from .logging import LoggingConfig
from .timeouts import TimeoutsConfig
from .workflows import WorkflowsConfig
from .worktrees import WorktreesConfig

__all__ = [
    "AgentsConfig",
    "LoggingConfig",
    "TimeoutsConfig",
    "WorkflowsConfig",
    "WorktreesConfig",
]
