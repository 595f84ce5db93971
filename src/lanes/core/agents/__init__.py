"""Code agent descriptors: one capability set per coding-agent CLI."""
from __future__ import annotations

from .base import (
    AgentConfig,
    CodeAgent,
    CommandOptions,
    HookCommand,
    HookConfig,
    LocalSettingsFile,
    PermissionMode,
)
from .claude import ClaudeCodeAgent
from .codex import CodexAgent
from .cortex import CortexCodeAgent
from .gemini import GeminiAgent
from .mcp import McpConfig, McpServerConfig
from .opencode import OpenCodeAgent
from .registry import AGENT_CLASSES, DEFAULT_AGENT_NAME, AgentRegistry, is_cli_available

__all__ = [
    "AGENT_CLASSES",
    "AgentConfig",
    "AgentRegistry",
    "ClaudeCodeAgent",
    "CodeAgent",
    "CodexAgent",
    "CommandOptions",
    "CortexCodeAgent",
    "DEFAULT_AGENT_NAME",
    "GeminiAgent",
    "HookCommand",
    "HookConfig",
    "LocalSettingsFile",
    "McpConfig",
    "McpServerConfig",
    "OpenCodeAgent",
    "PermissionMode",
    "is_cli_available",
]
