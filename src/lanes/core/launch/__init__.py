"""Agent launch orchestration: settings generation and command construction."""
from __future__ import annotations

from .service import (
    DEFAULT_PERMISSION_MODE,
    AgentLaunchService,
    LaunchContext,
    LaunchMode,
    LaunchResult,
)
from .settings import SettingsFileBuilder

__all__ = [
    "AgentLaunchService",
    "DEFAULT_PERMISSION_MODE",
    "LaunchContext",
    "LaunchMode",
    "LaunchResult",
    "SettingsFileBuilder",
]
