"""Domain-specific configuration for workflow template discovery."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class WorkflowsConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "workflows"

    @cached_property
    def custom_folder(self) -> str:
        return str(self.section.get("custom_folder") or ".lanes/workflows")


__all__ = ["WorkflowsConfig"]
