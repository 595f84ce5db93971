"""Workflow template discovery."""
from __future__ import annotations

from .discovery import WorkflowTemplate, discover_workflows, resolve_workflow

__all__ = ["WorkflowTemplate", "discover_workflows", "resolve_workflow"]
