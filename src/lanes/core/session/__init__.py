"""Session lifecycle: naming, metadata, creation and worktree repair."""
from __future__ import annotations

from .creation import create_session_worktree, split_source_branch
from .local_settings import propagate_local_settings
from .metadata import SessionMetadata, SessionMetadataStore, session_name_for
from .repair import (
    BrokenWorktree,
    RepairOutcome,
    RepairResult,
    RepairStage,
    WorktreeRepairer,
)
from .validation import is_valid_session_name, validate_session_name

__all__ = [
    "BrokenWorktree",
    "RepairOutcome",
    "RepairResult",
    "RepairStage",
    "SessionMetadata",
    "SessionMetadataStore",
    "WorktreeRepairer",
    "create_session_worktree",
    "is_valid_session_name",
    "propagate_local_settings",
    "session_name_for",
    "split_source_branch",
    "validate_session_name",
]
