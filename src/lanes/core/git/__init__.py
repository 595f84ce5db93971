"""Git access for Lanes: the gateway and worktree inspection helpers."""
from __future__ import annotations

from .gateway import (
    GitGateway,
    WorktreeInfo,
    clean_git_env,
    is_valid_branch_name,
    parse_worktree_list,
)

__all__ = [
    "GitGateway",
    "WorktreeInfo",
    "clean_git_env",
    "is_valid_branch_name",
    "parse_worktree_list",
]
