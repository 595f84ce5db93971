"""Git operation helpers for tests."""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from lanes.core.utils.subprocess import run_with_timeout


def _git(repo_path: Path, *args: str) -> str:
    result = run_with_timeout(["git", *args], cwd=repo_path, check=True, timeout=60)
    return result.stdout


def git_init(repo_path: Path, branch: str = "main") -> None:
    """Initialize a git repository.

    Args:
        repo_path: Path to repository
        branch: Initial branch name
    """
    _git(repo_path, "init", "-b", branch)


def git_config_identity(repo_path: Path) -> None:
    """Configure a local commit identity (required for commits)."""
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "commit.gpgsign", "false")


def git_commit(repo_path: Path, message: str, allow_empty: bool = False) -> None:
    """Stage everything and commit.

    Args:
        repo_path: Path to repository/worktree
        message: Commit message
        allow_empty: Allow empty commits
    """
    _git(repo_path, "add", "-A")
    args = ["commit", "-m", message]
    if allow_empty:
        args.append("--allow-empty")
    _git(repo_path, *args)


def git_create_branch(repo_path: Path, branch: str, start_point: str = "HEAD") -> None:
    _git(repo_path, "branch", branch, start_point)


def git_delete_branch(repo_path: Path, branch: str) -> None:
    _git(repo_path, "branch", "-D", branch)


def git_current_branch(repo_path: Path) -> str:
    return _git(repo_path, "rev-parse", "--abbrev-ref", "HEAD").strip()


def git_rev_parse(repo_path: Path, ref: str) -> str:
    return _git(repo_path, "rev-parse", ref).strip()


def git_create_worktree(
    repo_path: Path,
    worktree_path: Path,
    branch: str,
    base_branch: str = "main",
) -> None:
    """Create a worktree on a new branch.

    Args:
        repo_path: Path to main repository
        worktree_path: Path for new worktree
        branch: New branch name
        base_branch: Branch to base new branch on
    """
    worktree_path.parent.mkdir(parents=True, exist_ok=True)
    _git(repo_path, "worktree", "add", "-b", branch, str(worktree_path), base_branch)


def git_list_worktrees(repo_path: Path) -> List[str]:
    """List all worktree paths in the repository."""
    out = _git(repo_path, "worktree", "list", "--porcelain")
    return [line.split(" ", 1)[1] for line in out.splitlines() if line.startswith("worktree ")]


def break_worktree_metadata(repo_path: Path, worktree_name: str) -> None:
    """Delete ``.git/worktrees/<name>`` so the worktree's link dangles."""
    shutil.rmtree(repo_path / ".git" / "worktrees" / worktree_name)


def add_remote_with_branch(repo_path: Path, remote_path: Path, branch: str) -> None:
    """Create a bare remote holding ``branch`` and register it as ``origin``."""
    remote_path.mkdir(parents=True, exist_ok=True)
    _git(remote_path, "init", "--bare", "-b", "main")
    _git(repo_path, "remote", "add", "origin", str(remote_path))
    _git(repo_path, "push", "origin", f"HEAD:refs/heads/{branch}")


def git_untracked_files(repo_path: Path) -> List[str]:
    """Untracked, non-ignored paths relative to the repository root."""
    out = _git(repo_path, "status", "--porcelain", "--untracked-files=all")
    return sorted(line[3:] for line in out.splitlines() if line.startswith("?? "))
