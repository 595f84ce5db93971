"""Version control gateway.

Every git invocation made by Lanes goes through :class:`GitGateway`. Arguments
are always passed as a discrete list (never through a shell) so session and
branch names cannot inject commands, and every call is bounded by a
configured timeout bucket.
"""
from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Set

from lanes.core.exceptions import GitOperationFailed
from lanes.core.utils.subprocess import run_with_timeout

logger = logging.getLogger(__name__)

BRANCH_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_\-./]+$")

# Variables set by git for hooks and nested invocations. Inheriting them would
# point child commands at the wrong repository or index.
_SCRUBBED_ENV_VARS = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_PREFIX",
    "GIT_COMMON_DIR",
    "GIT_OBJECT_DIRECTORY",
    "GIT_ALTERNATE_OBJECT_DIRECTORIES",
)


@dataclass(frozen=True)
class WorktreeInfo:
    """One entry of ``git worktree list --porcelain``."""

    path: str
    head: Optional[str] = None
    branch: Optional[str] = None
    bare: bool = False
    detached: bool = False
    prunable: bool = False


def is_valid_branch_name(name: str) -> bool:
    """Charset check for branch names passed to git.

    Rejects anything outside ``[a-zA-Z0-9_-./]`` as well as ``..`` and a
    leading ``-`` (which git would parse as an option).
    """
    if not name or not BRANCH_NAME_PATTERN.fullmatch(name):
        return False
    return ".." not in name and not name.startswith("-")


def parse_worktree_list(stdout: str) -> List[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output."""
    entries: List[WorktreeInfo] = []
    current: Dict[str, object] = {}

    def _flush() -> None:
        if current.get("path"):
            entries.append(WorktreeInfo(**current))  # type: ignore[arg-type]
        current.clear()

    for raw in stdout.splitlines():
        line = raw.strip()
        if not line:
            _flush()
            continue
        if line.startswith("worktree "):
            _flush()
            current["path"] = line.split(" ", 1)[1]
        elif line.startswith("HEAD "):
            current["head"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            ref = line.split(" ", 1)[1]
            current["branch"] = ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else ref
        elif line == "bare":
            current["bare"] = True
        elif line == "detached":
            current["detached"] = True
        elif line.startswith("prunable"):
            current["prunable"] = True
    _flush()
    return entries


def clean_git_env(base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Return a copy of ``base`` (default: os.environ) safe for child git processes."""
    env = dict(os.environ if base is None else base)
    for key in _SCRUBBED_ENV_VARS:
        env.pop(key, None)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


class GitGateway:
    """Runs git subcommands against a working directory.

    Args:
        repo_path: Default working directory for commands.
        git_executable: Git binary (overridable for tests and wrappers).
        timeouts: Optional per-bucket timeout overrides in seconds, keyed by
            ``git_local`` / ``git_network``. Unset buckets use configuration.
    """

    def __init__(
        self,
        repo_path: Path | str,
        *,
        git_executable: str = "git",
        timeouts: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.repo_path = Path(repo_path)
        self.git_executable = git_executable
        self._timeouts = dict(timeouts or {})

    # ---------- execution ----------

    def _execute(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path | str],
        timeout_type: Optional[str],
    ) -> subprocess.CompletedProcess:
        argv = [self.git_executable, *[str(a) for a in args]]
        workdir = str(cwd if cwd is not None else self.repo_path)
        ttype = timeout_type or ("git_network" if args and args[0] == "fetch" else "git_local")
        try:
            return run_with_timeout(
                argv,
                ttype,
                cwd=workdir,
                env=clean_git_env(),
                timeout=self._timeouts.get(ttype),
            )
        except subprocess.TimeoutExpired as exc:
            stderr = exc.stderr if isinstance(exc.stderr, str) else ""
            raise GitOperationFailed(
                f"git {' '.join(str(a) for a in args)} timed out after {exc.timeout:.1f}s",
                command=argv,
                stderr=stderr,
                cwd=workdir,
                timed_out=True,
            ) from exc
        except OSError as exc:
            raise GitOperationFailed(
                f"Failed to spawn git: {exc}",
                command=argv,
                stderr=str(exc),
                cwd=workdir,
            ) from exc

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path | str] = None,
        timeout_type: Optional[str] = None,
    ) -> str:
        """Run ``git <args>`` and return stdout.

        Raises:
            GitOperationFailed: On non-zero exit, spawn failure, or timeout.
        """
        result = self._execute(args, cwd=cwd, timeout_type=timeout_type)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise GitOperationFailed(
                f"git {' '.join(str(a) for a in args)} failed (exit {result.returncode})"
                + (f": {stderr}" if stderr else ""),
                command=list(result.args),
                exit_code=result.returncode,
                stderr=stderr,
                cwd=str(cwd if cwd is not None else self.repo_path),
            )
        return result.stdout or ""

    def succeeds(self, args: Sequence[str], *, cwd: Optional[Path | str] = None) -> bool:
        """Return True when ``git <args>`` exits 0.

        A non-zero exit is an answer, not an error; spawn failures and
        timeouts still raise ``GitOperationFailed``.
        """
        return self._execute(args, cwd=cwd, timeout_type=None).returncode == 0

    # ---------- refs ----------

    def branch_exists(self, name: str) -> bool:
        if not is_valid_branch_name(name):
            logger.debug("branch_exists: rejecting invalid branch name %r", name)
            return False
        return self.succeeds(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"])

    def remote_branch_exists(self, remote: str, branch: str) -> bool:
        ref = f"{remote}/{branch}"
        if not is_valid_branch_name(ref):
            return False
        return self.succeeds(["show-ref", "--verify", "--quiet", f"refs/remotes/{ref}"])

    def fetch(self, remote: str, branch: str) -> None:
        self.run(["fetch", remote, branch])

    def merge_base(self, a: str, b: str) -> str:
        return self.run(["merge-base", a, b]).strip()

    # ---------- worktrees ----------

    def list_worktrees(self) -> List[WorktreeInfo]:
        return parse_worktree_list(self.run(["worktree", "list", "--porcelain"]))

    def get_branches_in_worktrees(self) -> Set[str]:
        """Branches currently checked out by any worktree (main checkout included)."""
        return {wt.branch for wt in self.list_worktrees() if wt.branch}

    def find_worktree_for_branch(self, branch: str) -> Optional[WorktreeInfo]:
        for wt in self.list_worktrees():
            if wt.branch == branch:
                return wt
        return None

    def worktree_add(
        self,
        path: Path | str,
        branch: str,
        *,
        new_branch: bool = False,
        start_point: Optional[str] = None,
    ) -> None:
        """Create a worktree at ``path``.

        With ``new_branch`` the branch is created (``-b``) from ``start_point``
        (default: HEAD); otherwise the existing branch is checked out.
        """
        if new_branch:
            args = ["worktree", "add", "-b", branch, str(path)]
            if start_point:
                args.append(start_point)
        else:
            args = ["worktree", "add", str(path), branch]
        self.run(args)

    def worktree_prune(self) -> None:
        self.run(["worktree", "prune"])

    def get_base_repo_path(self, path: Optional[Path | str] = None) -> Path:
        """Return the main repository for ``path`` (which may be a linked worktree)."""
        cwd = Path(path) if path is not None else self.repo_path
        common = self.run(["rev-parse", "--git-common-dir"], cwd=cwd).strip()
        common_path = Path(common)
        if not common_path.is_absolute():
            common_path = (cwd / common_path).resolve()
        # Bare repositories have no .git directory above the common dir.
        return common_path.parent if common_path.name == ".git" else common_path


__all__ = [
    "BRANCH_NAME_PATTERN",
    "GitGateway",
    "WorktreeInfo",
    "clean_git_env",
    "is_valid_branch_name",
    "parse_worktree_list",
]
