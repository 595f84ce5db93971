"""Session creation: materialize a branch + worktree pair for a new session.

The session name is the branch name and the worktree directory name. The
caller validates it beforehand (see :mod:`lanes.core.session.validation`).

Concurrent creations of the same session name must be serialized by the
caller: the branch and worktree checks here are read-then-act.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Literal, Optional

from lanes.core.agents.base import CodeAgent
from lanes.core.exceptions import (
    BranchAlreadyInUse,
    GitOperationFailed,
    SessionCreationCancelled,
    SourceBranchNotFound,
    ValidationError,
)
from lanes.core.git.gateway import GitGateway, is_valid_branch_name
from lanes.core.utils.reporting import WarningCallback, emit_warning

from .local_settings import PropagationMode, propagate_local_settings
from .metadata import SessionMetadataStore

logger = logging.getLogger(__name__)

BranchConflictResolution = Literal["use-existing", "cancel"]
BranchConflictCallback = Callable[[str], BranchConflictResolution]

DEFAULT_REMOTE = "origin"


def split_source_branch(source: str, default_remote: str = DEFAULT_REMOTE) -> tuple[str, str]:
    """Split ``remote/branch`` at the first ``/``; bare names use ``default_remote``."""
    if "/" in source:
        remote, branch = source.split("/", 1)
        return remote, branch
    return default_remote, source


def _worktree_add_or_cleanup(
    gateway: GitGateway,
    worktree_path: Path,
    branch: str,
    *,
    new_branch: bool,
    start_point: Optional[str] = None,
) -> None:
    existed_before = worktree_path.exists()
    try:
        gateway.worktree_add(worktree_path, branch, new_branch=new_branch, start_point=start_point)
    except GitOperationFailed:
        # Never leave a half-built directory behind a failed add.
        if not existed_before and worktree_path.exists():
            shutil.rmtree(worktree_path, ignore_errors=True)
            try:
                gateway.worktree_prune()
            except GitOperationFailed as prune_exc:
                logger.debug("worktree prune after failed add: %s", prune_exc)
        raise


def create_session_worktree(
    repo_root: Path | str,
    session_name: str,
    *,
    worktrees_folder: Path | str = ".worktrees",
    source_branch: Optional[str] = None,
    agent: Optional[CodeAgent] = None,
    local_settings_mode: PropagationMode = "copy",
    terminal: Optional[str] = None,
    on_branch_conflict: Optional[BranchConflictCallback] = None,
    on_warning: Optional[WarningCallback] = None,
    gateway: Optional[GitGateway] = None,
    default_remote: str = DEFAULT_REMOTE,
) -> Path:
    """Create the worktree for ``session_name`` and return its absolute path.

    Args:
        repo_root: Base repository.
        session_name: Validated session name (also the branch name).
        worktrees_folder: Folder for session worktrees, relative to ``repo_root``
            unless absolute.
        source_branch: Branch to start a new branch from (``remote/branch`` or a
            local name). HEAD when omitted.
        agent: Owning agent; when given, session metadata is seeded.
        local_settings_mode: ``copy``, ``symlink`` or ``disabled``.
        terminal: Execution surface hint (``code`` or ``tmux``), recorded for
            agents without hooks.
        on_branch_conflict: Asked what to do when the branch already exists
            and is free. Defaults to reusing it.
        on_warning: Receives non-fatal problems (failed fetch, settings copy).
        gateway: Git gateway (created for ``repo_root`` when omitted).
        default_remote: Remote assumed for source branches without a ``/``.

    Raises:
        BranchAlreadyInUse: The branch is checked out in another worktree.
        SessionCreationCancelled: The conflict callback answered ``cancel``.
        ValidationError: The source branch name is invalid.
        SourceBranchNotFound: The source branch exists neither locally nor remotely.
        GitOperationFailed: The worktree could not be created.
    """
    repo_root = Path(repo_root).resolve()
    git = gateway or GitGateway(repo_root)
    folder = Path(worktrees_folder)
    folder = folder if folder.is_absolute() else repo_root / folder
    worktree_path = folder / session_name

    folder.mkdir(parents=True, exist_ok=True)

    if git.branch_exists(session_name):
        in_use = git.find_worktree_for_branch(session_name)
        if in_use is not None:
            raise BranchAlreadyInUse(session_name, worktree_path=in_use.path)

        resolution = on_branch_conflict(session_name) if on_branch_conflict else "use-existing"
        if resolution == "cancel":
            raise SessionCreationCancelled(session_name)

        logger.info("Reusing existing branch %s for session worktree", session_name)
        _worktree_add_or_cleanup(git, worktree_path, session_name, new_branch=False)
    else:
        source = (source_branch or "").strip()
        if source:
            if not is_valid_branch_name(source):
                raise ValidationError(
                    f"Source branch name contains invalid characters: {source}",
                    context={"source_branch": source},
                )
            remote, branch = split_source_branch(source, default_remote)
            try:
                git.fetch(remote, branch)
            except GitOperationFailed as exc:
                emit_warning(
                    f"Could not fetch latest version of '{source}'. "
                    f"Proceeding with local data if available. ({exc})",
                    on_warning,
                    logger=logger,
                )

            if not git.branch_exists(source) and not git.succeeds(
                ["show-ref", "--verify", "--quiet", f"refs/remotes/{source}"]
            ):
                raise SourceBranchNotFound(source, remote=remote)

            _worktree_add_or_cleanup(
                git, worktree_path, session_name, new_branch=True, start_point=source
            )
        else:
            _worktree_add_or_cleanup(git, worktree_path, session_name, new_branch=True)

    logger.info("Created session worktree %s", worktree_path)

    try:
        propagate_local_settings(
            repo_root, worktree_path, local_settings_mode, agent, on_warning=on_warning
        )
    except OSError as exc:
        emit_warning(f"Failed to propagate local settings: {exc}", on_warning, logger=logger)

    if agent is not None:
        SessionMetadataStore.for_agent(repo_root, agent).seed(
            worktree_path, agent, terminal=terminal
        )

    return worktree_path


__all__ = [
    "BranchConflictCallback",
    "BranchConflictResolution",
    "DEFAULT_REMOTE",
    "create_session_worktree",
    "split_source_branch",
]
