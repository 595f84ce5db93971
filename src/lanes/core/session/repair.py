"""Detection and repair of session worktrees whose git linkage is gone.

A linked worktree has a ``.git`` *file* containing ``gitdir: <path>`` that
points into ``<repo>/.git/worktrees/<name>``. When that metadata directory
disappears (container rebuild, pruned clone, copied checkout), git no longer
recognizes the directory even though the user's files are still there.

Repair never deletes user files: the broken directory is renamed to a
timestamped backup, a fresh worktree is created in its place, and the backup
contents are copied over the fresh checkout before the backup is removed.
"""
from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from lanes.core.exceptions import BranchMissing, GitOperationFailed, LanesError, RepairIncomplete
from lanes.core.git.gateway import GitGateway
from lanes.core.utils.reporting import WarningCallback, emit_warning
from lanes.core.utils.time import epoch_millis

logger = logging.getLogger(__name__)

_GITDIR_RE = re.compile(r"^gitdir:\s*(.+)$", re.MULTILINE)

BACKUP_MARKER = ".repair-backup-"


class RepairStage(str, Enum):
    DETECTED = "detected"
    BACKED_UP = "backed_up"
    RECREATED = "recreated"
    RESTORED = "restored"
    CLEANED_UP = "cleaned_up"


@dataclass(frozen=True)
class BrokenWorktree:
    path: Path
    session_name: str
    # Session name, branch name and directory name are the same thing.
    expected_branch: str


@dataclass
class RepairOutcome:
    broken: BrokenWorktree
    stage: RepairStage
    backup_path: Optional[Path] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class RepairResult:
    success_count: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    outcomes: List[RepairOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def read_gitdir(git_file: Path) -> Optional[Path]:
    """Target of a worktree ``.git`` link file, or None when it has none."""
    try:
        content = git_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    match = _GITDIR_RE.search(content)
    if not match:
        return None
    target = Path(match.group(1).strip())
    if not target.is_absolute():
        target = (git_file.parent / target).resolve()
    return target


def _is_safe_entry_name(name: str) -> bool:
    return bool(name) and ".." not in name and "/" not in name and "\\" not in name


def _remove_path(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def copy_tree_over(src: Path, dest: Path) -> List[str]:
    """Copy ``src`` into ``dest`` with ``src`` winning every conflict.

    ``.git`` entries are skipped, symlinks are recreated rather than
    followed and permission bits are preserved. Entries that fail are
    skipped.

    Returns:
        One message per entry that could not be copied.
    """
    errors: List[str] = []
    try:
        entries = sorted(os.scandir(src), key=lambda e: e.name)
    except OSError as exc:
        return [f"{src}: {exc}"]

    for entry in entries:
        if entry.name == ".git":
            continue
        target = dest / entry.name
        try:
            if entry.is_symlink():
                if target.is_symlink() or target.exists():
                    _remove_path(target)
                os.symlink(os.readlink(entry.path), target)
            elif entry.is_dir():
                if target.is_symlink() or (target.exists() and not target.is_dir()):
                    _remove_path(target)
                target.mkdir(exist_ok=True)
                errors.extend(copy_tree_over(Path(entry.path), target))
                shutil.copystat(entry.path, target)
            else:
                if target.is_symlink():
                    target.unlink()
                elif target.is_dir():
                    shutil.rmtree(target)
                shutil.copy2(entry.path, target, follow_symlinks=False)
        except OSError as exc:
            errors.append(f"{entry.path}: {exc}")
    return errors


class WorktreeRepairer:
    """Finds and repairs broken session worktrees of one repository.

    Args:
        repo_root: Base repository.
        worktrees_folder: Session worktrees folder, relative to ``repo_root``
            unless absolute.
        gateway: Git gateway for ``repo_root`` (created when omitted).
        on_warning: Receives non-fatal problems (copy and cleanup failures).

    Callers must not repair the same worktree concurrently, nor while an
    agent process is running inside it.
    """

    def __init__(
        self,
        repo_root: Path | str,
        worktrees_folder: Path | str = ".worktrees",
        *,
        gateway: Optional[GitGateway] = None,
        on_warning: Optional[WarningCallback] = None,
    ) -> None:
        self.repo_root = Path(repo_root).resolve()
        folder = Path(worktrees_folder)
        self.worktrees_dir = folder if folder.is_absolute() else self.repo_root / folder
        self.gateway = gateway or GitGateway(self.repo_root)
        self.on_warning = on_warning

    def _warn(self, outcome: RepairOutcome, message: str) -> None:
        outcome.warnings.append(message)
        emit_warning(message, self.on_warning, logger=logger)

    # ---------- detection ----------

    def detect(self) -> List[BrokenWorktree]:
        """Scan the worktrees folder for directories with a dangling ``.git`` link."""
        if not self.worktrees_dir.is_dir():
            return []
        try:
            names = sorted(os.listdir(self.worktrees_dir))
        except OSError as exc:
            logger.warning("Failed to read worktrees directory %s: %s", self.worktrees_dir, exc)
            return []

        broken: List[BrokenWorktree] = []
        for name in names:
            if not _is_safe_entry_name(name) or BACKUP_MARKER in name:
                continue
            path = self.worktrees_dir / name
            git_file = path / ".git"
            # A .git directory is a full clone, not a linked worktree.
            if path.is_symlink() or not path.is_dir() or not git_file.is_file():
                continue
            target = read_gitdir(git_file)
            if target is None or target.exists():
                continue
            logger.debug("Worktree %s points at missing metadata %s", path, target)
            broken.append(BrokenWorktree(path=path, session_name=name, expected_branch=name))
        return broken

    # ---------- repair ----------

    def repair(self, broken: BrokenWorktree) -> RepairOutcome:
        """Recreate one broken worktree, preserving its files.

        Raises:
            BranchMissing: The expected branch is gone (nothing was touched).
            GitOperationFailed: Recreation failed and the original directory
                was put back.
            RepairIncomplete: Recreation failed and the backup could not be
                moved back; the error names the backup location.
            LanesError: The directory could not be moved aside.
        """
        outcome = RepairOutcome(broken=broken, stage=RepairStage.DETECTED)
        path = broken.path

        if not self.gateway.branch_exists(broken.expected_branch):
            raise BranchMissing(broken.expected_branch, worktree_path=str(path))

        backup = path.with_name(f"{path.name}{BACKUP_MARKER}{epoch_millis()}")
        try:
            os.rename(path, backup)
        except OSError as exc:
            raise LanesError(
                f"Failed to rename worktree for repair: {exc}",
                context={"worktree_path": str(path), "backup_path": str(backup)},
            ) from exc
        outcome.stage = RepairStage.BACKED_UP
        outcome.backup_path = backup
        logger.info("Backed up broken worktree %s to %s", path, backup)

        try:
            self.gateway.worktree_add(path, broken.expected_branch)
        except GitOperationFailed as exc:
            self._roll_back(path, backup, exc)
            raise
        outcome.stage = RepairStage.RECREATED

        errors = copy_tree_over(backup, path)
        if errors:
            self._warn(
                outcome,
                f"Failed to copy {len(errors)} file(s) while repairing {broken.session_name}: "
                + "; ".join(errors[:5]),
            )
        outcome.stage = RepairStage.RESTORED

        try:
            shutil.rmtree(backup)
        except OSError as exc:
            self._warn(outcome, f"Failed to clean up repair backup {backup}: {exc}")
        else:
            outcome.stage = RepairStage.CLEANED_UP

        logger.info("Repaired worktree %s", path)
        return outcome

    def _roll_back(self, path: Path, backup: Path, cause: GitOperationFailed) -> None:
        try:
            # A failed add can leave a partial directory in the way.
            if path.exists() or path.is_symlink():
                _remove_path(path)
            os.rename(backup, path)
        except OSError as exc:
            raise RepairIncomplete(
                f"Failed to create worktree: {cause}. "
                f"Original files backed up at {backup} could not be restored: {exc}",
                worktree_path=str(path),
                backup_path=str(backup),
                stage=RepairStage.BACKED_UP.value,
            ) from exc
        logger.info("Restored %s after failed repair", path)

    def repair_all(self, broken: Optional[List[BrokenWorktree]] = None) -> RepairResult:
        """Repair each broken worktree independently and tally the results."""
        result = RepairResult()
        for item in self.detect() if broken is None else broken:
            try:
                outcome = self.repair(item)
            except (LanesError, OSError) as exc:
                logger.warning("Repair of %s failed: %s", item.session_name, exc)
                result.failures.append((item.session_name, str(exc)))
                continue
            result.success_count += 1
            result.outcomes.append(outcome)
        return result


__all__ = [
    "BACKUP_MARKER",
    "BrokenWorktree",
    "RepairOutcome",
    "RepairResult",
    "RepairStage",
    "WorktreeRepairer",
    "copy_tree_over",
    "read_gitdir",
]
