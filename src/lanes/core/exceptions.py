from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


class LanesError(Exception):
    """Base exception for Lanes."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(LanesError, RuntimeError):
    """Raised when configuration is missing, malformed, or fails schema validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        LanesError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class ValidationError(LanesError, ValueError):
    """Raised when a session or branch name fails validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        LanesError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class GitOperationFailed(LanesError, RuntimeError):
    """A git subcommand exited non-zero, could not be spawned, or timed out."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        exit_code: Optional[int] = None,
        stderr: str = "",
        cwd: Optional[str] = None,
        timed_out: bool = False,
    ) -> None:
        ctx: Dict[str, Any] = {
            "command": list(command),
            "exit_code": exit_code,
            "stderr": stderr,
        }
        if cwd is not None:
            ctx["cwd"] = cwd
        if timed_out:
            ctx["timed_out"] = True
        LanesError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        self.cwd = cwd
        self.timed_out = timed_out


class BranchAlreadyInUse(LanesError):
    """The branch is already checked out in another worktree."""

    def __init__(self, branch: str, *, worktree_path: Optional[str] = None) -> None:
        message = f"Branch '{branch}' is already checked out in another worktree"
        if worktree_path:
            message += f" ({worktree_path})"
        super().__init__(message, context={"branch": branch, "worktree_path": worktree_path})
        self.branch = branch
        self.worktree_path = worktree_path


class SourceBranchNotFound(LanesError):
    """The requested source branch exists neither locally nor on the remote."""

    def __init__(self, source_branch: str, *, remote: Optional[str] = None) -> None:
        super().__init__(
            f"Source branch '{source_branch}' does not exist locally or on the remote",
            context={"source_branch": source_branch, "remote": remote},
        )
        self.source_branch = source_branch
        self.remote = remote


class SessionCreationCancelled(LanesError):
    """The branch-conflict callback asked to abort session creation."""

    def __init__(self, session_name: str) -> None:
        super().__init__(
            f"Session creation for '{session_name}' was cancelled",
            context={"session_name": session_name},
        )
        self.session_name = session_name


class SettingsParseError(LanesError, ValueError):
    """A settings file could not be parsed in its declared format."""

    def __init__(self, path: str, fmt: str, details: str = "") -> None:
        message = f"Failed to parse {fmt} settings file: {path}"
        if details:
            message += f" ({details})"
        LanesError.__init__(self, message, context={"path": path, "format": fmt})
        ValueError.__init__(self, message)
        self.path = path
        self.format = fmt


class InvalidSessionId(LanesError, ValueError):
    """A stored agent session id does not match the backend's expected shape."""

    def __init__(self, agent: str, session_id: str, expected: str = "") -> None:
        message = f"Invalid session ID format for {agent}: {session_id!r}"
        if expected:
            message += f". Expected {expected}."
        LanesError.__init__(self, message, context={"agent": agent, "session_id": session_id})
        ValueError.__init__(self, message)
        self.agent = agent
        self.session_id = session_id


class AgentNotFound(LanesError, LookupError):
    """No code agent is registered under the requested name."""

    def __init__(self, agent: str, available: Sequence[str] = ()) -> None:
        message = f"Unknown code agent: {agent}"
        if available:
            message += f" (available: {', '.join(available)})"
        LanesError.__init__(self, message, context={"agent": agent, "available": list(available)})
        LookupError.__init__(self, message)
        self.agent = agent


class BranchMissing(LanesError):
    """Repair precondition: the branch a broken worktree expects is gone."""

    def __init__(self, branch: str, *, worktree_path: str) -> None:
        super().__init__(
            f"Branch '{branch}' no longer exists; cannot repair worktree {worktree_path}",
            context={"branch": branch, "worktree_path": worktree_path},
        )
        self.branch = branch
        self.worktree_path = worktree_path


class RepairIncomplete(LanesError, RuntimeError):
    """Repair failed after the backup was taken and it could not be rolled back."""

    def __init__(
        self,
        message: str,
        *,
        worktree_path: str,
        backup_path: str,
        stage: str,
    ) -> None:
        ctx = {"worktree_path": worktree_path, "backup_path": backup_path, "stage": stage}
        LanesError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)
        self.worktree_path = worktree_path
        self.backup_path = backup_path
        self.stage = stage


__all__ = [
    "LanesError",
    "ConfigError",
    "ValidationError",
    "GitOperationFailed",
    "BranchAlreadyInUse",
    "SourceBranchNotFound",
    "SessionCreationCancelled",
    "SettingsParseError",
    "InvalidSessionId",
    "AgentNotFound",
    "BranchMissing",
    "RepairIncomplete",
]
