"""Persisted per-session metadata.

One JSON document per session lives outside the worktree (so it is never
committed) at::

    <repo_root>/.lanes/current-sessions/<session_name>/<session file name>

The session name is the worktree directory name. Keys are camelCase because
agent hooks update the same file.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from lanes.core.agents.base import DEFAULT_SESSION_FILE_NAME, DEFAULT_STATUS_FILE_NAME, CodeAgent
from lanes.core.utils.io import ensure_lines_present, read_json, update_json, write_json_atomic
from lanes.core.utils.paths import get_project_config_dir
from lanes.core.utils.time import utc_timestamp

logger = logging.getLogger(__name__)

SESSIONS_DIRNAME = "current-sessions"
# Runtime paths under .lanes/ that must never be committed.
IGNORED_RUNTIME_ENTRIES = (SESSIONS_DIRNAME, "config.local.yaml")
TERMINAL_MODES = ("code", "tmux")

_KEY_MAP = {
    "agent_name": "agentName",
    "timestamp": "timestamp",
    "session_id": "sessionId",
    "workflow": "workflow",
    "permission_mode": "permissionMode",
    "terminal": "terminal",
}


@dataclass
class SessionMetadata:
    agent_name: Optional[str] = None
    timestamp: Optional[str] = None
    session_id: Optional[str] = None
    workflow: Optional[str] = None
    permission_mode: Optional[str] = None
    terminal: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """camelCase mapping with unset fields omitted."""
        return {
            _KEY_MAP[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionMetadata":
        kwargs: Dict[str, Any] = {}
        for attr, key in _KEY_MAP.items():
            value = data.get(key)
            kwargs[attr] = value if isinstance(value, str) and value else None
        return cls(**kwargs)


def session_name_for(worktree_path: Path | str) -> str:
    return Path(worktree_path).name


class SessionMetadataStore:
    """Reads and writes :class:`SessionMetadata` for sessions of one repository.

    Args:
        repo_root: Base repository (not a worktree).
        session_file_name: Metadata file name, normally the agent's
            ``get_session_file_name()``.
        status_file_name: Status file name written by agent hooks.
    """

    def __init__(
        self,
        repo_root: Path | str,
        *,
        session_file_name: str = DEFAULT_SESSION_FILE_NAME,
        status_file_name: str = DEFAULT_STATUS_FILE_NAME,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.session_file_name = session_file_name
        self.status_file_name = status_file_name

    @classmethod
    def for_agent(cls, repo_root: Path | str, agent: CodeAgent) -> "SessionMetadataStore":
        return cls(
            repo_root,
            session_file_name=agent.get_session_file_name(),
            status_file_name=agent.get_status_file_name(),
        )

    # ---------- paths ----------

    @property
    def sessions_dir(self) -> Path:
        return get_project_config_dir(self.repo_root) / SESSIONS_DIRNAME

    def session_dir(self, worktree_path: Path | str) -> Path:
        return self.sessions_dir / session_name_for(worktree_path)

    def path_for(self, worktree_path: Path | str) -> Path:
        return self.session_dir(worktree_path) / self.session_file_name

    def status_path_for(self, worktree_path: Path | str) -> Path:
        return self.session_dir(worktree_path) / self.status_file_name

    # ---------- read / write ----------

    def read(self, worktree_path: Path | str) -> Optional[SessionMetadata]:
        """Return the session's metadata, or None when absent or unreadable."""
        path = self.path_for(worktree_path)
        try:
            data = read_json(path, default=None)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable session metadata %s: %s", path, exc)
            return None
        if not isinstance(data, dict):
            return None
        return SessionMetadata.from_dict(data)

    def write(self, worktree_path: Path | str, metadata: SessionMetadata) -> Path:
        path = self.path_for(worktree_path)
        self.ensure_ignored()
        write_json_atomic(path, metadata.to_dict())
        return path

    def ensure_ignored(self) -> None:
        """List the runtime entries in ``<repo_root>/.lanes/.gitignore``.

        Session ids and generated hook commands live under ``.lanes/`` in the
        base repository and must not show up as untracked files there.
        """
        gitignore = get_project_config_dir(self.repo_root) / ".gitignore"
        try:
            if ensure_lines_present(gitignore, IGNORED_RUNTIME_ENTRIES):
                logger.debug("Updated %s", gitignore)
        except OSError as exc:
            logger.warning("Failed to update %s: %s", gitignore, exc)

    def update(self, worktree_path: Path | str, **changes: Optional[str]) -> SessionMetadata:
        """Merge ``changes`` (snake_case field names) into the stored document.

        Unknown keys already in the file (written by hooks) are preserved.
        A value of None removes the key.
        """
        unknown = set(changes) - set(_KEY_MAP)
        if unknown:
            raise TypeError(f"Unknown session metadata fields: {sorted(unknown)}")

        def _apply(current: Dict[str, Any]) -> Dict[str, Any]:
            for attr, value in changes.items():
                key = _KEY_MAP[attr]
                if value is None:
                    current.pop(key, None)
                else:
                    current[key] = value
            return current

        self.ensure_ignored()
        return SessionMetadata.from_dict(update_json(self.path_for(worktree_path), _apply))

    def seed(
        self,
        worktree_path: Path | str,
        agent: CodeAgent,
        *,
        terminal: Optional[str] = None,
    ) -> SessionMetadata:
        """Write the initial record for a freshly created session.

        ``terminal`` is only recorded for agents without hooks: they cannot
        report their execution surface later.
        """
        metadata = SessionMetadata(agent_name=agent.name, timestamp=utc_timestamp())
        if not agent.supports_hooks() and terminal:
            metadata.terminal = terminal
        self.write(worktree_path, metadata)
        return metadata

    # ---------- field accessors ----------

    def get_session_id(self, worktree_path: Path | str) -> Optional[str]:
        md = self.read(worktree_path)
        return md.session_id if md else None

    def get_permission_mode(self, worktree_path: Path | str) -> Optional[str]:
        md = self.read(worktree_path)
        return md.permission_mode if md else None

    def get_workflow(self, worktree_path: Path | str) -> Optional[str]:
        md = self.read(worktree_path)
        return md.workflow if md else None

    def get_agent_name(self, worktree_path: Path | str) -> Optional[str]:
        md = self.read(worktree_path)
        return md.agent_name if md else None

    def save_workflow(self, worktree_path: Path | str, workflow: Optional[str]) -> None:
        self.update(worktree_path, workflow=workflow)

    def save_permission_mode(self, worktree_path: Path | str, mode: str) -> None:
        self.update(worktree_path, permission_mode=mode)


__all__ = [
    "IGNORED_RUNTIME_ENTRIES",
    "SESSIONS_DIRNAME",
    "TERMINAL_MODES",
    "SessionMetadata",
    "SessionMetadataStore",
    "session_name_for",
]
