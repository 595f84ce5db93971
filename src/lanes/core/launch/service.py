"""Resolve launch parameters for a session and build the agent command line.

Precedence for workflow and permission mode, first non-empty wins:

1. explicit argument
2. value persisted in the session metadata
3. default (``acceptEdits``; no workflow)

The service never blocks a launch on degraded state: an unresolvable
workflow, a settings file that cannot be written, or a stale session id
each produce a warning and a working start command.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Set, Tuple

from lanes.core.agents.base import CodeAgent, CommandOptions
from lanes.core.agents.mcp import MCP_CONFIG_FILE_NAME
from lanes.core.agents.registry import AgentRegistry
from lanes.core.exceptions import InvalidSessionId, LanesError
from lanes.core.git.gateway import GitGateway
from lanes.core.session.metadata import SessionMetadataStore
from lanes.core.utils.reporting import WarningCallback, emit_warning
from lanes.core.workflow.discovery import resolve_workflow

from .settings import SettingsFileBuilder

logger = logging.getLogger(__name__)

DEFAULT_PERMISSION_MODE = "acceptEdits"

LaunchMode = Literal["start", "resume"]
WorkflowResolver = Callable[[str, Path], Optional[Path]]


@dataclass
class LaunchContext:
    """Per-invocation launch parameters. Recomputed on every launch."""

    effective_workflow: Optional[str]
    permission_mode: str
    settings_path: Optional[Path] = None
    mcp_config_path: Optional[Path] = None
    mcp_overrides: List[str] = field(default_factory=list)
    session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effectiveWorkflow": self.effective_workflow,
            "permissionMode": self.permission_mode,
            "settingsPath": str(self.settings_path) if self.settings_path else None,
            "mcpConfigPath": str(self.mcp_config_path) if self.mcp_config_path else None,
            "mcpOverrides": list(self.mcp_overrides),
            "sessionId": self.session_id,
        }


@dataclass
class LaunchResult:
    command: str
    mode: LaunchMode
    context: LaunchContext

    def to_dict(self) -> Dict[str, Any]:
        return {"command": self.command, "mode": self.mode, "context": self.context.to_dict()}


class AgentLaunchService:
    """Prepares launch contexts and commands for session worktrees.

    Args:
        repo_root: Base repository. Derived from each worktree through git
            when omitted.
        agent: Agent to launch. When omitted, the agent recorded in the
            session metadata is used (falling back to the registry default).
        registry: Agent registry used to resolve persisted agent names.
        workflow_resolver: ``(reference, repo_root) -> path | None``;
            defaults to :func:`lanes.core.workflow.discovery.resolve_workflow`.
        extra_workflow_folders: Extra folders searched by the default resolver.
        on_warning: Receives non-fatal problems. Each distinct message is
            delivered once per service instance.
    """

    def __init__(
        self,
        repo_root: Optional[Path | str] = None,
        *,
        agent: Optional[CodeAgent] = None,
        registry: Optional[AgentRegistry] = None,
        workflow_resolver: Optional[WorkflowResolver] = None,
        extra_workflow_folders: Iterable[Path | str] = (),
        on_warning: Optional[WarningCallback] = None,
    ) -> None:
        self.repo_root = Path(repo_root).resolve() if repo_root is not None else None
        self.agent = agent
        self.registry = registry
        self.extra_workflow_folders = list(extra_workflow_folders)
        self.workflow_resolver = workflow_resolver or self._default_resolver
        self.on_warning = on_warning
        self._warned: Set[str] = set()

    # ---------- collaborators ----------

    def _default_resolver(self, reference: str, repo_root: Path) -> Optional[Path]:
        return resolve_workflow(reference, repo_root, extra_folders=self.extra_workflow_folders)

    def _warn(self, message: str) -> None:
        if message in self._warned:
            return
        self._warned.add(message)
        emit_warning(message, self.on_warning, logger=logger)

    def repo_root_for(self, worktree_path: Path | str) -> Path:
        if self.repo_root is not None:
            return self.repo_root
        return GitGateway(worktree_path).get_base_repo_path(worktree_path)

    def agent_for(self, worktree_path: Path | str, repo_root: Path) -> CodeAgent:
        if self.agent is not None:
            return self.agent
        registry = self.registry or AgentRegistry.from_config(repo_root)
        agent_name = SessionMetadataStore(repo_root).get_agent_name(worktree_path)
        return registry.resolve_for_session(agent_name)

    # ---------- resolution ----------

    def _resolve_workflow(
        self,
        worktree_path: Path,
        explicit: Optional[str],
        store: SessionMetadataStore,
        repo_root: Path,
    ) -> Optional[str]:
        reference = explicit or store.get_workflow(worktree_path)
        if not reference:
            return None
        resolved = self.workflow_resolver(reference, repo_root)
        if resolved is None:
            self._warn(
                f"Workflow '{reference}' not found. "
                "Run 'lanes workflow list' to see available workflows."
            )
            return None
        return str(resolved)

    def _resolve_permission_mode(
        self,
        worktree_path: Path,
        explicit: Optional[str],
        store: SessionMetadataStore,
        agent: CodeAgent,
    ) -> str:
        mode = explicit or store.get_permission_mode(worktree_path) or DEFAULT_PERMISSION_MODE
        if not agent.validate_permission_mode(mode):
            self._warn(f"Permission mode '{mode}' is not supported by {agent.display_name}")
        return mode

    # ---------- public API ----------

    def prepare(
        self,
        worktree_path: Path | str,
        *,
        workflow: Optional[str] = None,
        permission_mode: Optional[str] = None,
    ) -> LaunchContext:
        """Resolve workflow, permission mode, settings and MCP for a launch."""
        context, _ = self._prepare(Path(worktree_path), workflow, permission_mode)
        return context

    def _prepare(
        self,
        worktree: Path,
        workflow: Optional[str],
        permission_mode: Optional[str],
    ) -> Tuple[LaunchContext, CodeAgent]:
        repo_root = self.repo_root_for(worktree)
        agent = self.agent_for(worktree, repo_root)
        store = SessionMetadataStore.for_agent(repo_root, agent)

        effective_workflow = self._resolve_workflow(worktree, workflow, store, repo_root)
        effective_mode = self._resolve_permission_mode(worktree, permission_mode, store, agent)
        context = LaunchContext(effective_workflow=effective_workflow, permission_mode=effective_mode)

        try:
            mcp_config = None
            if effective_workflow and agent.supports_mcp():
                mcp_config = agent.get_mcp_config(worktree, effective_workflow, repo_root)
            delivery = agent.get_mcp_config_delivery()

            builder = SettingsFileBuilder(agent, store)
            context.settings_path = builder.write(
                worktree, mcp_config=mcp_config if delivery == "settings" else None
            )
            if mcp_config is not None:
                if delivery == "cli-overrides":
                    context.mcp_overrides = agent.build_mcp_overrides(mcp_config)
                elif delivery == "cli":
                    context.mcp_config_path = mcp_config.save(
                        context.settings_path.parent / MCP_CONFIG_FILE_NAME
                    )
        except (LanesError, OSError) as exc:
            self._warn(f"Failed to create settings file for {agent.display_name}: {exc}")

        # The agent already reads its project file; a second source would conflict.
        if agent.get_project_settings_path(worktree) is not None:
            context.settings_path = None

        changes: Dict[str, str] = {}
        if workflow and effective_workflow:
            changes["workflow"] = effective_workflow
        if permission_mode:
            changes["permission_mode"] = effective_mode
        if changes:
            try:
                store.update(worktree, agent_name=agent.name, **changes)
            except OSError as exc:
                self._warn(f"Failed to save session metadata: {exc}")

        context.session_id = store.get_session_id(worktree)
        return context, agent

    def build(
        self,
        worktree_path: Path | str,
        *,
        workflow: Optional[str] = None,
        permission_mode: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> LaunchResult:
        """Prepare the launch and build a resume command, or a start command.

        A stored session id the agent rejects falls back to a fresh start.
        """
        context, agent = self._prepare(Path(worktree_path), workflow, permission_mode)
        options = CommandOptions(
            permission_mode=context.permission_mode,
            settings_path=str(context.settings_path) if context.settings_path else None,
            mcp_config_path=str(context.mcp_config_path) if context.mcp_config_path else None,
            mcp_overrides=list(context.mcp_overrides),
            prompt=prompt,
        )

        if context.session_id:
            try:
                command = agent.build_resume_command(context.session_id, options)
                return LaunchResult(command=command, mode="resume", context=context)
            except InvalidSessionId as exc:
                logger.info("Starting a new %s session: %s", agent.name, exc)

        return LaunchResult(command=agent.build_start_command(options), mode="start", context=context)


__all__ = [
    "AgentLaunchService",
    "DEFAULT_PERMISSION_MODE",
    "LaunchContext",
    "LaunchMode",
    "LaunchResult",
]
