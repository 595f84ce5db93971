"""
Lanes session create command.

SUMMARY: Create a session worktree and branch
"""

from __future__ import annotations

import argparse
from typing import List

from lanes.cli import OutputFormatter, add_standard_flags, get_repo_root
from lanes.core.agents.registry import AgentRegistry
from lanes.core.config.domains.worktrees import WorktreesConfig
from lanes.core.exceptions import LanesError
from lanes.core.session.creation import create_session_worktree
from lanes.core.session.metadata import TERMINAL_MODES
from lanes.core.session.validation import validate_session_name
from lanes.core.utils.paths import ProjectRootError

SUMMARY = "Create a session worktree and branch"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("name", help="Session name (also the branch and directory name)")
    parser.add_argument(
        "--source-branch",
        "--from",
        dest="source_branch",
        help="Branch to start from, e.g. origin/main (default: current HEAD)",
    )
    parser.add_argument("--agent", help="Code agent for the session (default: from config)")
    conflict = parser.add_mutually_exclusive_group()
    conflict.add_argument(
        "--reuse-branch",
        dest="on_conflict",
        action="store_const",
        const="use-existing",
        help="Reuse an existing branch of the same name (default)",
    )
    conflict.add_argument(
        "--cancel-on-conflict",
        dest="on_conflict",
        action="store_const",
        const="cancel",
        help="Abort if a branch of the same name already exists",
    )
    parser.set_defaults(on_conflict="use-existing")
    parser.add_argument(
        "--terminal",
        choices=TERMINAL_MODES,
        help="Execution surface, recorded for agents without lifecycle hooks",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    warnings: List[str] = []

    try:
        repo_root = get_repo_root(args)
        name = validate_session_name(args.name)
        worktrees = WorktreesConfig(repo_root=repo_root)
        registry = AgentRegistry.from_config(repo_root)
        agent = registry.get_agent(args.agent) if args.agent else registry.get_default_agent()

        path = create_session_worktree(
            repo_root,
            name,
            worktrees_folder=worktrees.folder,
            source_branch=args.source_branch,
            agent=agent,
            local_settings_mode=worktrees.local_settings_propagation,
            terminal=args.terminal,
            on_branch_conflict=lambda _branch: args.on_conflict,
            on_warning=warnings.append,
            default_remote=worktrees.default_remote,
        )
    except (LanesError, ProjectRootError, OSError) as e:
        formatter.warnings(warnings)
        formatter.error(e)
        return 1

    formatter.warnings(warnings)
    formatter.success(
        {
            "session": name,
            "branch": name,
            "worktreePath": str(path),
            "agent": agent.name,
            "warnings": warnings,
        },
        f"Created session '{name}' at {path}",
    )
    return 0
