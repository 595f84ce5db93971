"""
Lanes session open command.

SUMMARY: Print the command that starts or resumes a session's agent
"""

from __future__ import annotations

import argparse
from typing import List

from lanes.cli import OutputFormatter, add_standard_flags, get_repo_root
from lanes.core.config.domains.worktrees import WorktreesConfig
from lanes.core.exceptions import LanesError
from lanes.core.launch import AgentLaunchService
from lanes.core.session.repair import read_gitdir
from lanes.core.session.validation import validate_session_name
from lanes.core.utils.paths import ProjectRootError

SUMMARY = "Print the command that starts or resumes a session's agent"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("name", help="Session name")
    parser.add_argument("--workflow", help="Workflow name or absolute template path")
    parser.add_argument("--permission-mode", dest="permission_mode", help="Agent permission mode")
    parser.add_argument("--prompt", help="Initial prompt for a new agent session")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    warnings: List[str] = []

    try:
        repo_root = get_repo_root(args)
        name = validate_session_name(args.name)
        worktree = WorktreesConfig(repo_root=repo_root).folder_path / name
        if not worktree.is_dir():
            raise LanesError(
                f"Session worktree not found: {worktree}",
                context={"session": name, "worktree_path": str(worktree)},
            )

        git_file = worktree / ".git"
        if git_file.is_file():
            target = read_gitdir(git_file)
            if target is not None and not target.exists():
                warnings.append(
                    f"Worktree '{name}' has lost its git metadata; run 'lanes session repair'"
                )

        service = AgentLaunchService(repo_root, on_warning=warnings.append)
        result = service.build(
            worktree,
            workflow=args.workflow,
            permission_mode=args.permission_mode,
            prompt=args.prompt,
        )
    except (LanesError, ProjectRootError, OSError) as e:
        formatter.warnings(warnings)
        formatter.error(e)
        return 1

    formatter.warnings(warnings)
    formatter.success(
        {"session": name, "worktreePath": str(worktree), **result.to_dict(), "warnings": warnings},
        result.command,
    )
    return 0
