"""
Lanes session repair command.

SUMMARY: Detect and repair worktrees whose git metadata is gone
"""

from __future__ import annotations

import argparse
from typing import List

from lanes.cli import OutputFormatter, add_dry_run_flag, add_standard_flags, get_repo_root
from lanes.core.config.domains.worktrees import WorktreesConfig
from lanes.core.exceptions import LanesError
from lanes.core.session.repair import WorktreeRepairer
from lanes.core.utils.paths import ProjectRootError

SUMMARY = "Detect and repair worktrees whose git metadata is gone"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_dry_run_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    warnings: List[str] = []

    try:
        repo_root = get_repo_root(args)
        folder = WorktreesConfig(repo_root=repo_root).folder
        repairer = WorktreeRepairer(repo_root, folder, on_warning=warnings.append)
        broken = repairer.detect()
    except (LanesError, ProjectRootError, OSError) as e:
        formatter.error(e)
        return 1

    names = [b.session_name for b in broken]
    if not broken:
        formatter.success({"broken": [], "repaired": 0, "failures": []}, "No broken worktrees found")
        return 0

    if args.dry_run:
        formatter.success(
            {"broken": names, "dryRun": True},
            "Broken worktrees:\n" + "\n".join(f"  {n}" for n in names),
        )
        return 0

    result = repairer.repair_all(broken)
    formatter.warnings(warnings)

    lines = [f"Repaired {result.success_count} of {len(broken)} worktree(s)"]
    lines.extend(f"  {session}: {error}" for session, error in result.failures)
    formatter.success(
        {
            "broken": names,
            "repaired": result.success_count,
            "failures": [{"session": s, "error": e} for s, e in result.failures],
            "warnings": warnings,
        },
        "\n".join(lines),
        status="success" if result.ok else "partial",
    )
    return 0 if result.ok else 1
