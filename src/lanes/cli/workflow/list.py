"""
Lanes workflow list command.

SUMMARY: List available workflow templates
"""

from __future__ import annotations

import argparse

from lanes.cli import OutputFormatter, add_standard_flags, get_repo_root
from lanes.core.exceptions import LanesError
from lanes.core.utils.paths import ProjectRootError
from lanes.core.workflow import discover_workflows

SUMMARY = "List available workflow templates"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        templates = discover_workflows(get_repo_root(args))
    except (LanesError, ProjectRootError) as e:
        formatter.error(e)
        return 1

    if formatter.json_mode:
        formatter.json_output({"workflows": [t.to_dict() for t in templates]})
        return 0

    if not templates:
        formatter.text("No workflows found")
        return 0
    width = max(len(t.name) for t in templates)
    for t in templates:
        origin = "built-in" if t.built_in else "custom"
        formatter.text(f"{t.name:<{width}}  {t.description} ({origin})")
    return 0
