"""
Lanes agent list command.

SUMMARY: List supported code agents and whether their CLI is installed
"""

from __future__ import annotations

import argparse

from lanes.cli import OutputFormatter, add_standard_flags, get_repo_root
from lanes.core.agents.registry import AgentRegistry, is_cli_available
from lanes.core.exceptions import LanesError
from lanes.core.utils.paths import ProjectRootError

SUMMARY = "List supported code agents and whether their CLI is installed"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        registry = AgentRegistry.from_config(get_repo_root(args))
    except (LanesError, ProjectRootError) as e:
        formatter.error(e)
        return 1

    rows = []
    for name in registry.available_agents():
        agent = registry.get_agent(name)
        rows.append(
            {
                "name": agent.name,
                "displayName": agent.display_name,
                "cli": agent.cli_command,
                "available": is_cli_available(agent.cli_command),
                "default": name == registry.default_agent,
                "hooks": agent.supports_hooks(),
                "mcpDelivery": agent.get_mcp_config_delivery() if agent.supports_mcp() else None,
            }
        )

    if formatter.json_mode:
        formatter.json_output({"agents": rows})
        return 0

    for row in rows:
        marker = "*" if row["default"] else " "
        status = "installed" if row["available"] else "not found"
        formatter.text(f"{marker} {row['name']:<10} {row['displayName']:<10} {row['cli']} ({status})")
    return 0
