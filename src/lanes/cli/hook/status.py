"""
Lanes hook status command.

SUMMARY: Record an agent status change (called from agent hooks)
"""

from __future__ import annotations

import argparse
from pathlib import Path

from lanes.cli import OutputFormatter, add_standard_flags
from lanes.core.agents.hooks import STATUS_IDLE, STATUS_WAITING, STATUS_WORKING
from lanes.core.utils.io import write_json_atomic
from lanes.core.utils.time import utc_timestamp

SUMMARY = "Record an agent status change (called from agent hooks)"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--status-file", dest="status_file", required=True, help="Status file to write")
    parser.add_argument(
        "--status",
        required=True,
        choices=(STATUS_WORKING, STATUS_WAITING, STATUS_IDLE),
        help="New status",
    )
    parser.add_argument(
        "--emit-json",
        dest="emit_json",
        action="store_true",
        help="Print an empty JSON object for agents that require hook output",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        write_json_atomic(Path(args.status_file), {"status": args.status, "timestamp": utc_timestamp()})
    except OSError as e:
        formatter.error(e)
        return 1
    if args.emit_json:
        formatter.json_output({})
    return 0
