"""
Lanes hook capture-session command.

SUMMARY: Store the agent's session id from a hook payload on stdin
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from lanes.cli import OutputFormatter, add_standard_flags
from lanes.core.utils.io import update_json
from lanes.core.utils.time import utc_timestamp

SUMMARY = "Store the agent's session id from a hook payload on stdin"

logger = logging.getLogger(__name__)


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--session-file",
        dest="session_file",
        required=True,
        help="Session metadata file to update",
    )
    parser.add_argument(
        "--emit-json",
        dest="emit_json",
        action="store_true",
        help="Print an empty JSON object for agents that require hook output",
    )
    add_standard_flags(parser)


def _read_payload() -> Dict[str, Any]:
    raw = sys.stdin.read()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring malformed hook payload: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    payload = _read_payload()
    session_id = payload.get("session_id") or payload.get("sessionId")

    if isinstance(session_id, str) and session_id:
        def _merge(current: Dict[str, Any]) -> Dict[str, Any]:
            current["sessionId"] = session_id
            current["timestamp"] = utc_timestamp()
            return current

        try:
            update_json(Path(args.session_file), _merge)
        except (OSError, json.JSONDecodeError) as e:
            formatter.error(e)
            return 1
    else:
        logger.debug("Hook payload carried no session id")

    if args.emit_json:
        formatter.json_output({})
    return 0
