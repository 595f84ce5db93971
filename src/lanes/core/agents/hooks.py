"""Hook commands that report agent lifecycle events back to Lanes.

Agents with a hook system run these commands on lifecycle events. They call
the ``lanes hook`` CLI, which records status changes and captures the
agent's session id from the hook payload on stdin.
"""
from __future__ import annotations

import shlex
from pathlib import Path

from .base import HookCommand

HOOK_EXECUTABLE = "lanes"

STATUS_WORKING = "working"
STATUS_WAITING = "waiting_for_user"
STATUS_IDLE = "idle"


def status_hook(status_file: Path | str, status: str, *, emit_json: bool = False) -> HookCommand:
    argv = [HOOK_EXECUTABLE, "hook", "status", "--status-file", str(status_file), "--status", status]
    if emit_json:
        argv.append("--emit-json")
    return HookCommand(command=shlex.join(argv))


def session_capture_hook(session_file: Path | str, *, emit_json: bool = False) -> HookCommand:
    argv = [HOOK_EXECUTABLE, "hook", "capture-session", "--session-file", str(session_file)]
    if emit_json:
        argv.append("--emit-json")
    return HookCommand(command=shlex.join(argv))


__all__ = [
    "HOOK_EXECUTABLE",
    "STATUS_IDLE",
    "STATUS_WAITING",
    "STATUS_WORKING",
    "session_capture_hook",
    "status_hook",
]
