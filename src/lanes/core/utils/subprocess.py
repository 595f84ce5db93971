"""Subprocess helpers with config-driven timeouts.

This module provides safe subprocess execution with:
- Config-driven timeout buckets (local git, network git, default)
- Process-group termination so a timed-out child cannot linger
- No shell=True (arguments are always passed as a discrete list)
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from lanes.core.config.domains.timeouts import TimeoutsConfig

logger = logging.getLogger(__name__)

TIMEOUT_TYPES = ("git_local", "git_network", "default")


def _infer_timeout_type(argv: Sequence[str]) -> str:
    if not argv:
        return "default"
    if Path(argv[0]).name == "git":
        if any(p in {"fetch", "pull", "clone", "push", "ls-remote"} for p in argv[1:]):
            return "git_network"
        return "git_local"
    return "default"


def _popen_process_group_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        if isinstance(creationflags, int):
            return {"creationflags": creationflags}
    return {}


def _terminate_process_group(proc: subprocess.Popen[Any]) -> None:
    if proc.poll() is not None:
        return
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except OSError:
            proc.terminate()
        try:
            proc.wait(timeout=0.2)
        except subprocess.TimeoutExpired:
            pass
        if proc.poll() is None:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except OSError:
                proc.kill()
    else:
        proc.kill()
    try:
        proc.wait(timeout=0.2)
    except subprocess.TimeoutExpired:
        pass


def configured_timeout(
    argv: Sequence[str],
    timeout_type: str | None = None,
    cwd: Path | str | None = None,
) -> float:
    """Return the configured timeout in seconds for ``argv``.

    Args:
        argv: Command being run (used to infer the bucket)
        timeout_type: Explicit bucket: ``git_local``, ``git_network`` or ``default``
        cwd: Working directory; its project config is consulted when present
    """
    repo_root: Optional[Path] = None
    if cwd is not None:
        repo_root = Path(cwd).resolve()
    else:
        from lanes.core.utils.paths import ProjectRootError, resolve_project_root

        try:
            repo_root = resolve_project_root()
        except ProjectRootError:
            repo_root = Path.cwd().resolve()

    timeouts = TimeoutsConfig(repo_root=repo_root)
    ttype = timeout_type or _infer_timeout_type(argv)
    timeout_map = {
        "git_local": timeouts.git_local_seconds,
        "git_network": timeouts.git_network_seconds,
        "default": timeouts.default_seconds,
    }
    return float(timeout_map.get(ttype, timeouts.default_seconds))


def run_with_timeout(
    cmd: Sequence[str],
    timeout_type: str | None = None,
    *,
    cwd: Path | str | None = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
    check: bool = False,
    input: Optional[str] = None,
    capture_output: bool = True,
) -> subprocess.CompletedProcess:
    """Run ``cmd`` with captured text output under a configured timeout bucket.

    Args:
        cmd: Argument list; never interpreted by a shell.
        timeout_type: Timeout bucket (inferred from ``cmd`` when omitted).
        cwd: Working directory.
        env: Full child environment (inherits the parent's when omitted).
        timeout: Explicit timeout overriding the configured bucket.
        check: Raise ``CalledProcessError`` on non-zero exit.
        input: Text sent to the child's stdin.
        capture_output: Capture stdout/stderr (default: True).

    Returns:
        CompletedProcess with text stdout/stderr.

    Raises:
        subprocess.TimeoutExpired: When the command exceeds its timeout. The
            whole process group is terminated first.
        OSError: When the executable cannot be spawned.
    """
    argv = [str(p) for p in cmd]
    if timeout is None:
        timeout = configured_timeout(argv, timeout_type=timeout_type, cwd=cwd)

    logger.debug("run %s (cwd=%s, timeout=%.1fs)", argv, cwd, timeout)

    pipe = subprocess.PIPE if capture_output else None
    proc = subprocess.Popen(
        argv,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
        stdout=pipe,
        stderr=pipe,
        text=True,
        **_popen_process_group_kwargs(),
    )
    try:
        stdout, stderr = proc.communicate(input=input, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _terminate_process_group(proc)
        try:
            stdout, stderr = proc.communicate(timeout=0.2)
        except (subprocess.TimeoutExpired, ValueError):
            stdout = getattr(exc, "output", None)
            stderr = getattr(exc, "stderr", None)
        raise subprocess.TimeoutExpired(argv, timeout, output=stdout, stderr=stderr) from None

    completed = subprocess.CompletedProcess(
        argv,
        proc.returncode if proc.returncode is not None else 0,
        stdout=stdout if stdout is not None else "",
        stderr=stderr if stderr is not None else "",
    )
    if check and completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode, argv, output=completed.stdout, stderr=completed.stderr
        )
    return completed


def reset_subprocess_timeout_cache() -> None:
    """Clear cached timeout configuration (reloaded on next access)."""
    from lanes.core.config.cache import clear_all_caches

    clear_all_caches()


__all__ = [
    "TIMEOUT_TYPES",
    "configured_timeout",
    "run_with_timeout",
    "reset_subprocess_timeout_cache",
]
