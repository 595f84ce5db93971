from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from lanes.core.utils.io import ensure_directory

_LANES_HANDLERS: list[logging.Handler] = []
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def _remove_lanes_handlers(root: logging.Logger) -> None:
    for handler in _LANES_HANDLERS:
        root.removeHandler(handler)
        handler.close()
    _LANES_HANDLERS.clear()


def configure_logging(
    *,
    level: str = "WARNING",
    json_mode: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """Configure stdlib logging for a CLI invocation.

    Text mode logs to stderr at ``level``. JSON mode installs no stream
    handler (a ``NullHandler`` keeps the ``lastResort`` handler quiet) so
    stdout and stderr stay machine readable. ``log_file`` adds a file handler
    in both modes.

    Calling again replaces the handlers installed by the previous call.
    """
    root = logging.getLogger()
    _remove_lanes_handlers(root)
    numeric = _level_from_name(level)
    root.setLevel(numeric)
    fmt = logging.Formatter(_FORMAT)

    handler: logging.Handler
    if json_mode:
        handler = logging.NullHandler()
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.setLevel(numeric)
    root.addHandler(handler)
    _LANES_HANDLERS.append(handler)

    if log_file is not None:
        ensure_directory(Path(log_file).parent)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(numeric)
        fh.setFormatter(fmt)
        root.addHandler(fh)
        _LANES_HANDLERS.append(fh)


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by :func:`configure_logging`."""
    _remove_lanes_handlers(logging.getLogger())


__all__ = ["configure_logging", "reset_logging_for_tests"]
