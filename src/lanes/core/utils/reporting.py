"""Warning delivery for core operations.

Core code never writes to a user-facing surface. Non-fatal problems go to
an injected callback; without one they are logged at WARNING.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

WarningCallback = Callable[[str], None]


def emit_warning(
    message: str,
    on_warning: Optional[WarningCallback] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> None:
    if on_warning is not None:
        on_warning(message)
    else:
        (logger or logging.getLogger("lanes")).warning(message)


__all__ = ["WarningCallback", "emit_warning"]
