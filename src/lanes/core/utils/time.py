"""Timezone-aware time helpers."""
from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time, truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with a ``Z`` suffix (e.g. ``2024-05-01T12:00:00.123Z``)."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    """Milliseconds since the epoch, used for collision-resistant backup names."""
    return time.time_ns() // 1_000_000


__all__ = ["utc_now", "utc_timestamp", "epoch_millis"]
