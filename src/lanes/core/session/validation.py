"""Session name validation.

A session name is also its branch name and its worktree directory name, so it
must be safe for all three.
"""
from __future__ import annotations

from lanes.core.exceptions import ValidationError
from lanes.core.git.gateway import is_valid_branch_name

MAX_SESSION_NAME_LENGTH = 200


def validate_session_name(name: str) -> str:
    """Return the stripped session name or raise ``ValidationError``."""
    candidate = (name or "").strip()
    ctx = {"session_name": name}
    if not candidate:
        raise ValidationError("Session name cannot be empty", context=ctx)
    if "\x00" in candidate:
        raise ValidationError("Session name cannot contain NUL bytes", context=ctx)
    if ".." in candidate:
        raise ValidationError("Session name cannot contain '..'", context=ctx)
    if len(candidate) > MAX_SESSION_NAME_LENGTH:
        raise ValidationError(
            f"Session name is too long (max {MAX_SESSION_NAME_LENGTH} characters)", context=ctx
        )
    if candidate.startswith("-"):
        raise ValidationError("Session name cannot start with '-'", context=ctx)
    if "/" in candidate or "\\" in candidate:
        # The name is also a single worktree directory name.
        raise ValidationError("Session name cannot contain path separators", context=ctx)
    if candidate.endswith(".lock"):
        raise ValidationError(f"Session name is not a valid branch name: {candidate}", context=ctx)
    if not is_valid_branch_name(candidate):
        raise ValidationError(
            "Session name may only contain letters, digits, '_', '-' and '.'", context=ctx
        )
    return candidate


def is_valid_session_name(name: str) -> bool:
    try:
        validate_session_name(name)
    except ValidationError:
        return False
    return True


__all__ = ["MAX_SESSION_NAME_LENGTH", "validate_session_name", "is_valid_session_name"]
