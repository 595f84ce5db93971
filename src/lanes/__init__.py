"""
Lanes - isolated agent sessions on git worktrees

Lanes creates disposable worktree-backed sessions, repairs worktrees whose
git linkage was lost, and builds the command used to start or resume a
coding-agent CLI inside a session.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
