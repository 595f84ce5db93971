"""Unified CLI output formatting utilities.

Every command supports a text mode for humans and a ``--json`` mode for
scripts. Results go to stdout, errors and warnings to stderr.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Iterable, Optional

from lanes.core.exceptions import LanesError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def success(
        self,
        data: Dict[str, Any],
        message: str,
        *,
        status: str = "success",
    ) -> None:
        """Output success result.

        Args:
            data: Result data dictionary
            message: Human-readable success message (used in text mode)
            status: Status string for JSON output
        """
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        else:
            print(message)

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        error_code: Optional[str] = None,
    ) -> None:
        """Output error result.

        ``LanesError`` subclasses contribute their class name as the error
        code and their structured context in JSON mode.
        """
        msg = message or str(error)
        if self.json_mode:
            output: Dict[str, Any] = {
                "error": error_code or type(error).__name__,
                "message": msg,
            }
            if isinstance(error, LanesError) and error.context:
                output["context"] = error.context
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def warnings(self, messages: Iterable[str]) -> None:
        """Print collected warnings to stderr in text mode."""
        if self.json_mode:
            return
        for message in messages:
            print(f"Warning: {message}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


def format_json(data: Any, indent: int = 2) -> str:
    return json.dumps(data, indent=indent, default=str)


__all__ = ["OutputFormatter", "format_json"]
