"""Agent settings file formats (JSON, JSONC, TOML)."""
from __future__ import annotations

from .formats import (
    JSON_FORMAT,
    JSONC_FORMAT,
    TOML_FORMAT,
    SettingsFormat,
    get_settings_format,
    read_settings,
    strip_jsonc_comments,
    write_settings,
)

__all__ = [
    "JSON_FORMAT",
    "JSONC_FORMAT",
    "TOML_FORMAT",
    "SettingsFormat",
    "get_settings_format",
    "read_settings",
    "strip_jsonc_comments",
    "write_settings",
]
