"""Settings file formats keyed by file extension.

``.toml`` files are TOML, ``.jsonc`` files are JSON with comments, and
everything else is plain JSON. Writes are atomic (temp file + rename).

TOML support is imported on first use so JSON-only agents never load it.
"""
from __future__ import annotations

import importlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Optional

from lanes.core.exceptions import SettingsParseError
from lanes.core.utils.io import atomic_write, read_text

logger = logging.getLogger(__name__)

SettingsObject = Dict[str, Any]

_toml_reader: Optional[ModuleType] = None
_toml_writer: Optional[ModuleType] = None


def _load_toml_modules() -> tuple[ModuleType, ModuleType]:
    global _toml_reader, _toml_writer
    if _toml_reader is None or _toml_writer is None:
        _toml_reader = importlib.import_module("tomllib")
        _toml_writer = importlib.import_module("tomli_w")
        logger.debug("Loaded TOML support (%s, tomli_w)", _toml_reader.__name__)
    return _toml_reader, _toml_writer


def strip_jsonc_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments and trailing commas outside strings."""
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return _strip_trailing_commas("".join(out))


def _strip_trailing_commas(text: str) -> str:
    out: list[str] = []
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass(frozen=True)
class SettingsFormat:
    """A named serialization for agent settings files."""

    name: str
    extension: str
    _loads: Callable[[str], Any]
    _dumps: Callable[[SettingsObject], str]

    def loads(self, text: str, path: Path | str = "<string>") -> SettingsObject:
        if not text.strip():
            return {}
        try:
            data = self._loads(text)
        except (ValueError, TypeError) as exc:
            raise SettingsParseError(str(path), self.name, str(exc)) from exc
        if not isinstance(data, dict):
            raise SettingsParseError(str(path), self.name, "top-level value must be an object")
        return data

    def dumps(self, data: SettingsObject) -> str:
        return self._dumps(data)

    def read(self, path: Path | str) -> SettingsObject:
        """Parse ``path``; a missing file reads as an empty object."""
        p = Path(path)
        if not p.exists():
            return {}
        return self.loads(read_text(p), p)

    def write(self, path: Path | str, data: SettingsObject) -> None:
        content = self.dumps(data)
        atomic_write(Path(path), lambda f: f.write(content))


def _json_dumps(data: SettingsObject) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _toml_loads(text: str) -> Any:
    reader, _ = _load_toml_modules()
    return reader.loads(text)


def _toml_dumps(data: SettingsObject) -> str:
    _, writer = _load_toml_modules()
    return writer.dumps(data)


JSON_FORMAT = SettingsFormat("json", ".json", json.loads, _json_dumps)
# Plain JSON is valid JSONC, so JSONC writes drop comments.
JSONC_FORMAT = SettingsFormat(
    "jsonc", ".jsonc", lambda text: json.loads(strip_jsonc_comments(text)), _json_dumps
)
TOML_FORMAT = SettingsFormat("toml", ".toml", _toml_loads, _toml_dumps)

_FORMATS_BY_EXTENSION = {
    ".toml": TOML_FORMAT,
    ".jsonc": JSONC_FORMAT,
}


def get_settings_format(file_name: Path | str) -> SettingsFormat:
    """Pick the format for ``file_name`` by extension (default: JSON)."""
    suffix = Path(str(file_name)).suffix.lower()
    return _FORMATS_BY_EXTENSION.get(suffix, JSON_FORMAT)


def read_settings(path: Path | str) -> SettingsObject:
    return get_settings_format(path).read(path)


def write_settings(path: Path | str, data: SettingsObject) -> None:
    get_settings_format(path).write(path, data)


def is_toml_loaded() -> bool:
    """Whether TOML support has been imported in this process."""
    return _toml_reader is not None


__all__ = [
    "SettingsFormat",
    "SettingsObject",
    "JSON_FORMAT",
    "JSONC_FORMAT",
    "TOML_FORMAT",
    "get_settings_format",
    "read_settings",
    "write_settings",
    "strip_jsonc_comments",
    "is_toml_loaded",
]
