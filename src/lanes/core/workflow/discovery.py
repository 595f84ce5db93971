"""Discover workflow templates from bundled and project locations.

Bundled templates ship in ``lanes/data/workflows``. Project templates live in
the configured custom folder (``.lanes/workflows`` by default). A template is
any ``*.yaml`` file with string ``name`` and ``description`` keys; anything
else is skipped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from lanes.core.utils.io import read_yaml
from lanes.data import get_data_path

logger = logging.getLogger(__name__)

WORKFLOW_SUFFIX = ".yaml"


@dataclass(frozen=True)
class WorkflowTemplate:
    name: str
    description: str
    path: Path
    built_in: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "path": str(self.path),
            "builtIn": self.built_in,
        }


def _load_template(path: Path, built_in: bool) -> Optional[WorkflowTemplate]:
    try:
        data = read_yaml(path, raise_on_error=True)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Skipping unreadable workflow file %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Skipping invalid workflow file: %s", path)
        return None
    name, description = data.get("name"), data.get("description")
    if not isinstance(name, str) or not isinstance(description, str):
        logger.warning("Skipping invalid workflow file: %s", path)
        return None
    return WorkflowTemplate(name=name, description=description, path=path.resolve(), built_in=built_in)


def _discover_in(folder: Path, built_in: bool) -> List[WorkflowTemplate]:
    if not folder.is_dir():
        return []
    found: List[WorkflowTemplate] = []
    for path in sorted(folder.glob(f"*{WORKFLOW_SUFFIX}")):
        if not path.is_file():
            continue
        template = _load_template(path, built_in)
        if template is not None:
            found.append(template)
    return found


def _custom_folder_path(repo_root: Path, custom_folder: str) -> Optional[Path]:
    if ".." in Path(custom_folder).parts:
        logger.warning("Ignoring workflows folder with parent traversal: %s", custom_folder)
        return None
    resolved = (repo_root / custom_folder).resolve()
    if not resolved.is_relative_to(repo_root.resolve()):
        logger.warning("Ignoring workflows folder outside the repository: %s", custom_folder)
        return None
    return resolved


def discover_workflows(
    repo_root: Path | str,
    extra_folders: Iterable[Path | str] = (),
    *,
    custom_folder: Optional[str] = None,
) -> List[WorkflowTemplate]:
    """List workflow templates: bundled first, then project, then ``extra_folders``.

    Args:
        repo_root: Repository whose custom workflows folder is scanned.
        extra_folders: Additional folders, relative to ``repo_root`` unless absolute.
        custom_folder: Custom folder relative to ``repo_root``; defaults to
            ``workflows.custom_folder`` from config.
    """
    root = Path(repo_root)
    if custom_folder is None:
        from lanes.core.config.domains.workflows import WorkflowsConfig

        custom_folder = WorkflowsConfig(repo_root=root).custom_folder

    templates = _discover_in(get_data_path("workflows"), built_in=True)

    custom_path = _custom_folder_path(root, custom_folder)
    if custom_path is not None:
        templates.extend(_discover_in(custom_path, built_in=False))

    for extra in extra_folders:
        folder = Path(extra)
        templates.extend(_discover_in(folder if folder.is_absolute() else root / folder, built_in=False))
    return templates


def resolve_workflow(
    reference: str,
    repo_root: Path | str,
    *,
    extra_folders: Iterable[Path | str] = (),
    custom_folder: Optional[str] = None,
) -> Optional[Path]:
    """Resolve a workflow name, file stem, or absolute template path.

    Returns:
        Absolute template path, or None when nothing matches.
    """
    candidate = Path(reference)
    if candidate.is_absolute() and candidate.suffix == WORKFLOW_SUFFIX and candidate.is_file():
        return candidate

    templates = discover_workflows(repo_root, extra_folders, custom_folder=custom_folder)
    for template in templates:
        if template.name == reference:
            return template.path
    for template in templates:
        if template.path.stem == reference:
            return template.path
    return None


__all__ = ["WORKFLOW_SUFFIX", "WorkflowTemplate", "discover_workflows", "resolve_workflow"]
