from __future__ import annotations

from pathlib import Path

import pytest

from helpers.io_utils import write_yaml
from lanes.core.workflow import discover_workflows, resolve_workflow


def _custom(repo: Path, file_name: str, name: str, description: str = "custom flow") -> Path:
    path = repo / ".lanes" / "workflows" / file_name
    write_yaml(path, {"name": name, "description": description, "steps": []})
    return path


def test_bundled_templates_come_first(isolated_project_env: Path) -> None:
    _custom(isolated_project_env, "review.yaml", "review")
    templates = discover_workflows(isolated_project_env)

    names = [t.name for t in templates]
    assert names[:2] == ["bugfix", "feature"]
    assert names[-1] == "review"
    assert all(t.built_in for t in templates[:2])
    assert not templates[-1].built_in
    assert templates[-1].to_dict()["builtIn"] is False


def test_invalid_files_are_skipped(isolated_project_env: Path, caplog: pytest.LogCaptureFixture) -> None:
    folder = isolated_project_env / ".lanes" / "workflows"
    folder.mkdir(parents=True)
    (folder / "broken.yaml").write_text("name: [unclosed", encoding="utf-8")
    (folder / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
    (folder / "nameless.yaml").write_text("description: no name\n", encoding="utf-8")
    (folder / "notes.txt").write_text("name: ignored\n", encoding="utf-8")

    with caplog.at_level("WARNING"):
        templates = discover_workflows(isolated_project_env)

    assert [t.name for t in templates] == ["bugfix", "feature"]
    assert "broken.yaml" in caplog.text


def test_custom_folder_outside_repo_is_ignored(isolated_project_env: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING"):
        templates = discover_workflows(isolated_project_env, custom_folder="../elsewhere")
    assert [t.name for t in templates] == ["bugfix", "feature"]
    assert "parent traversal" in caplog.text


def test_custom_folder_from_config(isolated_project_env: Path) -> None:
    write_yaml(isolated_project_env / ".lanes" / "config.yaml", {"workflows": {"custom_folder": "flows"}})
    write_yaml(isolated_project_env / "flows" / "ship.yaml", {"name": "ship", "description": "Ship it"})
    assert "ship" in [t.name for t in discover_workflows(isolated_project_env)]


def test_extra_folders(isolated_project_env: Path, tmp_path: Path) -> None:
    extra = tmp_path / "shared-flows"
    write_yaml(extra / "triage.yaml", {"name": "triage", "description": "Triage issues"})
    templates = discover_workflows(isolated_project_env, [extra])
    assert templates[-1].name == "triage"


class TestResolveWorkflow:
    def test_by_name(self, isolated_project_env: Path) -> None:
        path = resolve_workflow("feature", isolated_project_env)
        assert path is not None and path.name == "feature.yaml"
        assert path.is_absolute()

    def test_by_file_stem(self, isolated_project_env: Path) -> None:
        custom = _custom(isolated_project_env, "deploy-flow.yaml", "deploy")
        assert resolve_workflow("deploy-flow", isolated_project_env) == custom.resolve()
        assert resolve_workflow("deploy", isolated_project_env) == custom.resolve()

    def test_absolute_path(self, isolated_project_env: Path, tmp_path: Path) -> None:
        path = tmp_path / "anywhere.yaml"
        write_yaml(path, {"name": "x", "description": "y"})
        assert resolve_workflow(str(path), isolated_project_env) == path

    def test_unknown(self, isolated_project_env: Path) -> None:
        assert resolve_workflow("does-not-exist", isolated_project_env) is None
        assert resolve_workflow(str(isolated_project_env / "gone.yaml"), isolated_project_env) is None
