from __future__ import annotations

from pathlib import Path

import pytest

from helpers.io_utils import write_yaml
from lanes.core.config.domains.agents import AgentsConfig
from lanes.core.config.domains.logging import LoggingConfig
from lanes.core.config.domains.timeouts import TimeoutsConfig
from lanes.core.config.domains.workflows import WorkflowsConfig
from lanes.core.config.domains.worktrees import WorktreesConfig
from lanes.core.config.manager import ConfigManager, deep_merge
from lanes.core.exceptions import ConfigError


def test_bundled_defaults(isolated_project_env: Path) -> None:
    worktrees = WorktreesConfig(repo_root=isolated_project_env)
    assert worktrees.folder == ".worktrees"
    assert worktrees.folder_path == isolated_project_env / ".worktrees"
    assert worktrees.local_settings_propagation == "copy"
    assert worktrees.default_remote == "origin"

    assert AgentsConfig(repo_root=isolated_project_env).default == "claude"
    assert WorkflowsConfig(repo_root=isolated_project_env).custom_folder == ".lanes/workflows"
    assert LoggingConfig(repo_root=isolated_project_env).level == "WARNING"
    assert LoggingConfig(repo_root=isolated_project_env).file is None

    timeouts = TimeoutsConfig(repo_root=isolated_project_env)
    assert timeouts.git_local_seconds > 0
    assert timeouts.git_network_seconds >= timeouts.git_local_seconds


def test_project_and_local_files_layer(isolated_project_env: Path) -> None:
    cfg_dir = isolated_project_env / ".lanes"
    write_yaml(cfg_dir / "config.yaml", {"worktrees": {"folder": "sessions", "default_remote": "upstream"}})
    write_yaml(cfg_dir / "config.local.yaml", {"worktrees": {"folder": "mine"}})

    worktrees = WorktreesConfig(repo_root=isolated_project_env)
    assert worktrees.folder == "mine"
    assert worktrees.default_remote == "upstream"
    assert worktrees.local_settings_propagation == "copy"


def test_env_override_wins(isolated_project_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_yaml(isolated_project_env / ".lanes" / "config.yaml", {"timeouts": {"git_local_seconds": 10}})
    monkeypatch.setenv("LANES_TIMEOUTS__GIT_LOCAL_SECONDS", "3")
    monkeypatch.setenv("LANES_LOGGING__LEVEL", "debug")
    assert TimeoutsConfig(repo_root=isolated_project_env).git_local_seconds == 3.0
    assert LoggingConfig(repo_root=isolated_project_env).level == "DEBUG"


def test_invalid_yaml_fails_closed(isolated_project_env: Path) -> None:
    (isolated_project_env / ".lanes" / "config.yaml").write_text("worktrees: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        WorktreesConfig(repo_root=isolated_project_env)


def test_schema_violation_is_reported(isolated_project_env: Path) -> None:
    write_yaml(
        isolated_project_env / ".lanes" / "config.yaml",
        {"worktrees": {"local_settings_propagation": "teleport"}},
    )
    with pytest.raises(ConfigError) as excinfo:
        ConfigManager(repo_root=isolated_project_env).load_config()
    assert "local_settings_propagation" in str(excinfo.value)


def test_relative_log_file_is_under_repo(isolated_project_env: Path) -> None:
    write_yaml(isolated_project_env / ".lanes" / "config.yaml", {"logging": {"file": ".lanes/lanes.log"}})
    assert LoggingConfig(repo_root=isolated_project_env).file == isolated_project_env / ".lanes" / "lanes.log"


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"a": {"b": 1, "c": 2}}
    override = {"a": {"c": 3}, "d": 4}
    merged = deep_merge(base, override)
    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
    assert base == {"a": {"b": 1, "c": 2}}
