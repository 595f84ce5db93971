from __future__ import annotations

import json
from pathlib import Path

import pytest

from lanes.core.agents import ClaudeCodeAgent, CodexAgent, GeminiAgent, McpConfig, McpServerConfig, OpenCodeAgent
from lanes.core.exceptions import SettingsParseError
from lanes.core.launch.settings import SettingsFileBuilder
from lanes.core.session.metadata import SessionMetadataStore


def _builder(repo: Path, agent) -> SettingsFileBuilder:
    return SettingsFileBuilder(agent, SessionMetadataStore.for_agent(repo, agent))


def _mcp() -> McpConfig:
    config = McpConfig()
    config.add_server(McpServerConfig("lanes-workflow", "lanes-mcp", ["--worktree", "/w"]))
    return config


def test_claude_hooks_table_shape(tmp_path: Path) -> None:
    wt = tmp_path / ".worktrees" / "s"
    hooks = _builder(tmp_path, ClaudeCodeAgent()).build_hooks(wt)

    assert set(hooks) == {"SessionStart", "Stop", "UserPromptSubmit", "Notification", "PreToolUse"}
    [entry] = hooks["Notification"]
    assert entry["matcher"] == "permission_prompt"
    assert entry["hooks"][0]["type"] == "command"
    assert "matcher" not in hooks["Stop"][0]
    session_file = tmp_path / ".lanes" / "current-sessions" / "s" / ".claude-session"
    assert str(session_file) in hooks["SessionStart"][0]["hooks"][0]["command"]


def test_agent_without_hooks_has_no_hooks_table(tmp_path: Path) -> None:
    builder = _builder(tmp_path, CodexAgent())
    assert builder.build_hooks(tmp_path / "wt") is None
    assert builder.build(tmp_path / "wt") == {}


def test_session_settings_path_for_cli_agents(tmp_path: Path) -> None:
    wt = tmp_path / ".worktrees" / "s"
    path = _builder(tmp_path, ClaudeCodeAgent()).write(wt)
    assert path == tmp_path / ".lanes" / "current-sessions" / "s" / "claude-settings.json"
    assert "hooks" in json.loads(path.read_text(encoding="utf-8"))
    assert not (wt / ".gitignore").exists()


def test_gemini_project_file_keeps_user_keys(tmp_path: Path) -> None:
    wt = tmp_path / ".worktrees" / "g"
    project = wt / ".gemini" / "settings.json"
    project.parent.mkdir(parents=True)
    project.write_text(
        json.dumps({"theme": "dark", "hooks": {"Old": []}, "mcpServers": {"mine": {"command": "x", "args": []}}}),
        encoding="utf-8",
    )

    path = _builder(tmp_path, GeminiAgent()).write(wt, mcp_config=_mcp())

    assert path == project
    data = json.loads(project.read_text(encoding="utf-8"))
    assert data["theme"] == "dark"
    assert "Old" not in data["hooks"]
    assert "SessionStart" in data["hooks"]
    assert set(data["mcpServers"]) == {"mine", "lanes-workflow"}
    assert ".gemini/settings.json" in (wt / ".gitignore").read_text(encoding="utf-8").splitlines()


def test_gitignore_entry_is_added_once(tmp_path: Path) -> None:
    wt = tmp_path / ".worktrees" / "g"
    wt.mkdir(parents=True)
    (wt / ".gitignore").write_text("node_modules/", encoding="utf-8")
    builder = _builder(tmp_path, GeminiAgent())
    builder.write(wt)
    builder.write(wt)
    assert (wt / ".gitignore").read_text(encoding="utf-8") == "node_modules/\n.gemini/settings.json\n"


def test_opencode_jsonc_merge(tmp_path: Path) -> None:
    wt = tmp_path / ".worktrees" / "o"
    wt.mkdir(parents=True)
    (wt / "opencode.jsonc").write_text(
        '{\n  // my model\n  "model": "gpt",\n  "mcp": {"mine": {"type": "remote", "url": "http://x"}},\n}\n',
        encoding="utf-8",
    )

    _builder(tmp_path, OpenCodeAgent()).write(wt, mcp_config=_mcp())

    data = json.loads((wt / "opencode.jsonc").read_text(encoding="utf-8"))
    assert data["model"] == "gpt"
    assert data["mcp"]["mine"]["type"] == "remote"
    assert data["mcp"]["lanes-workflow"] == {"type": "local", "command": ["lanes-mcp", "--worktree", "/w"]}
    assert "hooks" not in data


def test_malformed_project_file_is_not_overwritten(tmp_path: Path) -> None:
    wt = tmp_path / ".worktrees" / "g"
    project = wt / ".gemini" / "settings.json"
    project.parent.mkdir(parents=True)
    project.write_text("{oops", encoding="utf-8")

    with pytest.raises(SettingsParseError):
        _builder(tmp_path, GeminiAgent()).write(wt)
    assert project.read_text(encoding="utf-8") == "{oops"
