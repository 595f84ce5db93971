from __future__ import annotations

import json
import shlex
from pathlib import Path

import pytest

from lanes.core.agents import (
    ClaudeCodeAgent,
    CodexAgent,
    CommandOptions,
    CortexCodeAgent,
    GeminiAgent,
    McpConfig,
    McpServerConfig,
    OpenCodeAgent,
)
from lanes.core.agents.base import escape_for_single_quotes
from lanes.core.agents.mcp import WORKFLOW_SERVER_NAME, build_codex_mcp_config_overrides
from lanes.core.exceptions import InvalidSessionId

UUID = "123e4567-e89b-12d3-a456-426614174000"

ALL_AGENTS = [ClaudeCodeAgent, CodexAgent, CortexCodeAgent, GeminiAgent, OpenCodeAgent]


@pytest.mark.parametrize("agent_cls", ALL_AGENTS)
def test_every_agent_uses_shared_session_and_status_file_names(agent_cls) -> None:
    agent = agent_cls()
    assert agent.get_session_file_name() == ".claude-session"
    assert agent.get_status_file_name() == ".claude-status"


@pytest.mark.parametrize("agent_cls", ALL_AGENTS)
def test_resume_rejects_injection_attempts(agent_cls) -> None:
    agent = agent_cls()
    for bad in ("abc; rm -rf /", "$(whoami)", "", "../../etc/passwd"):
        assert not agent.validate_session_id(bad)
        with pytest.raises(InvalidSessionId):
            agent.build_resume_command(bad, CommandOptions())


@pytest.mark.parametrize("agent_cls", ALL_AGENTS)
def test_permission_modes_validate(agent_cls) -> None:
    agent = agent_cls()
    assert agent.validate_permission_mode("acceptEdits")
    assert agent.validate_permission_mode("bypassPermissions")
    assert not agent.validate_permission_mode("yolo-everything")


def test_terminal_name_uses_display_name() -> None:
    assert ClaudeCodeAgent().get_terminal_name("feat") == "Claude: feat"
    assert GeminiAgent().get_terminal_name("feat") == "Gemini CLI: feat"


def test_cli_command_override() -> None:
    agent = ClaudeCodeAgent(cli_command="/opt/bin/claude")
    assert agent.cli_command == "/opt/bin/claude"
    assert agent.build_start_command(CommandOptions()) == "/opt/bin/claude"
    assert agent.name == "claude"


class TestClaude:
    def test_start_command_flags_and_prompt(self) -> None:
        cmd = ClaudeCodeAgent().build_start_command(
            CommandOptions(
                permission_mode="acceptEdits",
                settings_path="/s/claude-settings.json",
                mcp_config_path="/s/mcp-config.json",
                prompt="fix Bob's bug",
            )
        )
        assert cmd.startswith("claude --mcp-config /s/mcp-config.json --settings /s/claude-settings.json")
        assert "--permission-mode acceptEdits" in cmd
        assert shlex.split(cmd)[-1] == "fix Bob's bug"

    def test_default_permission_mode_adds_no_flag(self) -> None:
        assert ClaudeCodeAgent().build_start_command(CommandOptions(permission_mode="default")) == "claude"

    def test_bypass_mode_flag(self) -> None:
        cmd = ClaudeCodeAgent().build_start_command(CommandOptions(permission_mode="bypassPermissions"))
        assert cmd == "claude --dangerously-skip-permissions"

    def test_resume_command(self) -> None:
        cmd = ClaudeCodeAgent().build_resume_command(UUID, CommandOptions(settings_path="/s/c.json"))
        assert cmd == f"claude --settings /s/c.json --resume {UUID}"

    def test_paths_with_spaces_are_quoted(self) -> None:
        cmd = ClaudeCodeAgent().build_start_command(CommandOptions(settings_path="/my dir/c.json"))
        assert shlex.split(cmd) == ["claude", "--settings", "/my dir/c.json"]

    def test_hooks_cover_capture_and_status(self, tmp_path: Path) -> None:
        configs = ClaudeCodeAgent().generate_hooks_config(
            tmp_path, tmp_path / ".claude-session", tmp_path / ".claude-status"
        )
        events = {c.event for c in configs}
        assert events == set(ClaudeCodeAgent().get_hook_events())
        start = next(c for c in configs if c.event == "SessionStart")
        assert "capture-session" in start.commands[0].command
        notification = next(c for c in configs if c.event == "Notification")
        assert notification.matcher == "permission_prompt"
        assert "waiting_for_user" in notification.commands[0].command

    def test_mcp_delivery(self) -> None:
        agent = ClaudeCodeAgent()
        assert agent.supports_mcp()
        assert agent.get_mcp_config_delivery() == "cli"


class TestCodex:
    def test_start_command_with_overrides(self) -> None:
        cmd = CodexAgent().build_start_command(
            CommandOptions(
                permission_mode="acceptEdits",
                mcp_overrides=["-c", 'mcp_servers.wf.command="node"'],
                prompt="go",
            )
        )
        argv = shlex.split(cmd)
        assert argv[:3] == ["codex", "-c", 'mcp_servers.wf.command="node"']
        assert "--sandbox" in argv and "workspace-write" in argv
        assert argv[-1] == "go"

    def test_resume_command(self) -> None:
        assert CodexAgent().build_resume_command(UUID, CommandOptions()) == f"codex resume {UUID}"

    def test_no_hooks(self) -> None:
        agent = CodexAgent()
        assert not agent.supports_hooks()
        assert agent.generate_hooks_config("/w", "/s", "/t") == []

    def test_overrides_encode_every_server(self) -> None:
        config = McpConfig()
        config.add_server(McpServerConfig("wf", "node", ['say "hi"', "b\\c"], {"K": "v"}))
        overrides = CodexAgent().build_mcp_overrides(config)
        assert overrides == build_codex_mcp_config_overrides(config)
        assert overrides == [
            "-c",
            'mcp_servers.wf.command="node"',
            "-c",
            'mcp_servers.wf.args=["say \\"hi\\"", "b\\\\c"]',
            "-c",
            'mcp_servers.wf.env={K="v"}',
        ]

    def test_settings_file_is_toml(self) -> None:
        assert CodexAgent().get_settings_file_name() == "config.toml"
        assert CodexAgent().get_mcp_config_delivery() == "cli-overrides"


class TestCortex:
    def test_naming(self, tmp_path: Path) -> None:
        agent = CortexCodeAgent()
        assert agent.get_settings_file_name() == "cortex-settings.json"
        assert agent.get_data_directory() == ".cortex"
        assert agent.get_local_settings_files() == []
        assert agent.get_terminal_name("feat") == "Cortex: feat"
        assert agent.get_project_settings_path(tmp_path) == tmp_path / ".cortex" / "settings.local.json"

    def test_commands_take_no_settings_or_prompt(self) -> None:
        agent = CortexCodeAgent()
        options = CommandOptions(
            permission_mode="bypassPermissions", settings_path="/s/c.json", prompt="hello"
        )
        assert agent.build_start_command(options) == "cortex --bypass"
        assert agent.build_start_command(CommandOptions(permission_mode="acceptEdits")) == "cortex"
        assert agent.build_resume_command(UUID, options) == f"cortex --resume {UUID}"

    def test_hooks_without_matchers_on_lifecycle_events(self, tmp_path: Path) -> None:
        configs = CortexCodeAgent().generate_hooks_config(
            tmp_path, tmp_path / ".claude-session", tmp_path / ".claude-status"
        )
        matchers = {c.event: c.matcher for c in configs}
        assert set(matchers) == set(CortexCodeAgent().get_hook_events())
        assert matchers["Notification"] is None
        assert matchers["PreToolUse"] == ".*"

    def test_no_mcp(self, tmp_path: Path) -> None:
        agent = CortexCodeAgent()
        assert agent.supports_hooks()
        assert not agent.supports_mcp()
        assert agent.get_mcp_config(tmp_path / "wt", tmp_path / "wf.yaml", tmp_path) is None


class TestGemini:
    def test_project_settings_path(self, tmp_path: Path) -> None:
        assert GeminiAgent().get_project_settings_path(tmp_path) == tmp_path / ".gemini" / "settings.json"

    @pytest.mark.parametrize("session_id", [UUID, "3", "latest"])
    def test_session_id_shapes(self, session_id: str) -> None:
        assert GeminiAgent().validate_session_id(session_id)

    def test_resume_latest_omits_id(self) -> None:
        agent = GeminiAgent()
        assert agent.build_resume_command("latest", CommandOptions()) == "gemini --resume"
        assert agent.build_resume_command("2", CommandOptions()) == "gemini --resume 2"

    def test_hooks_emit_json(self, tmp_path: Path) -> None:
        configs = GeminiAgent().generate_hooks_config(tmp_path, tmp_path / "s", tmp_path / "t")
        assert all(cmd.command.endswith("--emit-json") for c in configs for cmd in c.commands)
        assert [c.matcher for c in configs if c.event == "SessionStart"] == ["startup", "resume", "clear"]

    def test_start_command(self) -> None:
        cmd = GeminiAgent().build_start_command(CommandOptions(permission_mode="bypassPermissions"))
        assert cmd == "gemini --approval-mode yolo"


class TestOpenCode:
    def test_session_id_format(self) -> None:
        agent = OpenCodeAgent()
        assert agent.validate_session_id("ses_abc123XYZ")
        assert not agent.validate_session_id(UUID)
        assert agent.build_resume_command("ses_abc", CommandOptions()) == "opencode --session ses_abc"

    def test_prompt_is_passed_as_option(self) -> None:
        cmd = OpenCodeAgent().build_start_command(CommandOptions(prompt="hello", permission_mode="acceptEdits"))
        assert shlex.split(cmd) == ["opencode", "--prompt", "hello"]

    def test_mcp_settings_shape(self) -> None:
        config = McpConfig()
        config.add_server(McpServerConfig("wf", "node", ["server.js"]))
        assert OpenCodeAgent().format_mcp_for_settings(config) == {
            "mcp": {"wf": {"type": "local", "command": ["node", "server.js"]}}
        }

    def test_project_settings_path(self, tmp_path: Path) -> None:
        assert OpenCodeAgent().get_project_settings_path(tmp_path) == tmp_path / "opencode.jsonc"


def test_workflow_mcp_config_points_at_session(tmp_path: Path) -> None:
    agent = ClaudeCodeAgent(mcp_server_command="lanes-mcp", mcp_server_args=["--stdio"])
    config = agent.get_mcp_config(tmp_path / "wt", tmp_path / "wf.yaml", tmp_path)
    assert config is not None
    server = config.servers[WORKFLOW_SERVER_NAME]
    assert server.command == "lanes-mcp"
    assert server.args[0] == "--stdio"
    assert server.args[server.args.index("--worktree") + 1] == str(tmp_path / "wt")
    assert server.args[server.args.index("--workflow-path") + 1] == str(tmp_path / "wf.yaml")


def test_mcp_config_save_and_load(tmp_path: Path) -> None:
    config = McpConfig()
    config.add_server(McpServerConfig("wf", "node", ["a"], {"X": "1"}))
    path = config.save(tmp_path / "mcp-config.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"mcpServers": {"wf": {"command": "node", "args": ["a"], "env": {"X": "1"}}}}
    assert McpConfig.from_dict(data).servers["wf"].env == {"X": "1"}


def test_escape_for_single_quotes() -> None:
    assert escape_for_single_quotes("it's") == "it'\\''s"
