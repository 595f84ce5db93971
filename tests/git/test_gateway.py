from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from helpers.git_helpers import git_create_branch, git_create_worktree, git_rev_parse
from lanes.core.exceptions import GitOperationFailed
from lanes.core.git.gateway import (
    GitGateway,
    clean_git_env,
    is_valid_branch_name,
    parse_worktree_list,
)


class TestBranchNames:
    @pytest.mark.parametrize("name", ["main", "feature/login", "fix_1.2", "a-b"])
    def test_accepts_safe_names(self, name: str) -> None:
        assert is_valid_branch_name(name)

    @pytest.mark.parametrize(
        "name", ["", "bad name", "a..b", "-rf", "x;rm -rf /", "$(whoami)", "a\nb"]
    )
    def test_rejects_unsafe_names(self, name: str) -> None:
        assert not is_valid_branch_name(name)


def test_parse_worktree_list_porcelain() -> None:
    out = (
        "worktree /repo\nHEAD abc\nbranch refs/heads/main\n\n"
        "worktree /repo/.worktrees/s1\nHEAD def\nbranch refs/heads/s1\n\n"
        "worktree /repo/.worktrees/d\nHEAD 123\ndetached\nprunable gitdir file points to non-existent location\n"
    )
    entries = parse_worktree_list(out)
    assert [e.path for e in entries] == ["/repo", "/repo/.worktrees/s1", "/repo/.worktrees/d"]
    assert entries[1].branch == "s1"
    assert entries[2].detached and entries[2].prunable
    assert entries[2].branch is None


def test_clean_git_env_scrubs_repository_overrides() -> None:
    env = clean_git_env({"GIT_DIR": "/elsewhere", "GIT_INDEX_FILE": "x", "PATH": "/bin"})
    assert "GIT_DIR" not in env
    assert "GIT_INDEX_FILE" not in env
    assert env["PATH"] == "/bin"
    assert env["GIT_TERMINAL_PROMPT"] == "0"


@pytest.mark.requires_git
class TestGitGateway:
    def test_run_returns_stdout(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo)
        assert gw.run(["rev-parse", "--abbrev-ref", "HEAD"]).strip() == "main"

    def test_run_failure_carries_exit_code_and_stderr(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo)
        with pytest.raises(GitOperationFailed) as excinfo:
            gw.run(["rev-parse", "--verify", "does-not-exist"])
        err = excinfo.value
        assert err.exit_code != 0
        assert err.command[0] == "git"
        assert not err.timed_out
        assert err.to_json_error()["code"] == "GitOperationFailed"

    def test_branch_exists(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo)
        git_create_branch(git_repo, "feature-x")
        assert gw.branch_exists("main")
        assert gw.branch_exists("feature-x")
        assert not gw.branch_exists("nope")

    def test_branch_exists_rejects_invalid_names_without_running_git(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo, git_executable="/nonexistent/git")
        # An invalid name short-circuits; the bogus executable is never spawned.
        assert gw.branch_exists("bad name; rm -rf /") is False

    def test_worktree_listing_and_lookup(self, git_repo: Path) -> None:
        wt = git_repo / ".worktrees" / "s1"
        git_create_worktree(git_repo, wt, "s1")
        gw = GitGateway(git_repo)

        paths = {Path(w.path).resolve() for w in gw.list_worktrees()}
        assert wt.resolve() in paths
        assert gw.get_branches_in_worktrees() >= {"main", "s1"}
        found = gw.find_worktree_for_branch("s1")
        assert found is not None and Path(found.path).resolve() == wt.resolve()
        assert gw.find_worktree_for_branch("other") is None

    def test_branches_in_worktrees_are_unique_per_worktree(self, git_repo: Path) -> None:
        git_create_worktree(git_repo, git_repo / ".worktrees" / "s1", "s1")
        git_create_worktree(git_repo, git_repo / ".worktrees" / "s2", "s2")
        gw = GitGateway(git_repo)
        gw.run(["worktree", "add", "--detach", str(git_repo / ".worktrees" / "loose")])

        worktrees = gw.list_worktrees()
        on_branch = [w for w in worktrees if not w.detached and w.branch]
        branches = gw.get_branches_in_worktrees()

        assert len(worktrees) == 4
        assert branches == {"main", "s1", "s2"}
        assert len(branches) == len(on_branch)

    def test_worktree_add_new_branch_from_start_point(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo)
        git_create_branch(git_repo, "base")
        target = git_repo / ".worktrees" / "fresh"
        gw.worktree_add(target, "fresh", new_branch=True, start_point="base")
        assert (target / "README.md").is_file()
        assert git_rev_parse(git_repo, "fresh") == git_rev_parse(git_repo, "base")

    def test_worktree_add_existing_branch(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo)
        git_create_branch(git_repo, "existing")
        target = git_repo / ".worktrees" / "existing"
        gw.worktree_add(target, "existing")
        assert (target / ".git").is_file()

    def test_merge_base(self, git_repo: Path) -> None:
        gw = GitGateway(git_repo)
        git_create_branch(git_repo, "other")
        assert gw.merge_base("main", "other") == git_rev_parse(git_repo, "main")

    def test_base_repo_path_from_worktree(self, git_repo: Path) -> None:
        wt = git_repo / ".worktrees" / "s2"
        git_create_worktree(git_repo, wt, "s2")
        gw = GitGateway(wt)
        assert gw.get_base_repo_path().resolve() == git_repo.resolve()
        assert GitGateway(git_repo).get_base_repo_path(wt).resolve() == git_repo.resolve()

    def test_fetch_from_missing_remote_raises(self, git_repo: Path) -> None:
        with pytest.raises(GitOperationFailed):
            GitGateway(git_repo).fetch("origin", "main")


def test_spawn_failure_is_git_operation_failed(tmp_path: Path) -> None:
    gw = GitGateway(tmp_path, git_executable=str(tmp_path / "no-such-git"), timeouts={"git_local": 5})
    with pytest.raises(GitOperationFailed) as excinfo:
        gw.run(["status"])
    assert excinfo.value.exit_code is None
    assert "spawn" in str(excinfo.value)


def test_timeout_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _timeout(*args, **kwargs):
        raise subprocess.TimeoutExpired(cmd=args[0], timeout=0.5, stderr="")

    monkeypatch.setattr("lanes.core.git.gateway.run_with_timeout", _timeout)
    gw = GitGateway(tmp_path, timeouts={"git_local": 0.5})
    with pytest.raises(GitOperationFailed) as excinfo:
        gw.run(["status"])
    assert excinfo.value.timed_out
    assert excinfo.value.context["timed_out"] is True
    assert "timed out" in str(excinfo.value)


def test_succeeds_treats_nonzero_exit_as_answer(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def _run(argv, ttype, **kwargs):
        calls.append((argv, ttype, kwargs["timeout"]))
        return subprocess.CompletedProcess(argv, 1, stdout="", stderr="")

    monkeypatch.setattr("lanes.core.git.gateway.run_with_timeout", _run)
    gw = GitGateway(tmp_path, timeouts={"git_local": 3})
    assert gw.succeeds(["show-ref", "--verify", "--quiet", "refs/heads/x"]) is False
    assert calls[0][1] == "git_local"
    assert calls[0][2] == 3


def test_fetch_uses_network_timeout_bucket(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def _run(argv, ttype, **kwargs):
        seen["ttype"] = ttype
        seen["timeout"] = kwargs["timeout"]
        return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

    monkeypatch.setattr("lanes.core.git.gateway.run_with_timeout", _run)
    GitGateway(tmp_path, timeouts={"git_network": 42}).fetch("origin", "main")
    assert seen == {"ttype": "git_network", "timeout": 42}
