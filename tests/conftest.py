import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'lanes' and tests/helpers importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.cache_utils import reset_lanes_caches
from helpers.git_helpers import git_commit, git_config_identity, git_init

# Variables that would redirect config or git away from the test repository.
_LEAK_PRONE_ENV_KEYS = [
    "LANES_PROJECT_ROOT",
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
]


@pytest.fixture(autouse=True)
def _isolate_lanes_state(monkeypatch):
    """Fresh config caches, logging handlers and env for every test."""
    for key in list(os.environ):
        if key.startswith("LANES_") or key in _LEAK_PRONE_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
    reset_lanes_caches()
    yield
    reset_lanes_caches()


@pytest.fixture
def git_repo(tmp_path, monkeypatch) -> Path:
    """
    A real git repository on ``main`` with one commit.

    ``LANES_PROJECT_ROOT`` points at it and the cwd is switched into it, so
    both explicit and auto-detected project roots resolve here.
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    git_init(repo)
    git_config_identity(repo)
    (repo / "README.md").write_text("# Test Project\n", encoding="utf-8")
    (repo / ".gitignore").write_text(".lanes/\n.worktrees/\n", encoding="utf-8")
    git_commit(repo, "Initial commit")

    monkeypatch.setenv("LANES_PROJECT_ROOT", str(repo))
    monkeypatch.chdir(repo)
    reset_lanes_caches()
    return repo.resolve()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch) -> Path:
    """Project root that is not a git repository (config-only tests)."""
    monkeypatch.setenv("LANES_PROJECT_ROOT", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".lanes").mkdir(parents=True, exist_ok=True)
    reset_lanes_caches()
    return tmp_path.resolve()
