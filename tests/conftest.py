import logging
import pathlib
import shutil
import subprocess
from datetime import UTC, datetime

import pytest

from code_review_agent.config_models import AppConfig
from code_review_agent.utils.clock import MockClock

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

GIT_AVAILABLE = shutil.which("git") is not None


@pytest.fixture
def mock_clock() -> MockClock:
    """A clock pinned to a known instant."""
    return MockClock(datetime(2025, 3, 14, 9, 26, 53, 589000, tzinfo=UTC))


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(gemini_api_key="test-key")


def _git(repo: pathlib.Path, *args: str) -> None:
    subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path: pathlib.Path) -> pathlib.Path:
    """
    A git repository with one commit and uncommitted modifications.

    Modified after the commit: ``src/app.ts``, ``README.md``, ``dist/bundle.js``
    and ``bun.lock``.
    """
    if not GIT_AVAILABLE:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.email", "reviewer@example.com")
    _git(repo, "config", "user.name", "Reviewer")
    _git(repo, "config", "commit.gpgsign", "false")

    (repo / "src").mkdir()
    (repo / "dist").mkdir()
    (repo / "src" / "app.ts").write_text("export const answer = 41;\n")
    (repo / "README.md").write_text("# Project\n")
    (repo / "dist" / "bundle.js").write_text("var a=1;\n")
    (repo / "bun.lock").write_text("lock v1\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "initial")

    (repo / "src" / "app.ts").write_text("export const answer = 42;\n")
    (repo / "README.md").write_text("# Project\n\nNow with docs.\n")
    (repo / "dist" / "bundle.js").write_text("var a=2;\n")
    (repo / "bun.lock").write_text("lock v2\n")
    return repo
