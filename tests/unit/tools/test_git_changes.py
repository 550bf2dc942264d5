"""Tests for collecting working-tree diffs."""

import pathlib
import shutil
from unittest.mock import AsyncMock

import pytest

from code_review_agent.config_models import AppConfig
from code_review_agent.tools import ToolExecutionError, build_default_registry
from code_review_agent.tools.git_changes import (
    GitDiffProvider,
    GitProviderError,
    get_file_changes,
    is_excluded,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("dist", True),
        ("dist/bundle.js", True),
        ("bun.lock", True),
        ("distribution/app.js", False),
        ("src/dist.ts", False),
        ("src/app.ts", False),
    ],
)
def test_is_excluded(path: str, expected: bool) -> None:
    assert is_excluded(path, ("dist", "bun.lock")) is expected


@pytest.mark.asyncio
async def test_get_file_changes_preserves_provider_order() -> None:
    provider = AsyncMock()
    provider.diff_summary.return_value = ["b.ts", "dist/x.js", "a.ts"]
    provider.diff.side_effect = lambda root_dir, path: f"diff of {path}"

    changes = await get_file_changes(provider, "/repo")

    assert changes == [
        {"file": "b.ts", "diff": "diff of b.ts"},
        {"file": "a.ts", "diff": "diff of a.ts"},
    ]
    # Excluded paths are never diffed
    diffed = [call.args[1] for call in provider.diff.await_args_list]
    assert diffed == ["b.ts", "a.ts"]


@pytest.mark.asyncio
async def test_get_file_changes_real_repository(git_repo: pathlib.Path) -> None:
    provider = GitDiffProvider(timeout_seconds=10)

    changes = await get_file_changes(provider, str(git_repo))

    files = [change["file"] for change in changes]
    assert sorted(files) == ["README.md", "src/app.ts"]
    app_diff = next(c["diff"] for c in changes if c["file"] == "src/app.ts")
    assert "-export const answer = 41;" in app_diff
    assert "+export const answer = 42;" in app_diff


@pytest.mark.asyncio
async def test_custom_exclude_list(git_repo: pathlib.Path) -> None:
    provider = GitDiffProvider(timeout_seconds=10)

    changes = await get_file_changes(provider, str(git_repo), exclude_files=["src"])

    assert sorted(c["file"] for c in changes) == [
        "README.md",
        "bun.lock",
        "dist/bundle.js",
    ]


@pytest.mark.asyncio
async def test_deleted_files_count_as_changes(git_repo: pathlib.Path) -> None:
    provider = GitDiffProvider(timeout_seconds=10)
    summary_before = await provider.diff_summary(str(git_repo))
    assert summary_before

    for path in summary_before:
        (git_repo / path).unlink()
    assert sorted(await provider.diff_summary(str(git_repo))) == sorted(summary_before)


@pytest.mark.asyncio
async def test_not_a_repository(tmp_path: pathlib.Path) -> None:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    plain = tmp_path / "plain"
    plain.mkdir()

    with pytest.raises(GitProviderError):
        await GitDiffProvider(timeout_seconds=10).diff_summary(str(plain))


@pytest.mark.asyncio
async def test_missing_directory(tmp_path: pathlib.Path) -> None:
    with pytest.raises(GitProviderError, match="Directory not found"):
        await GitDiffProvider().diff_summary(str(tmp_path / "nope"))


@pytest.mark.asyncio
async def test_missing_git_binary(tmp_path: pathlib.Path) -> None:
    provider = GitDiffProvider(git_binary="git-binary-that-does-not-exist")

    with pytest.raises(GitProviderError, match="not installed"):
        await provider.diff_summary(str(tmp_path))


@pytest.mark.asyncio
async def test_registry_reports_provider_failure_as_execution_error(
    tmp_path: pathlib.Path, app_config: AppConfig
) -> None:
    registry = build_default_registry(
        app_config, git_provider=GitDiffProvider(git_binary="git-binary-that-does-not-exist")
    )

    outcome = await registry.dispatch("get_file_changes", {"root_dir": str(tmp_path)})

    assert isinstance(outcome, ToolExecutionError)
    assert outcome.error_type == "GitProviderError"
