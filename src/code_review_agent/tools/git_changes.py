"""Tool for collecting uncommitted changes from a git working tree."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_FILES: tuple[str, ...] = ("dist", "bun.lock")


class GitProviderError(Exception):
    """Raised when git cannot produce a diff for the requested directory."""

    def __init__(self, message: str, root_dir: str | None = None) -> None:
        self.root_dir = root_dir
        super().__init__(message)


class DiffProvider(Protocol):
    """Source of working-tree diffs."""

    async def diff_summary(self, root_dir: str) -> list[str]:
        """Return the changed paths, relative to ``root_dir``."""
        ...

    async def diff(self, root_dir: str, path: str) -> str:
        """Return the unified diff of a single path."""
        ...


class GitDiffProvider:
    """Runs the ``git`` CLI to diff the working tree against the index."""

    def __init__(self, git_binary: str = "git", timeout_seconds: float = 30.0) -> None:
        self.git_binary = git_binary
        self.timeout_seconds = timeout_seconds

    async def _run_git(self, root_dir: str, *args: str) -> str:
        if not Path(root_dir).is_dir():
            raise GitProviderError(f"Directory not found: {root_dir}", root_dir)

        try:
            process = await asyncio.create_subprocess_exec(
                self.git_binary,
                "-c",
                "core.quotepath=false",
                *args,
                cwd=root_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise GitProviderError(
                f"git executable '{self.git_binary}' is not installed", root_dir
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise GitProviderError(
                f"git {args[0]} timed out after {self.timeout_seconds}s", root_dir
            ) from e

        if process.returncode != 0:
            error_msg = stderr.decode("utf-8", errors="replace").strip()
            raise GitProviderError(
                f"git {args[0]} failed in {root_dir}: {error_msg}", root_dir
            )
        return stdout.decode("utf-8", errors="replace")

    async def diff_summary(self, root_dir: str) -> list[str]:
        output = await self._run_git(
            root_dir, "diff", "--name-only", "--relative", "--no-color"
        )
        return [line for line in output.splitlines() if line.strip()]

    async def diff(self, root_dir: str, path: str) -> str:
        return await self._run_git(
            root_dir, "diff", "--relative", "--no-color", "--no-ext-diff", "--", path
        )


def is_excluded(path: str, exclude_files: tuple[str, ...] | list[str]) -> bool:
    """Whether ``path`` equals an exclude entry or lies under a directory named by one."""
    for entry in exclude_files:
        entry = entry.rstrip("/")
        if not entry:
            continue
        if path == entry or path.startswith(entry + "/"):
            return True
    return False


async def get_file_changes(
    provider: DiffProvider,
    root_dir: str,
    exclude_files: tuple[str, ...] | list[str] = DEFAULT_EXCLUDE_FILES,
) -> list[dict[str, str]]:
    """Return ``[{"file", "diff"}]`` for every changed, non-excluded path.

    Order follows the provider's enumeration. Provider failures propagate as
    ``GitProviderError``.
    """
    changed = await provider.diff_summary(root_dir)
    logger.info(f"Found {len(changed)} changed file(s) in {root_dir}")

    file_changes: list[dict[str, str]] = []
    for path in changed:
        if is_excluded(path, exclude_files):
            logger.debug(f"Skipping excluded path: {path}")
            continue
        file_changes.append({"file": path, "diff": await provider.diff(root_dir, path)})
    return file_changes
