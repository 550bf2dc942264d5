"""
Tools offered to the model during a review session.

``build_default_registry`` wires the five review tools to their
collaborators (git provider, clock, configuration limits).
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from code_review_agent.tools.code_quality import analyze_code_quality
from code_review_agent.tools.commit_message import generate_commit_message
from code_review_agent.tools.files import read_file
from code_review_agent.tools.git_changes import (
    DiffProvider,
    GitDiffProvider,
    GitProviderError,
    get_file_changes,
)
from code_review_agent.tools.markdown import write_markdown_file
from code_review_agent.tools.registry import ToolRegistry
from code_review_agent.tools.schemas import (
    AnalyzeCodeQualityInput,
    GenerateCommitMessageInput,
    GetFileChangesInput,
    ReadFileInput,
    WriteMarkdownFileInput,
)
from code_review_agent.tools.types import (
    ToolDefinition,
    ToolExecutionError,
    ToolOutcome,
    ToolResult,
    ToolValidationError,
)
from code_review_agent.utils.clock import SystemClock

if TYPE_CHECKING:
    from code_review_agent.config_models import AppConfig
    from code_review_agent.utils.clock import Clock

__all__ = [
    "GitDiffProvider",
    "GitProviderError",
    "ToolDefinition",
    "ToolExecutionError",
    "ToolOutcome",
    "ToolRegistry",
    "ToolResult",
    "ToolValidationError",
    "build_default_registry",
]


def build_default_registry(
    config: AppConfig,
    clock: Clock | None = None,
    git_provider: DiffProvider | None = None,
) -> ToolRegistry:
    """Create a registry holding the five review tools."""
    clock = clock or SystemClock()
    git_provider = git_provider or GitDiffProvider(
        timeout_seconds=config.git_timeout_seconds
    )

    return ToolRegistry(
        [
            ToolDefinition(
                name="get_file_changes",
                description=(
                    "Gets the code changes made in the given directory: one entry "
                    "per changed file with its unified diff."
                ),
                input_model=GetFileChangesInput,
                handler=functools.partial(
                    get_file_changes,
                    git_provider,
                    exclude_files=tuple(config.exclude_files),
                ),
            ),
            ToolDefinition(
                name="read_file",
                description="Reads a text file and returns its content and line count.",
                input_model=ReadFileInput,
                handler=functools.partial(
                    read_file, max_bytes=config.max_read_file_bytes
                ),
            ),
            ToolDefinition(
                name="analyze_code_quality",
                description=(
                    "Analyzes code quality and returns scores for readability, "
                    "maintainability, security and performance, with suggestions."
                ),
                input_model=AnalyzeCodeQualityInput,
                handler=analyze_code_quality,
            ),
            ToolDefinition(
                name="generate_commit_message",
                description="Generates a conventional commit message based on changes.",
                input_model=GenerateCommitMessageInput,
                handler=functools.partial(generate_commit_message, clock),
            ),
            ToolDefinition(
                name="write_markdown_file",
                description="Writes content to a markdown file.",
                input_model=WriteMarkdownFileInput,
                handler=write_markdown_file,
            ),
        ]
    )
