"""Input models for the review tools.

Each model doubles as the JSON schema advertised to the model and as the
validator applied before a handler runs.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CommitType = Literal["feat", "fix", "docs", "style", "refactor", "test", "chore"]


class GetFileChangesInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    root_dir: str = Field(
        min_length=1,
        description="The root directory of the git repository to inspect",
    )


class GenerateCommitMessageInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    changes: str = Field(description="Description of the changes made")
    type: CommitType = Field(description="Type of commit")


class WriteMarkdownFileInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(description="The markdown content to write to the file")
    filename: str = Field(
        min_length=1,
        description="The name of the markdown file (with or without the .md extension)",
    )
    directory: str | None = Field(
        default=None,
        description="Directory to write the file in (defaults to the current directory)",
    )


class ReadFileInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_path: str = Field(
        min_length=1, description="Path of the text file to read"
    )


class AnalyzeCodeQualityInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code_content: str = Field(description="The code content to analyze")
    language: str = Field(
        default="typescript",
        description="Programming language of the code (defaults to typescript)",
    )
