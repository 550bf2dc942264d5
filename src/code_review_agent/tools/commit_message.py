"""Tool for drafting conventional commit messages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from code_review_agent.utils.clock import isoformat_utc

if TYPE_CHECKING:
    from code_review_agent.tools.schemas import CommitType
    from code_review_agent.utils.clock import Clock

logger = logging.getLogger(__name__)

COMMIT_TYPE_LABELS: dict[str, str] = {
    "feat": "✨ New feature",
    "fix": "🐛 Bug fix",
    "docs": "📚 Documentation",
    "style": "💄 Code style",
    "refactor": "♻️ Code refactoring",
    "test": "🧪 Testing",
    "chore": "🔧 Maintenance",
}

MAX_SHORT_DESCRIPTION = 50


class CommitMessage(BaseModel):
    """A drafted commit message."""

    model_config = ConfigDict(frozen=True)

    message: str
    full_message: str
    type: str
    changes: str


def shorten_description(changes: str) -> str:
    if len(changes) <= MAX_SHORT_DESCRIPTION:
        return changes
    return changes[: MAX_SHORT_DESCRIPTION - 3] + "..."


def build_commit_message(changes: str, commit_type: CommitType, clock: Clock) -> CommitMessage:
    label = COMMIT_TYPE_LABELS[commit_type]
    timestamp = isoformat_utc(clock.now())
    return CommitMessage(
        message=f"{label} {commit_type}: {shorten_description(changes)}",
        full_message=f"{label} {commit_type}: {changes}\n\nGenerated on: {timestamp}",
        type=commit_type,
        changes=changes,
    )


async def generate_commit_message(
    clock: Clock, changes: str, type: CommitType
) -> dict[str, str]:
    """Tool entry point; returns the commit message as plain data."""
    commit = build_commit_message(changes, type, clock)
    logger.info(f"Generated commit message: {commit.message}")
    return commit.model_dump()
