"""
Module defining the interface for interacting with Large Language Models (LLMs).

The orchestrator only depends on ``LLMInterface`` and ``LLMStreamEvent``; the
concrete provider lives in ``providers/`` and is built by ``LLMClientFactory``.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from .messages import (
    AssistantMessage,
    LLMMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from .tool_call import ToolCallFunction, ToolCallItem

logger = logging.getLogger(__name__)

__all__ = [
    "AssistantMessage",
    "LLMInterface",
    "LLMMessage",
    "LLMStreamEvent",
    "SystemMessage",
    "ToolCallFunction",
    "ToolCallItem",
    "ToolMessage",
    "UserMessage",
]


@dataclass
class LLMStreamEvent:
    """Event emitted during streaming LLM responses."""

    type: Literal["content", "tool_call", "tool_result", "error", "done"]
    content: str | None = None  # For content chunks
    tool_call: ToolCallItem | None = None  # For tool calls
    tool_call_id: str | None = None  # For correlating tool results
    tool_result: str | None = None  # For tool execution results
    error: str | None = None  # For error messages
    metadata: dict[str, Any] | None = None  # Additional event metadata


class LLMInterface(Protocol):
    """Protocol defining the interface for interacting with an LLM."""

    def generate_response_stream(
        self,
        messages: Sequence[LLMMessage],
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str | None = "auto",
    ) -> AsyncIterator[LLMStreamEvent]:
        """
        Generates a streaming response from the LLM.

        Yields ``content`` events as text arrives, one ``tool_call`` event per
        requested tool, and a final ``done`` event. Transport failures surface
        as an ``error`` event.

        Note: This is typed as a regular method (not async def) that returns
        AsyncIterator because it's an async generator function.
        """
        ...


def _truncate_content(content: str, max_length: int = 500) -> str:
    """Truncate content for debug logging, preserving readability."""
    if len(content) <= max_length:
        return content
    return content[:max_length] + f"...[truncated {len(content) - max_length} chars]"


def _format_messages_for_debug(
    messages: Sequence[LLMMessage],
    tools: list[dict[str, Any]] | None = None,
    tool_choice: str | None = None,
) -> str:
    """Format messages for debug logging."""
    lines = [f"=== LLM Request ({len(messages)} messages) ==="]

    for i, msg in enumerate(messages):
        content = _truncate_content(msg.content or "")
        suffix = ""
        if isinstance(msg, AssistantMessage) and msg.tool_calls:
            calls = ", ".join(
                f"{tc.function.name}(id={tc.id})" for tc in msg.tool_calls
            )
            suffix = f" + tool_call({calls})"
        elif isinstance(msg, ToolMessage):
            suffix = f" [tool={msg.name}, id={msg.tool_call_id}]"
        lines.append(f"[{i}] {msg.role}: {content}{suffix}")

    if tools:
        tool_names = [t.get("function", {}).get("name", "unknown") for t in tools]
        lines.append(f"Tools ({len(tools)}): {', '.join(tool_names)}")
    if tool_choice:
        lines.append(f"Tool choice: {tool_choice}")

    return "\n".join(lines)
