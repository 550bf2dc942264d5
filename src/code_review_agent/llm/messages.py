"""
Pydantic models for LLM messages.

Each conversation entry is one of these frozen message types. A session only
ever appends new entries; existing ones are never modified.

The message types mirror the common structure used by LLM providers (OpenAI,
Google, Anthropic) while adding type safety and runtime validation.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from .tool_call import (
    ToolCallItem,  # noqa: TCH001  # Pydantic needs runtime import for field validation
)


class UserMessage(BaseModel):
    """Message from the user to the LLM."""

    role: Literal["user"] = "user"
    content: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class AssistantMessage(BaseModel):
    """Message from the model: streamed text, tool call requests, or both."""

    role: Literal["assistant"] = "assistant"
    content: str | None = None
    tool_calls: list[ToolCallItem] | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("tool_calls", mode="after")
    @classmethod
    def check_has_content_or_tool_calls(
        cls,
        tool_calls: list[ToolCallItem] | None,
        info: Any,  # noqa: ANN401
    ) -> list[ToolCallItem] | None:
        """Ensure assistant message has either content or tool_calls."""
        content = info.data.get("content")
        if content is None and tool_calls is None:
            raise ValueError("Assistant message must have content or tool_calls")
        return tool_calls


class ToolMessage(BaseModel):
    """
    Message representing a tool execution result.

    Failed dispatches are recorded too, with ``is_error`` set, so the model can
    see and react to them.
    """

    role: Literal["tool"] = "tool"
    tool_call_id: str
    content: str
    name: str  # Function name
    is_error: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class SystemMessage(BaseModel):
    """System prompt message."""

    role: Literal["system"] = "system"
    content: str

    model_config = ConfigDict(extra="forbid", frozen=True)


LLMMessage = UserMessage | AssistantMessage | ToolMessage | SystemMessage
