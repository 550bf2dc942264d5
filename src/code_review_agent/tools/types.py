"""
Defines common types used by the tool system: tool definitions and the three
dispatch outcomes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pydantic import BaseModel


@dataclass(frozen=True)
class ToolDefinition:
    """
    A tool the model may call.

    Attributes:
        name: Unique name within a registry, as exposed to the model.
        description: Human-readable description sent to the model.
        input_model: Pydantic model validating the tool's input.
        handler: Async callable receiving the validated fields as keyword arguments.
    """

    name: str
    description: str
    input_model: type[BaseModel]
    # ast-grep-ignore: no-dict-any - Handlers return heterogeneous JSON-ready data
    handler: Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class ToolResult:
    """Successful tool output."""

    tool_name: str
    # ast-grep-ignore: no-dict-any - Structured data returned by handlers
    data: dict[str, Any] | list[Any] | str | int | float | bool | None

    is_error = False

    def to_llm_content(self) -> str:
        """Serialize the output for the model."""
        if isinstance(self.data, str):
            return self.data
        return json.dumps(self.data, indent=2, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class ToolValidationError:
    """
    Tool input rejected before the handler ran.

    ``errors`` holds field-level violations as ``{"loc", "msg", "type"}`` dicts.
    """

    tool_name: str
    message: str
    errors: list[dict[str, Any]] = field(default_factory=list)

    is_error = True

    def to_llm_content(self) -> str:
        payload: dict[str, Any] = {
            "error": "validation_error",
            "tool": self.tool_name,
            "message": self.message,
        }
        if self.errors:
            payload["details"] = self.errors
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class ToolExecutionError:
    """The handler raised while running validated input."""

    tool_name: str
    message: str
    error_type: str

    is_error = True

    def to_llm_content(self) -> str:
        return json.dumps(
            {
                "error": "execution_error",
                "tool": self.tool_name,
                "error_type": self.error_type,
                "message": self.message,
            },
            indent=2,
            ensure_ascii=False,
        )


ToolOutcome = ToolResult | ToolValidationError | ToolExecutionError
