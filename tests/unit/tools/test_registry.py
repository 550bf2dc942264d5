"""Tests for tool registration, schema generation and dispatch outcomes."""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel, ConfigDict, Field

from code_review_agent.config_models import AppConfig
from code_review_agent.tools import (
    ToolDefinition,
    ToolExecutionError,
    ToolRegistry,
    ToolResult,
    ToolValidationError,
    build_default_registry,
)


class EchoInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = Field(description="Text to echo")
    times: int = Field(default=1, ge=1)
    suffix: str | None = Field(default=None, description="Optional suffix")


async def echo(text: str, times: int, suffix: str | None) -> dict[str, Any]:
    return {"echo": (text * times) + (suffix or "")}


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry([
        ToolDefinition(
            name="echo",
            description="Echo text back",
            input_model=EchoInput,
            handler=echo,
        )
    ])


@pytest.mark.asyncio
async def test_dispatch_success(registry: ToolRegistry) -> None:
    outcome = await registry.dispatch("echo", {"text": "ab", "times": 2})

    assert isinstance(outcome, ToolResult)
    assert outcome.data == {"echo": "abab"}
    assert not outcome.is_error
    assert json.loads(outcome.to_llm_content()) == {"echo": "abab"}


@pytest.mark.asyncio
async def test_dispatch_accepts_json_string_arguments(registry: ToolRegistry) -> None:
    outcome = await registry.dispatch("echo", '{"text": "hi", "suffix": "!"}')

    assert isinstance(outcome, ToolResult)
    assert outcome.data == {"echo": "hi!"}


@pytest.mark.asyncio
async def test_unknown_tool_is_validation_error(registry: ToolRegistry) -> None:
    outcome = await registry.dispatch("does_not_exist", {})

    assert isinstance(outcome, ToolValidationError)
    assert outcome.is_error
    assert "does_not_exist" in outcome.message
    payload = json.loads(outcome.to_llm_content())
    assert payload["error"] == "validation_error"


@pytest.mark.asyncio
async def test_invalid_input_never_reaches_handler() -> None:
    handler = AsyncMock(return_value={"ok": True})
    registry = ToolRegistry([
        ToolDefinition(
            name="echo", description="Echo", input_model=EchoInput, handler=handler
        )
    ])

    outcome = await registry.dispatch("echo", {"times": 0, "unexpected": 1})

    handler.assert_not_awaited()
    assert isinstance(outcome, ToolValidationError)
    locations = {error["loc"] for error in outcome.errors}
    assert locations == {"text", "times", "unexpected"}
    for error in outcome.errors:
        assert error["msg"]
        assert error["type"]
    payload = json.loads(outcome.to_llm_content())
    assert len(payload["details"]) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_input", ["not json", "[1, 2]", "42"])
async def test_malformed_argument_payloads(
    registry: ToolRegistry, raw_input: str
) -> None:
    outcome = await registry.dispatch("echo", raw_input)

    assert isinstance(outcome, ToolValidationError)


@pytest.mark.asyncio
async def test_handler_exception_becomes_execution_error() -> None:
    async def locked(text: str, times: int, suffix: str | None) -> None:
        raise PermissionError("read-only filesystem")

    registry = ToolRegistry([
        ToolDefinition(name="echo", description="Echo", input_model=EchoInput, handler=locked)
    ])

    outcome = await registry.dispatch("echo", {"text": "x"})

    assert isinstance(outcome, ToolExecutionError)
    assert outcome.error_type == "PermissionError"
    assert outcome.message == "read-only filesystem"
    payload = json.loads(outcome.to_llm_content())
    assert payload == {
        "error": "execution_error",
        "tool": "echo",
        "error_type": "PermissionError",
        "message": "read-only filesystem",
    }


@pytest.mark.asyncio
async def test_cancellation_is_not_swallowed() -> None:
    async def cancelled(text: str, times: int, suffix: str | None) -> None:
        raise asyncio.CancelledError

    registry = ToolRegistry([
        ToolDefinition(
            name="echo", description="Echo", input_model=EchoInput, handler=cancelled
        )
    ])

    with pytest.raises(asyncio.CancelledError):
        await registry.dispatch("echo", {"text": "x"})


def test_duplicate_registration_rejected(registry: ToolRegistry) -> None:
    with pytest.raises(ValueError, match="already registered"):
        registry.register(
            ToolDefinition(
                name="echo", description="Again", input_model=EchoInput, handler=echo
            )
        )


def test_tool_definitions_are_flat_function_schemas(registry: ToolRegistry) -> None:
    definitions = registry.get_tool_definitions()

    assert len(definitions) == 1
    function = definitions[0]["function"]
    assert definitions[0]["type"] == "function"
    assert function["name"] == "echo"
    assert function["description"] == "Echo text back"
    parameters = function["parameters"]
    assert parameters["type"] == "object"
    assert parameters["required"] == ["text"]
    assert parameters["properties"]["text"] == {
        "type": "string",
        "description": "Text to echo",
    }
    # Optional fields are flattened from anyOf[string, null]
    assert parameters["properties"]["suffix"]["type"] == "string"
    assert "anyOf" not in parameters["properties"]["suffix"]


def test_default_registry_exposes_review_tools(app_config: AppConfig) -> None:
    registry = build_default_registry(app_config)

    assert registry.list_names() == [
        "get_file_changes",
        "read_file",
        "analyze_code_quality",
        "generate_commit_message",
        "write_markdown_file",
    ]
    assert len(registry) == 5
    assert "read_file" in registry

    definitions = {
        d["function"]["name"]: d["function"]["parameters"]
        for d in registry.get_tool_definitions()
    }
    assert definitions["generate_commit_message"]["properties"]["type"]["enum"] == [
        "feat",
        "fix",
        "docs",
        "style",
        "refactor",
        "test",
        "chore",
    ]
    assert definitions["write_markdown_file"]["required"] == ["content", "filename"]
    assert definitions["analyze_code_quality"]["required"] == ["code_content"]
    assert definitions["get_file_changes"]["required"] == ["root_dir"]


@pytest.mark.asyncio
async def test_commit_type_outside_enum_rejected(app_config: AppConfig) -> None:
    registry = build_default_registry(app_config)

    outcome = await registry.dispatch(
        "generate_commit_message", {"changes": "x", "type": "breaking"}
    )

    assert isinstance(outcome, ToolValidationError)
    assert outcome.errors[0]["loc"] == "type"


@pytest.mark.asyncio
async def test_empty_root_dir_rejected(app_config: AppConfig) -> None:
    registry = build_default_registry(app_config)

    outcome = await registry.dispatch("get_file_changes", {"root_dir": ""})

    assert isinstance(outcome, ToolValidationError)
