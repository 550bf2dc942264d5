"""Tool registry: declares the tools offered to the model and dispatches calls.

Input is validated against the tool's pydantic model before the handler runs.
Every dispatch resolves to exactly one of ``ToolResult``, ``ToolValidationError``
or ``ToolExecutionError``; failures are returned, not raised, so that the
orchestrator can hand them back to the model.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from code_review_agent.tools.types import (
    ToolDefinition,
    ToolExecutionError,
    ToolOutcome,
    ToolResult,
    ToolValidationError,
)

logger = logging.getLogger(__name__)


def _inline_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Reduce a pydantic JSON schema to the flat shape function-calling APIs accept."""
    properties: dict[str, Any] = {}
    for prop_name, prop_def in schema.get("properties", {}).items():
        prop = dict(prop_def)
        # Optional fields come out as anyOf[<type>, null]
        any_of = prop.pop("anyOf", None)
        if any_of:
            non_null = [option for option in any_of if option.get("type") != "null"]
            if non_null:
                prop.update(non_null[0])
        prop.pop("title", None)
        prop.pop("default", None)
        properties[prop_name] = prop

    return {
        "type": "object",
        "properties": properties,
        "required": list(schema.get("required", [])),
    }


class ToolRegistry:
    """Holds tool definitions, in registration order, keyed by name."""

    def __init__(self, definitions: list[ToolDefinition] | None = None) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    def register(self, definition: ToolDefinition) -> None:
        if definition.name in self._tools:
            raise ValueError(f"Tool '{definition.name}' is already registered")
        self._tools[definition.name] = definition
        logger.debug(f"Registered tool '{definition.name}'")

    def list_names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get_tool_definitions(self) -> list[dict[str, Any]]:
        """Return OpenAI-style function definitions for every registered tool."""
        return [
            {
                "type": "function",
                "function": {
                    "name": definition.name,
                    "description": definition.description,
                    "parameters": _inline_schema(
                        definition.input_model.model_json_schema()
                    ),
                },
            }
            for definition in self._tools.values()
        ]

    async def dispatch(
        self,
        name: str,
        raw_input: dict[str, Any] | str | None,
    ) -> ToolOutcome:
        """
        Validate ``raw_input`` against the named tool's schema and run its handler.

        Args:
            name: Tool name as requested by the model.
            raw_input: Arguments as a dict, or as a JSON-encoded object.

        Returns:
            ToolResult on success, ToolValidationError when the tool is unknown
            or the input is malformed (the handler is not invoked), or
            ToolExecutionError when the handler raised.
        """
        definition = self._tools.get(name)
        if definition is None:
            logger.warning(f"Model requested unknown tool '{name}'")
            return ToolValidationError(
                tool_name=name,
                message=f"Unknown tool '{name}'. Available tools: {', '.join(self._tools)}",
            )

        arguments: Any = raw_input if raw_input is not None else {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                logger.warning(f"Tool '{name}' received unparseable arguments: {e}")
                return ToolValidationError(
                    tool_name=name, message=f"Arguments are not valid JSON: {e}"
                )
        if not isinstance(arguments, dict):
            return ToolValidationError(
                tool_name=name,
                message=f"Arguments must be a JSON object, got {type(arguments).__name__}",
            )

        try:
            validated = definition.input_model.model_validate(arguments)
        except ValidationError as e:
            errors = [
                {
                    "loc": ".".join(str(part) for part in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            logger.warning(f"Tool '{name}' input failed validation: {errors}")
            return ToolValidationError(
                tool_name=name,
                message=f"Invalid input for tool '{name}'",
                errors=errors,
            )

        logger.info(f"Executing tool '{name}' with args: {arguments}")
        try:
            data = await definition.handler(**validated.model_dump())
        except Exception as e:
            logger.error(f"Error executing tool '{name}': {e}", exc_info=True)
            return ToolExecutionError(
                tool_name=name,
                message=str(e) or e.__class__.__name__,
                error_type=e.__class__.__name__,
            )

        logger.info(f"Tool '{name}' executed successfully.")
        return ToolResult(tool_name=name, data=data)
