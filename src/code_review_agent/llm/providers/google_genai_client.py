"""
Direct Google Generative AI (Gemini) implementation for LLM interactions.
"""

import base64
import json
import logging
import os
import uuid
from collections.abc import AsyncIterator, Sequence
from typing import Any

from google import genai
from google.genai import types

from code_review_agent.llm import (
    LLMStreamEvent,
    ToolCallFunction,
    ToolCallItem,
    _format_messages_for_debug,
)
from code_review_agent.llm.messages import (
    AssistantMessage,
    LLMMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

_TOOL_CHOICE_MODES = {
    "auto": types.FunctionCallingConfigMode.AUTO,
    "required": types.FunctionCallingConfigMode.ANY,
    "none": types.FunctionCallingConfigMode.NONE,
}


def _encode_thought_signature(raw_value: bytes | None) -> dict[str, Any] | None:
    """Wrap an opaque thought signature in JSON-safe provider metadata."""
    if not raw_value:
        return None
    return {
        "provider": "google",
        "thought_signature": base64.b64encode(raw_value).decode("ascii"),
    }


def _decode_thought_signature(provider_metadata: dict[str, Any] | None) -> bytes | None:
    if not provider_metadata or provider_metadata.get("provider") != "google":
        return None
    encoded = provider_metadata.get("thought_signature")
    if not encoded:
        return None
    return base64.b64decode(encoded)


def _categorize_error(error_message: str) -> str:
    """Map a provider error message onto a coarse error category."""
    lowered = error_message.lower()
    if "401" in error_message or "api key" in lowered:
        return "authentication"
    if "429" in error_message or "quota" in lowered:
        return "rate_limit"
    if "404" in error_message or "not found" in lowered:
        return "model_not_found"
    if "token" in lowered and "limit" in lowered:
        return "context_length"
    if "invalid" in lowered or "400" in error_message:
        return "invalid_request"
    if "connection" in lowered or "network" in lowered:
        return "connection"
    if "timeout" in lowered:
        return "timeout"
    return "unknown"


class GoogleGenAIClient:
    """Direct Google Generative AI implementation."""

    def __init__(
        self,
        api_key: str,
        model: str,
        model_parameters: dict[str, dict[str, object]] | None = None,
        debug_messages: bool | None = None,
        **kwargs: Any,  # noqa: ANN401 # Accepts arbitrary Google GenAI API parameters
    ) -> None:
        """
        Initialize Google GenAI client.

        Args:
            api_key: Google API key
            model: Model identifier (e.g., "gemini-2.5-flash")
            model_parameters: Pattern-based parameters, keyed by a substring of the model name
            debug_messages: Enable detailed message logging. If None, reads from DEBUG_LLM_MESSAGES env var.
            **kwargs: Default parameters for generation
        """
        self.client = genai.Client(api_key=api_key)
        # Google API requires 'models/' prefix
        self.model_name = (
            f"models/{model}" if not model.startswith("models/") else model
        )
        self.model_parameters = model_parameters or {}
        self.default_kwargs = kwargs

        if debug_messages is None:
            self._debug_messages = os.getenv("DEBUG_LLM_MESSAGES", "false").lower() in {
                "true",
                "1",
                "yes",
            }
        else:
            self._debug_messages = debug_messages

        logger.info(
            f"GoogleGenAIClient initialized for model: {model} with default kwargs: {kwargs}, "
            f"model-specific parameters: {model_parameters}, "
            f"debug_messages: {self._debug_messages}"
        )

    @property
    def should_debug_messages(self) -> bool:
        """Whether to log detailed message debugging information."""
        return self._debug_messages

    def _get_model_specific_params(self, model: str) -> dict[str, object]:
        """Get parameters for a specific model based on pattern matching."""
        params: dict[str, object] = {}
        for pattern, pattern_params in self.model_parameters.items():
            if pattern in model:
                params.update(pattern_params)
                logger.debug(
                    f"Applied parameters for pattern '{pattern}': {pattern_params}"
                )
        return params

    def _convert_messages_to_genai_format(
        self,
        messages: Sequence[LLMMessage],
    ) -> tuple[str | None, list[types.Content]]:
        """Split out the system instruction and convert the rest to SDK Content objects."""
        system_parts: list[str] = []
        contents: list[types.Content] = []

        for msg in messages:
            if isinstance(msg, SystemMessage):
                system_parts.append(msg.content)

            elif isinstance(msg, UserMessage):
                contents.append(
                    types.Content(role="user", parts=[types.Part(text=msg.content)])
                )

            elif isinstance(msg, AssistantMessage):
                assistant_parts: list[types.Part] = []
                if msg.content:
                    assistant_parts.append(types.Part(text=msg.content))

                for tc in msg.tool_calls or []:
                    if tc.type != "function":
                        continue
                    args = tc.function.arguments
                    if isinstance(args, str):
                        try:
                            args = json.loads(args)
                        except json.JSONDecodeError:
                            args = {}
                    if not isinstance(args, dict):
                        args = {}
                    part = types.Part(
                        function_call=types.FunctionCall(
                            name=tc.function.name, args=args, id=tc.id
                        )
                    )
                    # Pass the signature back exactly as received, or omit it
                    thought_signature = _decode_thought_signature(tc.provider_metadata)
                    if thought_signature:
                        part.thought_signature = thought_signature
                    assistant_parts.append(part)

                if assistant_parts:
                    contents.append(types.Content(role="model", parts=assistant_parts))

            elif isinstance(msg, ToolMessage):
                try:
                    response_data = json.loads(msg.content)
                except json.JSONDecodeError:
                    response_data = {"result": msg.content}
                # SDK requires response to be a dict, not a primitive value
                if not isinstance(response_data, dict):
                    response_data = {"result": response_data}

                contents.append(
                    types.Content(
                        role="function",
                        parts=[
                            types.Part(
                                function_response=types.FunctionResponse(
                                    id=msg.tool_call_id,
                                    name=msg.name,
                                    response=response_data,
                                )
                            )
                        ],
                    )
                )

        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def _convert_tools_to_genai_format(self, tools: list[dict[str, Any]]) -> list[types.Tool]:
        """Convert OpenAI-style tools to Gemini format."""
        function_declarations = []

        for tool in tools:
            if tool.get("type") != "function":
                continue

            func_def = tool.get("function", {})
            params = func_def.get("parameters", {})

            google_properties = {}
            for prop_name, prop_def in params.get("properties", {}).items():
                google_properties[prop_name] = types.Schema(
                    type=prop_def.get("type", "string").upper(),
                    description=prop_def.get("description", ""),
                    enum=prop_def.get("enum"),
                )

            function_declarations.append(
                types.FunctionDeclaration(
                    name=func_def.get("name"),
                    description=func_def.get("description", ""),
                    parameters=types.Schema(
                        type=types.Type.OBJECT,
                        properties=google_properties,
                        required=params.get("required", []),
                    ),
                )
            )

        if function_declarations:
            return [types.Tool(function_declarations=function_declarations)]
        return []

    def _build_generation_config(
        self,
        system_instruction: str | None,
        tools: list[dict[str, Any]] | None,
        tool_choice: str | None,
    ) -> types.GenerateContentConfig:
        config_params = {
            **self.default_kwargs,
            **self._get_model_specific_params(self.model_name),
        }

        generation_config = types.GenerateContentConfig()
        if system_instruction:
            generation_config.system_instruction = system_instruction
        if "temperature" in config_params:
            generation_config.temperature = config_params["temperature"]
        if "max_tokens" in config_params:
            generation_config.max_output_tokens = config_params["max_tokens"]
        if "top_p" in config_params:
            generation_config.top_p = config_params["top_p"]
        if "top_k" in config_params:
            generation_config.top_k = config_params["top_k"]

        genai_tools = self._convert_tools_to_genai_format(tools) if tools else []
        if genai_tools:
            generation_config.tools = genai_tools
            # Function calls are executed by the orchestrator, never by the SDK
            generation_config.automatic_function_calling = (
                types.AutomaticFunctionCallingConfig(disable=True)
            )
            mode = _TOOL_CHOICE_MODES.get(tool_choice or "auto")
            if mode is not None:
                generation_config.tool_config = types.ToolConfig(
                    function_calling_config=types.FunctionCallingConfig(mode=mode)
                )

        return generation_config

    def generate_response_stream(
        self,
        messages: Sequence[LLMMessage],
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str | None = "auto",
    ) -> AsyncIterator[LLMStreamEvent]:
        """Generate streaming response using Google GenAI."""
        return self._generate_response_stream(messages, tools, tool_choice)

    async def _generate_response_stream(
        self,
        messages: Sequence[LLMMessage],
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str | None = "auto",
    ) -> AsyncIterator[LLMStreamEvent]:
        """Internal async generator for streaming responses using Google GenAI."""
        try:
            if self.should_debug_messages:
                logger.info(
                    f"=== LLM Streaming Request to {self.model_name} ===\n"
                    f"{_format_messages_for_debug(messages, tools, tool_choice)}"
                )

            system_instruction, contents = self._convert_messages_to_genai_format(
                messages
            )
            generation_config = self._build_generation_config(
                system_instruction, tools, tool_choice
            )

            stream_response = await self.client.aio.models.generate_content_stream(
                model=self.model_name,
                contents=contents,
                config=generation_config,
            )

            accumulated_tool_calls: list[ToolCallItem] = []

            async for chunk in stream_response:
                for candidate in chunk.candidates or []:
                    if not candidate.content or not candidate.content.parts:
                        continue
                    for part in candidate.content.parts:
                        # Thought summaries are not part of the answer
                        if getattr(part, "thought", None):
                            continue

                        if part.text:
                            yield LLMStreamEvent(type="content", content=part.text)

                        func_call = part.function_call
                        if func_call and func_call.name:
                            call_id = (
                                func_call.id
                                if isinstance(func_call.id, str) and func_call.id
                                else f"call_{uuid.uuid4().hex[:24]}"
                            )
                            accumulated_tool_calls.append(
                                ToolCallItem(
                                    id=call_id,
                                    type="function",
                                    function=ToolCallFunction(
                                        name=func_call.name,
                                        arguments=dict(func_call.args or {}),
                                    ),
                                    provider_metadata=_encode_thought_signature(
                                        part.thought_signature
                                    ),
                                )
                            )

            # Tool calls are emitted once the model has finished the turn
            for tool_call in accumulated_tool_calls:
                yield LLMStreamEvent(
                    type="tool_call", tool_call=tool_call, tool_call_id=tool_call.id
                )

            yield LLMStreamEvent(type="done", metadata={})

        except Exception as e:
            error_message = str(e)
            error_type = _categorize_error(error_message)
            logger.error(
                f"Google GenAI streaming error ({error_type}): {e}", exc_info=True
            )
            yield LLMStreamEvent(
                type="error",
                error=error_message,
                metadata={
                    "error_id": str(e.__class__.__name__),
                    "error_type": error_type,
                    "provider": "google",
                    "model": self.model_name,
                },
            )
