"""
The review agent loop.

A session sends the conversation and the tool definitions to the model,
streams text back to the caller, executes any tool calls the model requests,
appends their outcomes and repeats, until the model answers without tool
calls or the step budget runs out.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .llm import (
    AssistantMessage,
    LLMStreamEvent,
    SystemMessage,
    ToolCallItem,
    ToolMessage,
    UserMessage,
)
from .llm.base import LLMProviderError, StreamTransportError, stream_error_for
from .prompts import SYSTEM_PROMPT

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .llm import LLMInterface, LLMMessage
    from .tools import ToolOutcome, ToolRegistry

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    AWAITING_MODEL = "awaiting_model"
    STREAMING_OUTPUT = "streaming_output"
    EXECUTING_TOOLS = "executing_tools"
    TERMINATED = "terminated"


class TerminationReason(enum.Enum):
    COMPLETED = "completed"
    BUDGET_EXHAUSTED = "budget_exhausted"
    CANCELLED = "cancelled"


@dataclass
class ProcessingServiceConfig:
    """Configuration specific to a ProcessingService instance."""

    system_prompt: str = SYSTEM_PROMPT
    max_steps: int = 10
    tool_choice: str = "auto"

    def __post_init__(self) -> None:
        if self.max_steps < 1:
            raise ValueError("max_steps must be at least 1")


@dataclass
class Session:
    """
    State of one agent invocation.

    The conversation is an append-only tuple; ``step`` counts completed tool
    rounds.
    """

    conversation: tuple[LLMMessage, ...]
    step: int = 0
    state: SessionState = SessionState.AWAITING_MODEL
    termination_reason: TerminationReason | None = None

    def append(self, *messages: LLMMessage) -> None:
        self.conversation = (*self.conversation, *messages)

    def terminate(self, reason: TerminationReason) -> None:
        self.state = SessionState.TERMINATED
        self.termination_reason = reason


@dataclass
class SessionResult:
    """Outcome of a session run to completion."""

    text: str
    termination_reason: TerminationReason
    steps: int
    conversation: tuple[LLMMessage, ...] = field(default_factory=tuple)


class ProcessingService:
    """
    Drives the model through a bounded tool-calling loop.

    Each call to ``process_prompt_stream`` or ``run`` owns a fresh ``Session``;
    nothing is shared between invocations.
    """

    def __init__(
        self,
        llm_client: LLMInterface,
        registry: ToolRegistry,
        config: ProcessingServiceConfig | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.registry = registry
        self.service_config = config or ProcessingServiceConfig()

    @property
    def max_steps(self) -> int:
        return self.service_config.max_steps

    def new_session(self, prompt: str) -> Session:
        return Session(
            conversation=(
                SystemMessage(content=self.service_config.system_prompt),
                UserMessage(content=prompt),
            )
        )

    def process_prompt_stream(self, prompt: str) -> AsyncIterator[LLMStreamEvent]:
        """Run a new session for ``prompt``, yielding events as they are produced."""
        return self.process_session_stream(self.new_session(prompt))

    async def process_session_stream(
        self, session: Session
    ) -> AsyncIterator[LLMStreamEvent]:
        """
        Drive ``session`` until it terminates.

        Yields ``content`` events as the model streams text, ``tool_call``
        events as requests arrive, one ``tool_result`` event per executed call
        (in request order), and a final ``done`` event whose metadata carries
        ``termination_reason`` and ``steps``.

        Raises:
            StreamTransportError: The model stream failed; the session is
                abandoned without retry.
        """
        tools = self.registry.get_tool_definitions()
        logger.debug(f"Starting session with {len(tools)} tools, budget {self.max_steps}")

        try:
            while True:
                session.state = SessionState.AWAITING_MODEL
                logger.debug(
                    f"Requesting model turn (step {session.step}/{self.max_steps})"
                )

                text_chunks: list[str] = []
                tool_calls: list[ToolCallItem] = []
                async for event in self._stream_model_turn(session, tools):
                    if event.type == "content" and event.content:
                        session.state = SessionState.STREAMING_OUTPUT
                        text_chunks.append(event.content)
                        yield event
                    elif event.type == "tool_call" and event.tool_call:
                        tool_calls.append(event.tool_call)
                        yield event
                    elif event.type == "done":
                        logger.debug(f"Model turn done: {event.metadata}")

                content = "".join(text_chunks) if text_chunks else None
                session.append(
                    AssistantMessage(
                        content=content if content is not None or tool_calls else "",
                        tool_calls=tool_calls or None,
                    )
                )

                if not tool_calls:
                    logger.info("Model turn finished with no tool calls.")
                    session.terminate(TerminationReason.COMPLETED)
                    break

                session.state = SessionState.EXECUTING_TOOLS
                tool_messages = await self._execute_tool_calls(tool_calls)
                session.append(*tool_messages)
                for message in tool_messages:
                    yield LLMStreamEvent(
                        type="tool_result",
                        tool_call_id=message.tool_call_id,
                        tool_result=message.content,
                        metadata={"tool_name": message.name, "is_error": message.is_error},
                    )

                session.step += 1
                if session.step >= self.max_steps:
                    logger.warning(
                        f"Reached maximum steps ({self.max_steps}); stopping without a further model call."
                    )
                    session.terminate(TerminationReason.BUDGET_EXHAUSTED)
                    break
        except (asyncio.CancelledError, GeneratorExit):
            logger.info(f"Session cancelled at step {session.step}")
            session.terminate(TerminationReason.CANCELLED)
            raise
        except StreamTransportError:
            session.state = SessionState.TERMINATED
            raise

        yield LLMStreamEvent(
            type="done",
            metadata={
                "termination_reason": session.termination_reason.value,
                "steps": session.step,
            },
        )

    async def _stream_model_turn(
        self, session: Session, tools: list[dict[str, Any]]
    ) -> AsyncIterator[LLMStreamEvent]:
        """Relay one model turn, turning stream failures into StreamTransportError."""
        try:
            async for event in self.llm_client.generate_response_stream(
                messages=list(session.conversation),
                tools=tools or None,
                tool_choice=self.service_config.tool_choice if tools else "none",
            ):
                if event.type == "error":
                    metadata = event.metadata or {}
                    logger.error(f"Stream error: {event.error}")
                    raise stream_error_for(
                        event.error or "Unknown streaming error",
                        provider=str(metadata.get("provider", "unknown")),
                        model=str(metadata.get("model", "unknown")),
                        error_type=str(metadata.get("error_type", "unknown")),
                    )
                yield event
        except LLMProviderError:
            raise
        except Exception as e:
            logger.error(f"Error in LLM streaming: {e}", exc_info=True)
            raise StreamTransportError(
                f"LLM streaming failed: {e}", provider="unknown", model="unknown"
            ) from e

    async def _execute_tool_calls(
        self, tool_calls: list[ToolCallItem]
    ) -> list[ToolMessage]:
        """Dispatch all calls of a turn concurrently; results keep request order."""
        logger.info(
            f"Executing {len(tool_calls)} tool call(s): "
            f"{[tc.function.name for tc in tool_calls]}"
        )
        outcomes = await asyncio.gather(
            *(
                self.registry.dispatch(tc.function.name, tc.function.arguments)
                for tc in tool_calls
            )
        )
        return [
            self._tool_message(tool_call, outcome)
            for tool_call, outcome in zip(tool_calls, outcomes, strict=True)
        ]

    @staticmethod
    def _tool_message(tool_call: ToolCallItem, outcome: ToolOutcome) -> ToolMessage:
        return ToolMessage(
            tool_call_id=tool_call.id,
            name=tool_call.function.name,
            content=outcome.to_llm_content(),
            is_error=outcome.is_error,
        )

    async def run(self, prompt: str) -> SessionResult:
        """Run a session to completion and collect its text output."""
        session = self.new_session(prompt)
        text_chunks: list[str] = []
        async for event in self.process_session_stream(session):
            if event.type == "content" and event.content:
                text_chunks.append(event.content)

        reason = session.termination_reason
        if reason is None:
            raise RuntimeError("Session stream ended without a termination reason")
        return SessionResult(
            text="".join(text_chunks),
            termination_reason=reason,
            steps=session.step,
            conversation=session.conversation,
        )
