"""Conversation engine: drives one user turn to completion.

One turn may call the model several times. Each call streams fragments whose
parts are handled in a fixed order (thoughts, tool calls, text); tool results
are folded back into the conversation and the model is called again until it
answers without requesting tools.
"""

import asyncio
from collections.abc import Callable

from ..llm.base import ModelClient
from ..llm.catalog import supports_thinking
from ..llm.models import (
    Content,
    FinishReason,
    FunctionResponse,
    GenerationOptions,
    Part,
)
from .data_structures import AgentConfig, Message, MessageKind, TokenUsage, ToolCall
from .errors import AgentError, EmptyResponseError, TransportError
from .events import StreamEvent, TextChunk, ThoughtMessage, ToolMessage
from .pipeline import ConfirmationGate, ToolExecutor, format_tool_message
from .tools import ToolRegistry

EventSink = Callable[[StreamEvent], None]

FINISH_REASON_MESSAGES = {
    FinishReason.MAX_TOKENS: "[Response truncated due to length limit]",
    FinishReason.SAFETY: "[Response blocked by safety filters]",
}


class ConversationEngine:
    """Owns the conversation and runs turns against a model client.

    Hidden design decisions:
    - Conversation block layout (user / model / tool)
    - Per-response tool-call deduplication
    - Token accounting (counted before and after each model call)
    - Which stream failures abort a turn and which become messages

    The engine is not safe for concurrent turns; callers run at most one
    ``process_turn`` at a time.
    """

    def __init__(
        self,
        client: ModelClient,
        registry: ToolRegistry,
        model: str | None = None,
        config: AgentConfig | None = None,
    ):
        """Initialize the engine.

        Args:
            client: Model client used for streaming and token counting
            registry: Tools the model may call
            model: Model id (defaults to the client's default model)
            config: Generation settings
        """
        self._client = client
        self._registry = registry
        self._executor = ToolExecutor(registry)
        self._config = config or AgentConfig()
        self.model = model or client.default_model
        self._conversation: list[Content] = []
        self._usage = TokenUsage()
        self._debug_callback: Callable[[str, str, str], None] | None = None

    @property
    def conversation(self) -> list[Content]:
        """Copy of the conversation blocks."""
        return list(self._conversation)

    @property
    def token_usage(self) -> TokenUsage:
        """Snapshot of the cumulative token usage."""
        return self._usage.model_copy()

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        """Set the debug callback for detailed execution logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'

        The callback is propagated to the tool pipeline, the tools and the
        model client when it accepts one.
        """
        self._debug_callback = callback
        self._executor.set_debug_callback(callback)
        self._registry.set_debug_callback(callback)
        if hasattr(self._client, "set_debug_callback"):
            self._client.set_debug_callback(callback)

    def _debug(self, message: str, level: str = "debug") -> None:
        if self._debug_callback:
            self._debug_callback(level, "Engine", message)

    def clear_conversation(self) -> None:
        """Forget the conversation and reset token counters."""
        self._conversation.clear()
        self._usage.reset()
        self._debug("Conversation cleared", level="info")

    def _options(self, enable_thinking: bool) -> GenerationOptions:
        thinking = enable_thinking and supports_thinking(self.model)
        if enable_thinking and not thinking:
            self._debug(f"Thinking not supported by {self.model}; disabled for this call")
        return GenerationOptions(
            max_output_tokens=self._config.max_output_tokens,
            temperature=self._config.temperature,
            top_k=self._config.top_k,
            top_p=self._config.top_p,
            enable_thinking=thinking,
            thinking_budget=self._config.thinking_budget,
            system_instruction=self._config.system_prompt,
        )

    async def _count_tokens(self, contents: list[Content]) -> int:
        """Best-effort token count; failures count as zero."""
        try:
            return await self._client.count_tokens(self.model, contents)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._debug(f"Token count failed: {e}")
            return 0

    async def process_turn(
        self,
        user_input: str,
        emit: EventSink | None = None,
        confirm: ConfirmationGate | None = None,
        enable_thinking: bool = False,
    ) -> list[Message]:
        """Run one user turn to completion.

        Args:
            user_input: Text the user submitted
            emit: Receives TextChunk, ToolMessage and ThoughtMessage events as
                they happen
            confirm: Optional gate awaited before every tool execution
            enable_thinking: Request thought parts from models that support them

        Returns:
            Messages produced by the turn: thoughts, tool messages, error
            messages for abnormal finish reasons and the final Agent message

        Raises:
            TransportError: If the model stream fails or yields no candidate
            asyncio.CancelledError: If the turn is cancelled
        """

        def publish(event: StreamEvent) -> None:
            if emit is not None:
                emit(event)

        self._conversation.append(Content.user_text(user_input))
        messages: list[Message] = []
        declarations = self._registry.declarations()
        options = self._options(enable_thinking)
        round_number = 0

        while True:
            round_number += 1
            self._usage.add_input(await self._count_tokens(self._conversation))
            self._debug(
                f"Round {round_number}: calling {self.model} with "
                f"{len(self._conversation)} blocks"
            )

            model_parts: list[Part] = []
            tool_results: list[Part] = []
            text_parts: list[str] = []
            seen_calls: set[str] = set()
            reported_reasons: set[FinishReason] = set()
            saw_candidate = False

            try:
                stream = self._client.stream_generate(
                    self.model, list(self._conversation), declarations, options
                )
                async for fragment in stream:
                    if not fragment.candidates:
                        continue
                    saw_candidate = True
                    candidate = fragment.candidates[0]

                    reason = candidate.finish_reason
                    if reason not in (None, FinishReason.STOP) and reason not in reported_reasons:
                        reported_reasons.add(reason)
                        text = FINISH_REASON_MESSAGES.get(
                            reason, f"[Response ended early: {reason.value}]"
                        )
                        self._debug(f"Finish reason {reason.value}", level="warning")
                        messages.append(Message(kind=MessageKind.AGENT, content=text, is_error=True))

                    for part in candidate.parts:
                        if part.thought:
                            if part.text:
                                thought = Message(
                                    kind=MessageKind.THOUGHT,
                                    content=f"💭 Thinking: {part.text}",
                                )
                                messages.append(thought)
                                publish(ThoughtMessage(thought))
                            continue

                        if part.function_call is not None:
                            call = ToolCall(
                                tool_name=part.function_call.name,
                                arguments=dict(part.function_call.args),
                            )
                            if call.dedup_key in seen_calls:
                                self._debug(f"Skipping duplicate call {call.dedup_key}")
                                continue
                            seen_calls.add(call.dedup_key)
                            model_parts.append(part)

                            outcome = await self._executor.execute(call, confirm)
                            tool_message = format_tool_message(call, outcome)
                            messages.append(tool_message)
                            publish(ToolMessage(tool_message))
                            tool_results.append(Part(
                                function_response=FunctionResponse(
                                    name=call.tool_name,
                                    response=outcome.to_response(),
                                )
                            ))
                            continue

                        if part.text:
                            model_parts.append(part)
                            text_parts.append(part.text)
                            publish(TextChunk(part.text))
                        elif part.thought_signature is not None:
                            # Signature-only part; it must be echoed back on the next call
                            model_parts.append(part)
            except (asyncio.CancelledError, AgentError):
                raise
            except Exception as e:
                self._debug(f"Stream failed: {type(e).__name__}: {e}", level="error")
                raise TransportError(str(e) or type(e).__name__) from e

            if not saw_candidate:
                self._debug("Stream ended without any candidate", level="error")
                raise EmptyResponseError()

            # No await between a call block and its response block
            model_block = Content(role="model", parts=model_parts) if model_parts else None
            if model_block is not None:
                self._conversation.append(model_block)
            if tool_results:
                self._conversation.append(Content(role="tool", parts=tool_results))
                self._debug(f"Folded {len(tool_results)} tool result(s) into the conversation")
            if model_block is not None:
                self._usage.add_output(await self._count_tokens([model_block]))

            if tool_results:
                continue

            answer = "".join(text_parts)
            if answer:
                messages.append(Message(kind=MessageKind.AGENT, content=answer))
            self._debug(f"Turn finished after {round_number} round(s)", level="info")
            return messages
