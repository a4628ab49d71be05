"""Data structures shared by the conversation engine and its consumers.

Messages are what the engine reports to the user; the conversation itself is
kept as ``cliagent.llm.models.Content`` blocks.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageKind(str, Enum):
    """Kind of a message produced during a turn."""

    USER = "user"
    AGENT = "agent"
    TOOL = "tool"
    THOUGHT = "thought"
    TEXT_FRAGMENT = "text_fragment"


class Message(BaseModel):
    """An immutable message produced by the engine.

    Attributes:
        kind: What the message is
        content: Display text
        is_error: Whether the message reports a failure
    """

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    content: str
    is_error: bool = False

    def __str__(self) -> str:
        return self.content


class TokenUsage(BaseModel):
    """Cumulative token accounting for the conversation.

    Counters only grow, except through ``reset`` when the conversation is
    cleared. The UI reads copies made with ``model_copy()``.
    """

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def add_input(self, count: int) -> None:
        if count > 0:
            self.input_tokens += count

    def add_output(self, count: int) -> None:
        if count > 0:
            self.output_tokens += count

    def reset(self) -> None:
        self.input_tokens = 0
        self.output_tokens = 0


def canonical_arguments(arguments: dict[str, Any]) -> str:
    """Serialize arguments with sorted keys so equal mappings compare equal."""
    return json.dumps(arguments, sort_keys=True, separators=(",", ":"), default=str)


class ToolCall(BaseModel):
    """A tool-call request decoded from a response fragment.

    Attributes:
        tool_name: Name of the tool to call
        arguments: Arguments for the tool call
    """

    model_config = ConfigDict(frozen=True)

    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @property
    def dedup_key(self) -> str:
        """Identity of the call within one streamed response."""
        return f"{self.tool_name}:{canonical_arguments(self.arguments)}"

    def arguments_json(self) -> str:
        return json.dumps(self.arguments, default=str)


class ToolOutcome(BaseModel):
    """Result of passing a tool call through the execution pipeline.

    Attributes:
        result: Text returned to the model (tool output, error or denial reason)
        is_error: Whether the tool failed, was unknown or got bad arguments
        denied: Whether the user (or a confirmation timeout) refused the call
    """

    model_config = ConfigDict(frozen=True)

    result: str
    is_error: bool = False
    denied: bool = False

    def to_response(self) -> dict[str, Any]:
        """Payload of the function response sent back to the model."""
        if self.denied:
            return {"error": "User denied tool execution"}
        return {"result": self.result}


class AgentConfig(BaseModel):
    """Generation settings for the conversation engine."""

    max_output_tokens: int = Field(default=8192, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: float = Field(default=40, gt=0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    thinking_budget: int = Field(
        default=-1,
        description="Thinking token budget; -1 lets the model decide"
    )
    system_prompt: str | None = None
