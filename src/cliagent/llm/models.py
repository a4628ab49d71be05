"""Provider-neutral conversation and response models.

The engine speaks only in these types; providers translate them to and from
their own wire formats.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FinishReason(str, Enum):
    """Why the model stopped producing a candidate."""

    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    MALFORMED_FUNCTION_CALL = "MALFORMED_FUNCTION_CALL"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Any) -> "FinishReason | None":
        """Normalize a provider finish reason (enum, string or None)."""
        if value is None:
            return None
        name = getattr(value, "name", None) or str(value)
        name = name.rsplit(".", 1)[-1].upper()
        if name in ("", "FINISH_REASON_UNSPECIFIED"):
            return None
        try:
            return cls(name)
        except ValueError:
            return cls.OTHER


class FunctionCall(BaseModel):
    """A structured request from the model to run a local tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    """The outcome of a tool call, sent back to the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    response: dict[str, Any] = Field(default_factory=dict)


class Part(BaseModel):
    """One piece of a content block.

    Exactly one of ``text``, ``function_call`` or ``function_response`` is
    expected to be set. ``thought`` marks reasoning text that is shown to the
    user but never sent back to the model.
    """

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    thought: bool = False
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None
    thought_signature: bytes | None = None


class Content(BaseModel):
    """A role-tagged block of the conversation."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model", "tool"] = Field(
        description="Block author: 'user', 'model', or 'tool' for folded tool results"
    )
    parts: list[Part] = Field(default_factory=list)

    @classmethod
    def user_text(cls, text: str) -> "Content":
        return cls(role="user", parts=[Part(text=text)])


class Candidate(BaseModel):
    """One candidate inside a streamed response fragment."""

    model_config = ConfigDict(frozen=True)

    parts: list[Part] = Field(default_factory=list)
    finish_reason: FinishReason | None = None


class ResponseFragment(BaseModel):
    """One partial unit of a streamed model response."""

    model_config = ConfigDict(frozen=True)

    candidates: list[Candidate] = Field(default_factory=list)


class ToolDeclaration(BaseModel):
    """A tool as advertised to the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class GenerationOptions(BaseModel):
    """Generation settings for a single streaming call."""

    model_config = ConfigDict(frozen=True)

    max_output_tokens: int = 8192
    temperature: float = 0.7
    top_k: float = 40
    top_p: float = 0.95
    enable_thinking: bool = False
    thinking_budget: int = -1
    system_instruction: str | None = None
