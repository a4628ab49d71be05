"""Conversation engine, tool pipeline and streaming bridge."""

from .bridge import StreamingBridge, TurnChannel
from .data_structures import AgentConfig, Message, MessageKind, TokenUsage, ToolCall, ToolOutcome
from .engine import ConversationEngine
from .errors import (
    AgentError,
    ConfigurationError,
    ConfirmationTimeoutError,
    EmptyResponseError,
    InvalidTransitionError,
    ToolError,
    TransportError,
)
from .events import (
    Complete,
    ConfirmationRequest,
    Error,
    StreamEvent,
    TextChunk,
    ThoughtMessage,
    ToolMessage,
)
from .pipeline import ToolExecutor
from .tools import BaseTool, ToolRegistry

__all__ = [
    "ConversationEngine",
    "StreamingBridge",
    "TurnChannel",
    "ToolExecutor",
    "BaseTool",
    "ToolRegistry",
    "AgentConfig",
    "Message",
    "MessageKind",
    "TokenUsage",
    "ToolCall",
    "ToolOutcome",
    "Complete",
    "ConfirmationRequest",
    "Error",
    "StreamEvent",
    "TextChunk",
    "ThoughtMessage",
    "ToolMessage",
    "AgentError",
    "ConfigurationError",
    "ConfirmationTimeoutError",
    "EmptyResponseError",
    "InvalidTransitionError",
    "ToolError",
    "TransportError",
]
