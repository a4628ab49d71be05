"""Events published by a running turn, consumed by the UI loop.

A turn emits any number of TextChunk / ToolMessage / ThoughtMessage /
ConfirmationRequest events followed by exactly one terminal event
(Complete or Error).
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Union

from .data_structures import Message


@dataclass(frozen=True)
class TextChunk:
    """A fragment of the model's visible answer."""

    text: str


@dataclass(frozen=True)
class ToolMessage:
    """A tool call finished, failed, or was denied."""

    message: Message


@dataclass(frozen=True)
class ThoughtMessage:
    """A reasoning fragment from a thinking model."""

    message: Message


@dataclass(frozen=True)
class ConfirmationRequest:
    """Asks the user whether a tool call may run.

    The background turn waits on ``reply``; the UI answers through
    ``approve`` / ``deny``. Answering twice, or after the request expired,
    has no effect.
    """

    tool_name: str
    arguments: dict[str, Any]
    reply: asyncio.Future = field(compare=False, repr=False)

    @property
    def done(self) -> bool:
        return self.reply.done()

    def resolve(self, approved: bool) -> bool:
        """Deliver the answer; returns False if the request was already settled."""
        if self.reply.done():
            return False
        self.reply.set_result(approved)
        return True

    def approve(self) -> bool:
        return self.resolve(True)

    def deny(self) -> bool:
        return self.resolve(False)

    def expire(self) -> None:
        """Settle the request without an answer (timeout or cancellation)."""
        if not self.reply.done():
            self.reply.cancel()


@dataclass(frozen=True)
class Complete:
    """The turn ended normally or was cancelled.

    Attributes:
        messages: Messages produced by the turn (empty when cancelled)
        cancelled: True when the user aborted the turn
    """

    messages: tuple[Message, ...] = ()
    cancelled: bool = False


@dataclass(frozen=True)
class Error:
    """The turn was aborted by a transport failure or timeout."""

    message: str


StreamEvent = Union[TextChunk, ToolMessage, ThoughtMessage, ConfirmationRequest, Complete, Error]

TERMINAL_EVENTS = (Complete, Error)


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, TERMINAL_EVENTS)
