"""Streaming bridge between the conversation engine and the UI loop.

Each turn runs as a background asyncio task and publishes its events onto a
fresh TurnChannel. The UI drains the channels from its own timer without ever
awaiting the engine. A cancelled turn's channel is read through its terminal
event before the next turn's events are handed out.
"""

import asyncio
from collections import Counter, deque
from collections.abc import AsyncIterator, Callable
from typing import Any

from .engine import ConversationEngine
from .errors import ConfirmationTimeoutError, TransportError
from .events import (
    Complete,
    ConfirmationRequest,
    Error,
    StreamEvent,
    TextChunk,
    ThoughtMessage,
    ToolMessage,
    is_terminal,
)

DEFAULT_CONFIRMATION_TIMEOUT = 30.0
DEFAULT_TURN_TIMEOUT = 300.0

# Outstanding (published but not yet drained) events allowed per kind
DEFAULT_CAPACITIES = {"text": 100, "tool": 10, "thought": 10}


def event_kind(event: StreamEvent) -> str | None:
    """Capacity class of an event; None for events that are never dropped."""
    if isinstance(event, TextChunk):
        return "text"
    if isinstance(event, ToolMessage):
        return "tool"
    if isinstance(event, ThoughtMessage):
        return "thought"
    return None


class TurnChannel:
    """Ordered event channel for a single turn.

    Text, tool and thought events are bounded per kind: once a kind has
    ``capacity`` undrained events, further events of that kind are dropped
    and counted. Confirmation requests and the terminal event are always
    accepted. Nothing is accepted after the terminal event.
    """

    def __init__(self, capacities: dict[str, int] | None = None):
        self._capacities = dict(capacities or DEFAULT_CAPACITIES)
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        self._outstanding: Counter[str] = Counter()
        self.dropped: Counter[str] = Counter()
        self.closed = False

    def offer(self, event: StreamEvent) -> bool:
        """Publish an event without blocking.

        Returns:
            False if the event was dropped
        """
        if self.closed:
            return False
        kind = event_kind(event)
        if kind is not None:
            if self._outstanding[kind] >= self._capacities.get(kind, 0):
                self.dropped[kind] += 1
                return False
            self._outstanding[kind] += 1
        self._queue.put_nowait(event)
        if is_terminal(event):
            self.closed = True
        return True

    @property
    def exhausted(self) -> bool:
        """True once the terminal event has been published and taken."""
        return self.closed and self._queue.empty()

    def _taken(self, event: StreamEvent) -> StreamEvent:
        kind = event_kind(event)
        if kind is not None:
            self._outstanding[kind] -= 1
        return event

    def drain(self) -> list[StreamEvent]:
        """Take every event currently queued, in publish order."""
        events = []
        while not self._queue.empty():
            events.append(self._taken(self._queue.get_nowait()))
        return events

    async def get(self) -> StreamEvent:
        """Wait for the next event."""
        return self._taken(await self._queue.get())


class StreamingBridge:
    """Runs engine turns in the background and hands events to the UI.

    Hidden design decisions:
    - One turn at a time; starting a turn cancels the previous one
    - Per-kind bounded channel that drops instead of blocking the stream
    - Confirmation as a request on the channel with a one-shot reply
    - Exactly one terminal event per turn
    """

    def __init__(
        self,
        engine: ConversationEngine,
        confirmation_timeout: float | None = DEFAULT_CONFIRMATION_TIMEOUT,
        turn_timeout: float | None = DEFAULT_TURN_TIMEOUT,
        capacities: dict[str, int] | None = None,
    ):
        self._engine = engine
        self._confirmation_timeout = confirmation_timeout
        self._turn_timeout = turn_timeout
        self._capacities = capacities
        self._channels: deque[TurnChannel] = deque()
        self._task: asyncio.Task | None = None
        self._debug_callback: Callable[[str, str, str], None] | None = None

    @property
    def engine(self) -> ConversationEngine:
        return self._engine

    @property
    def channel(self) -> TurnChannel | None:
        """Channel of the most recent turn."""
        return self._channels[-1] if self._channels else None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        self._debug_callback = callback

    def _debug(self, message: str, level: str = "debug") -> None:
        if self._debug_callback:
            self._debug_callback(level, "Bridge", message)

    def start_turn(
        self,
        user_input: str,
        confirmation_required: bool = True,
        enable_thinking: bool = False,
    ) -> TurnChannel:
        """Launch a turn in the background.

        Must be called from within the running event loop.

        Returns:
            The channel the turn publishes to
        """
        if self.cancel():
            self._debug("Previous turn cancelled by a new submission", level="warning")
        while self._channels and self._channels[0].exhausted:
            self._channels.popleft()
        channel = TurnChannel(self._capacities)
        self._channels.append(channel)
        self._task = asyncio.create_task(
            self._run_turn(channel, user_input, confirmation_required, enable_thinking)
        )
        self._task.add_done_callback(lambda _task: self._settle(channel))
        return channel

    def _settle(self, channel: TurnChannel) -> None:
        # A task cancelled before its first step never reaches _run_turn's handlers
        if not channel.closed:
            channel.offer(Complete(cancelled=True))

    def cancel(self) -> bool:
        """Cancel the running turn, if any.

        Returns:
            True if a turn was running
        """
        if self.busy:
            self._task.cancel()
            return True
        return False

    def poll(self) -> list[StreamEvent]:
        """Non-blocking drain of every pending turn, oldest first.

        A later turn's events are only returned once the earlier turn's
        terminal event has been.
        """
        events: list[StreamEvent] = []
        while self._channels:
            channel = self._channels[0]
            events.extend(channel.drain())
            if not (channel.exhausted and len(self._channels) > 1):
                break
            self._channels.popleft()
        return events

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield pending events, oldest turn first, through the newest turn's terminal event."""
        while self._channels:
            channel = self._channels[0]
            while not channel.exhausted:
                yield await channel.get()
            if len(self._channels) == 1:
                return
            self._channels.popleft()

    async def shutdown(self) -> None:
        """Cancel the running turn and wait for it to settle."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    def _publish(self, channel: TurnChannel, event: StreamEvent) -> None:
        if not channel.offer(event):
            kind = event_kind(event) or type(event).__name__
            self._debug(
                f"Dropped {kind} event (total dropped: {channel.dropped[kind]})",
                level="warning",
            )

    def _make_gate(self, channel: TurnChannel):
        timeout = self._confirmation_timeout

        async def gate(tool_name: str, arguments: dict[str, Any]) -> bool:
            request = ConfirmationRequest(
                tool_name=tool_name,
                arguments=arguments,
                reply=asyncio.get_running_loop().create_future(),
            )
            self._debug(f"Awaiting confirmation for {tool_name}")
            channel.offer(request)
            try:
                return await asyncio.wait_for(asyncio.shield(request.reply), timeout)
            except asyncio.TimeoutError:
                request.expire()
                raise ConfirmationTimeoutError(tool_name, timeout) from None
            except asyncio.CancelledError:
                request.expire()
                raise

        return gate

    async def _run_turn(
        self,
        channel: TurnChannel,
        user_input: str,
        confirmation_required: bool,
        enable_thinking: bool,
    ) -> None:
        gate = self._make_gate(channel) if confirmation_required else None
        self._debug(
            f"Turn started (confirm={confirmation_required}, thinking={enable_thinking})",
            level="info",
        )
        try:
            messages = await asyncio.wait_for(
                self._engine.process_turn(
                    user_input,
                    emit=lambda event: self._publish(channel, event),
                    confirm=gate,
                    enable_thinking=enable_thinking,
                ),
                self._turn_timeout,
            )
        except asyncio.CancelledError:
            self._debug("Turn cancelled", level="info")
            channel.offer(Complete(cancelled=True))
            raise
        except asyncio.TimeoutError:
            self._debug(f"Turn timed out after {self._turn_timeout:g}s", level="error")
            channel.offer(Error(f"Error: turn timed out after {self._turn_timeout:g}s"))
        except TransportError as e:
            self._debug(f"Turn failed: {e}", level="error")
            channel.offer(Error(f"Error: {e}"))
        except Exception as e:
            self._debug(f"Unexpected failure: {type(e).__name__}: {e}", level="error")
            channel.offer(Error(f"Error: {e}"))
        else:
            channel.offer(Complete(messages=tuple(messages)))
            self._debug(f"Turn complete with {len(messages)} message(s)", level="info")
