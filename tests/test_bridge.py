"""Unit tests for the streaming bridge and its turn channel."""
import asyncio

import pytest
from fakes import HANG, FakeModelClient, call, fragment, text

from cliagent.agent import (
    Complete,
    ConfirmationRequest,
    ConversationEngine,
    Error,
    StreamingBridge,
    TextChunk,
    ToolMessage,
    TurnChannel,
)
from cliagent.agent.events import is_terminal


@pytest.fixture
def make_bridge(registry):
    def _make(responses, **bridge_kwargs):
        client = FakeModelClient(responses)
        engine = ConversationEngine(client, registry)
        return StreamingBridge(engine, **bridge_kwargs)

    return _make


async def drain_turn(bridge, on_request=None):
    """Collect every event of the current turn, answering confirmation requests."""
    events = []
    async for event in bridge.events():
        events.append(event)
        if isinstance(event, ConfirmationRequest) and on_request is not None:
            on_request(event)
    return events


class TestTurnChannel:
    """Tests for per-kind capacity and terminal handling."""

    def test_drops_when_kind_is_full(self):
        channel = TurnChannel({"text": 2, "tool": 1, "thought": 1})

        accepted = [channel.offer(TextChunk(str(i))) for i in range(3)]

        assert accepted == [True, True, False]
        assert channel.dropped["text"] == 1
        assert channel.drain() == [TextChunk("0"), TextChunk("1")]

    def test_capacity_frees_after_drain(self):
        channel = TurnChannel({"text": 1})

        assert channel.offer(TextChunk("a"))
        assert not channel.offer(TextChunk("b"))
        channel.drain()

        assert channel.offer(TextChunk("c"))

    def test_kinds_are_bounded_independently(self):
        channel = TurnChannel({"text": 1, "tool": 1, "thought": 1})
        channel.offer(TextChunk("a"))

        assert channel.offer(Complete())

    def test_nothing_after_terminal(self):
        """Test that the first terminal event closes the channel."""
        channel = TurnChannel()

        assert channel.offer(Error("Error: boom"))
        assert not channel.offer(Complete())
        assert not channel.offer(TextChunk("late"))
        assert channel.closed
        assert channel.drain() == [Error("Error: boom")]


class TestStreamingBridge:
    """Tests for running turns in the background."""

    @pytest.mark.asyncio
    async def test_complete_turn(self, make_bridge):
        bridge = make_bridge([[fragment(text("Hi")), fragment(text(" there"))]])

        bridge.start_turn("hello", confirmation_required=False)
        events = await drain_turn(bridge)

        assert events[:2] == [TextChunk("Hi"), TextChunk(" there")]
        assert isinstance(events[-1], Complete)
        assert not events[-1].cancelled
        assert events[-1].messages[-1].content == "Hi there"
        assert sum(1 for e in events if is_terminal(e)) == 1
        await asyncio.sleep(0)
        assert not bridge.busy

    @pytest.mark.asyncio
    async def test_poll_is_non_blocking(self, make_bridge):
        bridge = make_bridge([[fragment(text("x"))]])

        assert bridge.poll() == []
        bridge.start_turn("hello", confirmation_required=False)
        await asyncio.sleep(0.05)

        events = bridge.poll()
        assert events[0] == TextChunk("x")
        assert isinstance(events[-1], Complete)
        assert bridge.poll() == []

    @pytest.mark.asyncio
    async def test_confirmation_approved(self, make_bridge, echo_tool):
        """Test that an approved request lets the tool run."""
        bridge = make_bridge([[fragment(call("echo", text="ok"))], [fragment(text("done"))]])

        bridge.start_turn("go", confirmation_required=True)
        events = await drain_turn(bridge, on_request=lambda request: request.approve())

        requests = [e for e in events if isinstance(e, ConfirmationRequest)]
        assert [(r.tool_name, r.arguments) for r in requests] == [("echo", {"text": "ok"})]
        assert len(echo_tool.invocations) == 1
        tool_messages = [e for e in events if isinstance(e, ToolMessage)]
        assert not tool_messages[0].message.is_error

    @pytest.mark.asyncio
    async def test_confirmation_denied(self, make_bridge, echo_tool):
        bridge = make_bridge([[fragment(call("echo", text="rm"))], [fragment(text("ok"))]])

        bridge.start_turn("go")
        events = await drain_turn(bridge, on_request=lambda request: request.deny())

        assert echo_tool.invocations == []
        tool_message = next(e for e in events if isinstance(e, ToolMessage)).message
        assert tool_message.content.startswith("🚫 Tool Call Rejected: echo")

    @pytest.mark.asyncio
    async def test_confirmation_timeout_denies(self, make_bridge, echo_tool):
        """Test that an unanswered request is denied once the timeout elapses."""
        bridge = make_bridge(
            [[fragment(call("echo", text="x"))], [fragment(text("ok"))]],
            confirmation_timeout=0.05,
        )

        bridge.start_turn("go")
        events = await drain_turn(bridge)

        request = next(e for e in events if isinstance(e, ConfirmationRequest))
        assert request.done
        assert not request.approve()
        assert echo_tool.invocations == []
        tool_message = next(e for e in events if isinstance(e, ToolMessage)).message
        assert tool_message.is_error
        assert "timed out after 0.05s" in tool_message.content
        assert isinstance(events[-1], Complete)

    @pytest.mark.asyncio
    async def test_no_request_without_confirmation(self, make_bridge, echo_tool):
        bridge = make_bridge([[fragment(call("echo", text="x"))], [fragment(text("ok"))]])

        bridge.start_turn("go", confirmation_required=False)
        events = await drain_turn(bridge)

        assert not any(isinstance(e, ConfirmationRequest) for e in events)
        assert len(echo_tool.invocations) == 1

    @pytest.mark.asyncio
    async def test_cancel_is_silent(self, make_bridge):
        """Test that cancelling a streaming turn ends it with Complete(cancelled=True)."""
        bridge = make_bridge([[fragment(text("partial")), HANG]])

        bridge.start_turn("go", confirmation_required=False)
        await asyncio.sleep(0.05)
        assert bridge.busy
        assert bridge.cancel()
        events = await drain_turn(bridge)

        assert events[-1] == Complete(cancelled=True)
        assert not any(isinstance(e, Error) for e in events)
        await asyncio.sleep(0)
        assert not bridge.busy
        assert not bridge.cancel()

    @pytest.mark.asyncio
    async def test_cancel_expires_pending_confirmation(self, make_bridge, echo_tool):
        bridge = make_bridge([[fragment(call("echo", text="x"))]])

        bridge.start_turn("go")
        await asyncio.sleep(0.05)
        request = next(e for e in bridge.poll() if isinstance(e, ConfirmationRequest))
        bridge.cancel()
        await bridge.shutdown()

        assert request.done
        assert not request.approve()
        assert echo_tool.invocations == []
        assert bridge.poll() == [Complete(cancelled=True)]

    @pytest.mark.asyncio
    async def test_cancel_before_first_step(self, make_bridge):
        bridge = make_bridge([[fragment(text("never"))]])

        channel = bridge.start_turn("go")
        bridge.cancel()
        await asyncio.sleep(0.01)

        assert channel.drain() == [Complete(cancelled=True)]

    @pytest.mark.asyncio
    async def test_new_turn_cancels_previous(self, make_bridge):
        """Test that the cancelled turn's events, terminal included, come before the next turn's."""
        bridge = make_bridge([[fragment(text("first")), HANG], [fragment(text("second"))]])

        bridge.start_turn("one", confirmation_required=False)
        await asyncio.sleep(0.01)
        second = bridge.start_turn("two", confirmation_required=False)
        await asyncio.sleep(0.05)

        events = bridge.poll()

        assert events[:3] == [TextChunk("first"), Complete(cancelled=True), TextChunk("second")]
        assert isinstance(events[3], Complete) and not events[3].cancelled
        assert len(events) == 4
        assert bridge.channel is second
        assert bridge.poll() == []

    @pytest.mark.asyncio
    async def test_events_iterates_across_turns(self, make_bridge):
        bridge = make_bridge([[fragment(text("first")), HANG], [fragment(text("second"))]])

        bridge.start_turn("one", confirmation_required=False)
        await asyncio.sleep(0.01)
        bridge.start_turn("two", confirmation_required=False)
        events = await drain_turn(bridge)

        assert events[:3] == [TextChunk("first"), Complete(cancelled=True), TextChunk("second")]
        assert [e for e in events if is_terminal(e)][-1].cancelled is False

    @pytest.mark.asyncio
    async def test_transport_error_becomes_error_event(self, make_bridge):
        bridge = make_bridge([[fragment(text("half")), ConnectionError("connection reset")]])

        bridge.start_turn("go", confirmation_required=False)
        events = await drain_turn(bridge)

        assert events[-1] == Error("Error: connection reset")
        assert sum(1 for e in events if is_terminal(e)) == 1

    @pytest.mark.asyncio
    async def test_turn_timeout(self, make_bridge):
        bridge = make_bridge([[HANG]], turn_timeout=0.05)

        bridge.start_turn("go", confirmation_required=False)
        events = await drain_turn(bridge)

        assert events == [Error("Error: turn timed out after 0.05s")]

    @pytest.mark.asyncio
    async def test_dropped_events_are_logged(self, make_bridge):
        """Test that overflowing text events are dropped and reported as warnings."""
        bridge = make_bridge(
            [[fragment(text(str(i))) for i in range(5)]],
            capacities={"text": 2, "tool": 10, "thought": 10},
        )
        records = []
        bridge.set_debug_callback(lambda level, component, message: records.append((level, message)))

        bridge.start_turn("go", confirmation_required=False)
        await asyncio.sleep(0.05)
        events = bridge.poll()

        assert [e for e in events if isinstance(e, TextChunk)] == [TextChunk("0"), TextChunk("1")]
        assert isinstance(events[-1], Complete)
        assert bridge.channel.dropped["text"] == 3
        assert any(level == "warning" and "Dropped text" in message for level, message in records)
