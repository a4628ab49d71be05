"""Unit tests for the tool execution pipeline and registry."""
import asyncio

import pytest
from fakes import EchoTool, ScriptedGate
from hypothesis import given
from hypothesis import strategies as st

from cliagent.agent import ConfirmationTimeoutError, ToolCall, ToolError, ToolExecutor, ToolOutcome, ToolRegistry
from cliagent.agent.pipeline import DENIED_REASON, format_tool_message


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate tool name: echo"):
            ToolRegistry([EchoTool(), EchoTool()])

    def test_lookup_and_order(self, registry):
        assert registry.names() == ["echo", "fail"]
        assert "echo" in registry
        assert "missing" not in registry
        assert registry.get("missing") is None
        assert len(registry) == 2

    def test_declarations_use_input_schema(self, registry):
        """Test that declarations expose the pydantic schema without a title."""
        declaration = registry.declarations()[0]

        assert declaration.name == "echo"
        assert declaration.description == "Echo the given text."
        assert "title" not in declaration.parameters
        assert declaration.parameters["required"] == ["text"]
        assert set(declaration.parameters["properties"]) == {"text", "repeat"}


class TestBaseTool:
    """Tests for argument validation in BaseTool.invoke."""

    def test_invoke_validates(self):
        tool = EchoTool()
        assert tool.invoke({"text": "ab", "repeat": 2}) == "echo: abab"

    def test_invalid_arguments_raise_tool_error(self):
        tool = EchoTool()
        with pytest.raises(ToolError, match="invalid arguments: text"):
            tool.invoke({})
        assert tool.invocations == []


class TestToolExecutor:
    """Tests for ToolExecutor.execute."""

    @pytest.mark.asyncio
    async def test_success(self, registry):
        outcome = await ToolExecutor(registry).execute(ToolCall(tool_name="echo", arguments={"text": "x"}))

        assert outcome == ToolOutcome(result="echo: x")

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry):
        gate = ScriptedGate()
        outcome = await ToolExecutor(registry).execute(ToolCall(tool_name="nope"), gate)

        assert outcome.is_error
        assert outcome.result == "Error: tool nope not found"
        assert gate.requests == []

    @pytest.mark.asyncio
    async def test_tool_error(self, registry):
        outcome = await ToolExecutor(registry).execute(ToolCall(tool_name="fail"))

        assert outcome.is_error
        assert outcome.result == "Error: boom"

    @pytest.mark.asyncio
    async def test_denied(self, registry, echo_tool):
        outcome = await ToolExecutor(registry).execute(
            ToolCall(tool_name="echo", arguments={"text": "x"}), ScriptedGate(approve=False)
        )

        assert outcome.denied
        assert outcome.result == DENIED_REASON
        assert echo_tool.invocations == []

    @pytest.mark.asyncio
    async def test_gate_timeout_is_denial(self, registry, echo_tool):
        """Test that a confirmation timeout denies the call instead of raising."""
        async def gate(name, arguments):
            raise ConfirmationTimeoutError(name, 0.1)

        outcome = await ToolExecutor(registry).execute(ToolCall(tool_name="echo", arguments={"text": "x"}), gate)

        assert outcome.denied
        assert "timed out after 0.1s" in outcome.result
        assert echo_tool.invocations == []

    @pytest.mark.asyncio
    async def test_gate_failure_is_denial(self, registry):
        async def gate(name, arguments):
            raise RuntimeError("ui gone")

        outcome = await ToolExecutor(registry).execute(ToolCall(tool_name="echo", arguments={"text": "x"}), gate)

        assert outcome.denied
        assert outcome.result == f"{DENIED_REASON} (ui gone)"

    @pytest.mark.asyncio
    async def test_cancelled_gate_propagates(self, registry):
        async def gate(name, arguments):
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await ToolExecutor(registry).execute(ToolCall(tool_name="echo", arguments={"text": "x"}), gate)


class TestFormatToolMessage:
    """Tests for the transcript text of tool calls."""

    def test_result(self):
        message = format_tool_message(
            ToolCall(tool_name="echo", arguments={"text": "x"}), ToolOutcome(result="echo: x")
        )
        assert not message.is_error
        assert message.content == '🔧 Tool Call: echo\nArguments: {"text": "x"}\nResult: echo: x'

    def test_error(self):
        message = format_tool_message(ToolCall(tool_name="fail"), ToolOutcome(result="Error: boom", is_error=True))
        assert message.is_error
        assert message.content == "🔧 Tool Call: fail\nArguments: {}\nError: boom"

    def test_denied(self):
        message = format_tool_message(ToolCall(tool_name="echo"), ToolOutcome(result=DENIED_REASON, denied=True))
        assert message.is_error
        assert message.content == (
            "🚫 Tool Call Rejected: echo\nArguments: {}\nReason: User denied execution"
        )


class TestToolCall:
    """Tests for ToolCall deduplication keys."""

    @given(st.dictionaries(st.text(max_size=5), st.integers(), max_size=6))
    def test_dedup_key_ignores_key_order(self, arguments):
        """Property test: equal mappings give equal keys whatever their insertion order."""
        reversed_arguments = dict(reversed(list(arguments.items())))
        first = ToolCall(tool_name="t", arguments=arguments)
        second = ToolCall(tool_name="t", arguments=reversed_arguments)
        assert first.dedup_key == second.dedup_key

    def test_dedup_key_distinguishes_tools(self):
        assert ToolCall(tool_name="a").dedup_key != ToolCall(tool_name="b").dedup_key

    def test_outcome_response_payload(self):
        assert ToolOutcome(result="r").to_response() == {"result": "r"}
        assert ToolOutcome(result="x", denied=True).to_response() == {"error": "User denied tool execution"}
