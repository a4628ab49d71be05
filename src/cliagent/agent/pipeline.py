"""Tool execution pipeline: confirmation gate, execution, result formatting."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from .data_structures import Message, MessageKind, ToolCall, ToolOutcome
from .errors import ConfirmationTimeoutError, ToolError
from .tools import ToolRegistry

# async gate(tool_name, arguments) -> approved
ConfirmationGate = Callable[[str, dict[str, Any]], Awaitable[bool]]

DENIED_REASON = "User denied execution"


class ToolExecutor:
    """Runs tool calls against a registry.

    Hidden design decisions:
    - Unknown tools never reach the confirmation gate
    - A gate failure or timeout is a denial, never an exception
    - Arguments are validated before the tool runs
    - Tools run in a worker thread so the event loop keeps streaming
    """

    def __init__(self, registry: ToolRegistry):
        self._registry = registry
        self._debug_callback: Callable[[str, str, str], None] | None = None

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        self._debug_callback = callback

    def _debug(self, message: str, level: str = "debug") -> None:
        if self._debug_callback:
            self._debug_callback(level, "Tool", message)

    async def execute(self, call: ToolCall, gate: ConfirmationGate | None = None) -> ToolOutcome:
        """Execute a tool call, asking the gate first when one is set.

        Args:
            call: Decoded tool call
            gate: Optional confirmation gate

        Returns:
            ToolOutcome; tool errors, bad arguments and denials are all
            reported here rather than raised

        Raises:
            asyncio.CancelledError: If the turn is cancelled meanwhile
        """
        tool = self._registry.get(call.tool_name)
        if tool is None:
            self._debug(f"Unknown tool requested: {call.tool_name}", level="warning")
            return ToolOutcome(result=f"Error: tool {call.tool_name} not found", is_error=True)

        if gate is not None:
            try:
                approved = await gate(call.tool_name, dict(call.arguments))
            except (ConfirmationTimeoutError, asyncio.TimeoutError) as e:
                self._debug(f"Confirmation timed out for {call.tool_name}", level="warning")
                return ToolOutcome(result=f"{DENIED_REASON} ({e})", denied=True)
            except Exception as e:
                self._debug(f"Confirmation failed for {call.tool_name}: {e}", level="error")
                return ToolOutcome(result=f"{DENIED_REASON} ({e})", denied=True)
            if not approved:
                self._debug(f"User denied {call.tool_name}", level="info")
                return ToolOutcome(result=DENIED_REASON, denied=True)

        self._debug(f"Executing {call.tool_name} {call.arguments_json()}")
        try:
            result = await asyncio.to_thread(tool.invoke, dict(call.arguments))
        except ToolError as e:
            self._debug(f"{call.tool_name} failed: {e}", level="warning")
            return ToolOutcome(result=f"Error: {e}", is_error=True)
        except Exception as e:
            self._debug(f"{call.tool_name} raised {type(e).__name__}: {e}", level="error")
            return ToolOutcome(result=f"Error: {e}", is_error=True)

        self._debug(f"{call.tool_name} returned {len(result)} chars")
        return ToolOutcome(result=result)


def format_tool_message(call: ToolCall, outcome: ToolOutcome) -> Message:
    """Build the transcript message describing a tool call and its outcome."""
    args = call.arguments_json()
    if outcome.denied:
        content = (
            f"🚫 Tool Call Rejected: {call.tool_name}\n"
            f"Arguments: {args}\n"
            f"Reason: {outcome.result}"
        )
        return Message(kind=MessageKind.TOOL, content=content, is_error=True)
    if outcome.is_error:
        error = outcome.result.removeprefix("Error: ")
        content = f"🔧 Tool Call: {call.tool_name}\nArguments: {args}\nError: {error}"
        return Message(kind=MessageKind.TOOL, content=content, is_error=True)
    content = f"🔧 Tool Call: {call.tool_name}\nArguments: {args}\nResult: {outcome.result}"
    return Message(kind=MessageKind.TOOL, content=content)
