"""Scripted test doubles for the model client and tools."""
import asyncio
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from cliagent.agent.errors import ToolError
from cliagent.agent.tools import BaseTool
from cliagent.llm.base import ModelClient
from cliagent.llm.models import (
    Candidate,
    Content,
    FinishReason,
    FunctionCall,
    GenerationOptions,
    Part,
    ResponseFragment,
    ToolDeclaration,
)

# Script item that blocks the stream until the turn is cancelled
HANG = object()


def text(value: str) -> Part:
    return Part(text=value)


def thought(value: str) -> Part:
    return Part(text=value, thought=True)


def call(name: str, **args: Any) -> Part:
    return Part(function_call=FunctionCall(name=name, args=args))


def fragment(*parts: Part, finish_reason: FinishReason | None = None) -> ResponseFragment:
    return ResponseFragment(candidates=[Candidate(parts=list(parts), finish_reason=finish_reason)])


def empty_fragment() -> ResponseFragment:
    return ResponseFragment(candidates=[])


@dataclass
class RecordedCall:
    model: str
    contents: list[Content]
    tools: list[ToolDeclaration]
    options: GenerationOptions


class FakeModelClient(ModelClient):
    """Replays one scripted response per ``stream_generate`` call.

    A script item is a ResponseFragment, an exception to raise mid-stream,
    or HANG to block until cancelled.
    """

    def __init__(
        self,
        responses: list[list[Any]],
        token_count: int | Exception = 5,
        model: str = "gemini-2.5-flash",
        hang_on_count: int | None = None,
    ):
        self._responses = list(responses)
        self._model = model
        self.token_count = token_count
        # 1-based count_tokens call that blocks until cancelled
        self.hang_on_count = hang_on_count
        self.count_calls = 0
        self.calls: list[RecordedCall] = []
        self.closed = False

    @property
    def default_model(self) -> str:
        return self._model

    async def stream_generate(self, model, contents, tools, options):
        self.calls.append(RecordedCall(model, list(contents), list(tools), options))
        if not self._responses:
            raise AssertionError("unexpected model call")
        for item in self._responses.pop(0):
            await asyncio.sleep(0)
            if item is HANG:
                await asyncio.Event().wait()
            if isinstance(item, BaseException):
                raise item
            yield item

    async def count_tokens(self, model: str, contents: list[Content]) -> int:
        self.count_calls += 1
        if self.count_calls == self.hang_on_count:
            await asyncio.Event().wait()
        if isinstance(self.token_count, Exception):
            raise self.token_count
        return self.token_count

    async def close(self) -> None:
        self.closed = True


class EchoInput(BaseModel):
    text: str
    repeat: int = 1


class EchoTool(BaseTool):
    """Returns its input; records every invocation."""

    input_model = EchoInput

    def __init__(self):
        super().__init__()
        self.invocations: list[EchoInput] = []

    @property
    def name(self) -> str:
        return "echo"

    @property
    def description(self) -> str:
        return "Echo the given text."

    def run(self, params: EchoInput) -> str:
        self.invocations.append(params)
        return f"echo: {params.text * params.repeat}"


class FailingInput(BaseModel):
    pass


class FailingTool(BaseTool):
    input_model = FailingInput

    @property
    def name(self) -> str:
        return "fail"

    @property
    def description(self) -> str:
        return "Always fails."

    def run(self, params: FailingInput) -> str:
        raise ToolError("boom", tool_name=self.name)


@dataclass
class ScriptedGate:
    """Confirmation gate answering from a fixed verdict and recording requests."""

    approve: bool = True
    requests: list[tuple[str, dict]] = field(default_factory=list)

    async def __call__(self, tool_name: str, arguments: dict) -> bool:
        self.requests.append((tool_name, arguments))
        return self.approve
