"""Google Gemini model client.

Uses the official Google GenAI SDK for async streaming generation.
Reference: https://github.com/googleapis/python-genai

Note: Gemini can stream fragments that carry no candidate at all (usually the
final usage-only chunk). Those are passed through as empty fragments; the
engine decides what an all-empty stream means.
"""

from collections.abc import AsyncIterator, Callable
from typing import Any

from google import genai
from google.genai import types

from ..base import ModelClient
from ..catalog import DEFAULT_MODEL, supports_thinking
from ..models import (
    Candidate,
    Content,
    FinishReason,
    FunctionCall,
    GenerationOptions,
    Part,
    ResponseFragment,
    ToolDeclaration,
)

# Default safety settings - relaxed to avoid blocking code-related content
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


class GeminiClient(ModelClient):
    """Google Gemini model client.

    Hidden design decisions:
    - Google GenAI client initialization
    - Conversion between neutral content blocks and genai types
    - Tool results ride in a "user" role block, as the API requires
    - Thinking config only for models that support it
    - Relaxed safety settings to avoid blocking code content
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        **client_kwargs: Any
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro, ...)
            **client_kwargs: Additional kwargs for genai.Client
        """
        self._model = model
        self._client = genai.Client(api_key=api_key, **client_kwargs)
        self._debug_callback: Callable[[str, str, str], None] | None = None

    @property
    def default_model(self) -> str:
        return self._model

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        """Set callback for debug log messages: callback(level, component, message)."""
        self._debug_callback = callback

    def _debug(self, message: str, level: str = "debug") -> None:
        if self._debug_callback:
            self._debug_callback(level, "LLM", message)

    def _convert_contents(self, contents: list[Content]) -> list[types.Content]:
        """Convert neutral content blocks to Gemini format.

        Thought parts are dropped; they are display-only.
        """
        converted = []
        for block in contents:
            parts = []
            for part in block.parts:
                if part.thought:
                    continue
                if part.function_call is not None:
                    parts.append(types.Part(
                        function_call=types.FunctionCall(
                            name=part.function_call.name,
                            args=dict(part.function_call.args),
                        ),
                        thought_signature=part.thought_signature,
                    ))
                elif part.function_response is not None:
                    parts.append(types.Part(
                        function_response=types.FunctionResponse(
                            name=part.function_response.name,
                            response=dict(part.function_response.response),
                        )
                    ))
                elif part.text is not None:
                    parts.append(types.Part(
                        text=part.text,
                        thought_signature=part.thought_signature,
                    ))
            if not parts:
                continue
            role = "model" if block.role == "model" else "user"
            converted.append(types.Content(role=role, parts=parts))
        return converted

    def _convert_tools(self, tools: list[ToolDeclaration]) -> list[types.Tool]:
        if not tools:
            return []
        declarations = [
            types.FunctionDeclaration(
                name=tool.name,
                description=tool.description,
                parameters_json_schema=tool.parameters,
            )
            for tool in tools
        ]
        return [types.Tool(function_declarations=declarations)]

    def _build_config(
        self,
        model: str,
        tools: list[ToolDeclaration],
        options: GenerationOptions,
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(
            max_output_tokens=options.max_output_tokens,
            temperature=options.temperature,
            top_k=options.top_k,
            top_p=options.top_p,
            system_instruction=options.system_instruction,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            tools=self._convert_tools(tools) or None,
        )
        if options.enable_thinking and supports_thinking(model):
            config.thinking_config = types.ThinkingConfig(
                include_thoughts=True,
                thinking_budget=options.thinking_budget,
            )
        return config

    def _convert_fragment(self, chunk: types.GenerateContentResponse) -> ResponseFragment:
        """Convert a streamed Gemini chunk to a neutral fragment."""
        candidates = []
        for candidate in chunk.candidates or []:
            parts = []
            if candidate.content and candidate.content.parts:
                for part in candidate.content.parts:
                    if part.function_call is not None:
                        parts.append(Part(
                            function_call=FunctionCall(
                                name=part.function_call.name or "",
                                args=dict(part.function_call.args or {}),
                            ),
                            thought_signature=part.thought_signature,
                        ))
                    elif part.text or part.thought_signature:
                        parts.append(Part(
                            text=part.text or "",
                            thought=bool(part.thought),
                            thought_signature=part.thought_signature,
                        ))
            candidates.append(Candidate(
                parts=parts,
                finish_reason=FinishReason.parse(candidate.finish_reason),
            ))
        return ResponseFragment(candidates=candidates)

    async def stream_generate(
        self,
        model: str,
        contents: list[Content],
        tools: list[ToolDeclaration],
        options: GenerationOptions,
    ) -> AsyncIterator[ResponseFragment]:
        """Stream a response from Gemini.

        Args:
            model: Model to use (falls back to the default model when empty)
            contents: Conversation blocks
            tools: Tool declarations
            options: Generation settings

        Yields:
            ResponseFragment per streamed chunk
        """
        model_to_use = model or self._model
        config = self._build_config(model_to_use, tools, options)
        self._debug(
            f"generate_content_stream model={model_to_use} blocks={len(contents)} "
            f"tools={len(tools)} thinking={config.thinking_config is not None}"
        )

        stream = await self._client.aio.models.generate_content_stream(
            model=model_to_use,
            contents=self._convert_contents(contents),
            config=config,
        )
        async for chunk in stream:
            yield self._convert_fragment(chunk)

    async def count_tokens(self, model: str, contents: list[Content]) -> int:
        converted = self._convert_contents(contents)
        if not converted:
            return 0
        response = await self._client.aio.models.count_tokens(
            model=model or self._model,
            contents=converted,
        )
        return response.total_tokens or 0

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
