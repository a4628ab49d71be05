from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from .models import Content, GenerationOptions, ResponseFragment, ToolDeclaration


class ModelClient(ABC):
    """Abstract base class for remote model clients.

    This module hides the design decision of which model service is used.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Conversion between the neutral models and the wire format
    - Streaming of partial response fragments
    - Token counting

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            async for fragment in client.stream_generate(...):
                ...
        # Automatically cleaned up
    """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when the caller does not name one."""

    @abstractmethod
    def stream_generate(
        self,
        model: str,
        contents: list[Content],
        tools: list[ToolDeclaration],
        options: GenerationOptions,
    ) -> AsyncIterator[ResponseFragment]:
        """Stream a response for the given conversation.

        Args:
            model: Model identifier
            contents: Full conversation, oldest block first
            tools: Tool declarations the model may call
            options: Generation settings

        Returns:
            Async iterator of response fragments, in arrival order

        Raises:
            Exception: Provider-specific transport errors, possibly mid-stream
        """

    @abstractmethod
    async def count_tokens(self, model: str, contents: list[Content]) -> int:
        """Count the tokens of the given content blocks.

        Raises:
            Exception: Provider-specific errors; callers treat counting as best effort
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ModelClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
