"""Tool infrastructure for the conversation engine."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, ValidationError

from ..llm.models import ToolDeclaration
from .errors import ToolError


class BaseTool(ABC):
    """Abstract base class for local tools.

    A tool declares its arguments as a pydantic model (``input_model``); the
    JSON schema sent to the model is derived from it, and incoming arguments
    are validated against it before ``run`` is called.

    ``run`` is synchronous and may block; the pipeline calls it off the
    event loop.
    """

    input_model: ClassVar[type[BaseModel]]

    def __init__(self) -> None:
        self._debug_callback: Callable[[str, str, str], None] | None = None

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, message: str, level: str = "debug") -> None:
        """Send debug message if callback is set."""
        if self._debug_callback:
            self._debug_callback(level, "Tool", f"{self.name}: {message}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the tool description for the model."""
        pass

    @property
    def parameters_schema(self) -> dict[str, Any]:
        """Get the JSON schema for tool parameters."""
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        return schema

    @abstractmethod
    def run(self, params: Any) -> str:
        """Run the tool with validated parameters.

        Args:
            params: Instance of ``input_model``

        Returns:
            Textual result for the model

        Raises:
            ToolError: If the tool cannot complete
        """
        pass

    def invoke(self, arguments: dict[str, Any]) -> str:
        """Validate raw arguments and run the tool.

        Raises:
            ToolError: On malformed arguments or tool failure
        """
        try:
            params = self.input_model.model_validate(arguments)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise ToolError(f"invalid arguments: {details}", tool_name=self.name) from e
        return self.run(params)

    def to_declaration(self) -> ToolDeclaration:
        """Convert tool to the declaration advertised to the model."""
        return ToolDeclaration(
            name=self.name,
            description=self.description,
            parameters=self.parameters_schema,
        )


class ToolRegistry:
    """Immutable, ordered collection of uniquely named tools."""

    def __init__(self, tools: Iterable[BaseTool] = ()):
        """Build the registry.

        Raises:
            ValueError: If two tools share a name
        """
        self._tools: dict[str, BaseTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def declarations(self) -> list[ToolDeclaration]:
        """Declarations in registration order."""
        return [tool.to_declaration() for tool in self._tools.values()]

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        for tool in self._tools.values():
            tool.set_debug_callback(callback)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
