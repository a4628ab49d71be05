"""Local tools the model can call."""

from pathlib import Path

from ..agent.tools import BaseTool, ToolRegistry
from .filesystem import EditFileTool, ListFilesTool, ReadFileTool, WriteFileTool
from .search import GlobTool, SearchFileTool
from .shell import RunShellCommandTool


def get_all_tools(base_path: Path | None = None) -> list[BaseTool]:
    """Instantiate every built-in tool, in declaration order."""
    return [
        ReadFileTool(base_path),
        ListFilesTool(base_path),
        EditFileTool(base_path),
        WriteFileTool(base_path),
        SearchFileTool(base_path),
        GlobTool(base_path),
        RunShellCommandTool(base_path),
    ]


def create_default_registry(base_path: Path | None = None) -> ToolRegistry:
    return ToolRegistry(get_all_tools(base_path))


__all__ = [
    "get_all_tools",
    "create_default_registry",
    "ReadFileTool",
    "ListFilesTool",
    "EditFileTool",
    "WriteFileTool",
    "SearchFileTool",
    "GlobTool",
    "RunShellCommandTool",
]
