"""Search tools: glob patterns and in-file search."""

import json
import os
import re

from pydantic import BaseModel, Field

from ..agent.errors import ToolError
from .common import WorkspaceTool


class GlobInput(BaseModel):
    pattern: str = Field(
        description=(
            "Glob pattern to match files (e.g., '*.py' for all Python files, "
            "'**/*.txt' for all text files recursively)"
        )
    )
    path: str = Field(default="", description="Base path to search from (defaults to current directory)")


def format_file_list(files: list[str]) -> str:
    if not files:
        return "No files found"
    lines = [f"Found {len(files)} file(s):"]
    lines.extend(f"- {f}" for f in files)
    return "\n".join(lines)


class GlobTool(WorkspaceTool):
    """Finds files by glob pattern, with ``**`` for recursion."""

    input_model = GlobInput

    @property
    def name(self) -> str:
        return "glob"

    @property
    def description(self) -> str:
        return "Find files matching a glob pattern (e.g., '*.py', '**/*.txt'). Supports recursive patterns with **."

    def run(self, params: GlobInput) -> str:
        if not params.pattern:
            raise ToolError("pattern is required", tool_name=self.name)
        if os.path.isabs(params.pattern):
            raise ToolError("pattern must be relative; use 'path' for the base directory", tool_name=self.name)

        base = self._resolve(params.path or ".")
        if not base.is_dir():
            raise ToolError(f"path is not a directory: {params.path}", tool_name=self.name)

        try:
            matches = sorted(base.glob(params.pattern))
        except ValueError as e:
            raise ToolError(f"failed to glob pattern: {e}", tool_name=self.name) from e

        results = [os.path.relpath(match, self._base_path) for match in matches]
        if not results:
            return f"No files found matching pattern: {params.pattern}"
        return format_file_list(results)


class SearchFileInput(BaseModel):
    path: str = Field(description="The relative path of the file to search in.")
    query: str = Field(description="The string or regex pattern to search for.")
    is_regex: bool = Field(default=False, description="Treat the query as a regular expression. Defaults to false.")
    case_sensitive: bool = Field(default=False, description="Perform a case-sensitive search. Defaults to false.")
    line: int = Field(default=0, ge=0, description="If provided, only this line number will be searched.")


class SearchFileTool(WorkspaceTool):
    """Searches one file for a substring or regular expression."""

    input_model = SearchFileInput

    @property
    def name(self) -> str:
        return "search_file"

    @property
    def description(self) -> str:
        return (
            "Search for a string or regex pattern in a file. "
            "Returns a list of matching lines with their line numbers."
        )

    def run(self, params: SearchFileInput) -> str:
        if not params.path or not params.query:
            raise ToolError("path and query must be provided", tool_name=self.name)

        try:
            content = self._resolve(params.path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ToolError(f"failed to read file {params.path}: {e}", tool_name=self.name) from e

        if params.is_regex:
            flags = 0 if params.case_sensitive else re.IGNORECASE
            try:
                pattern = re.compile(params.query, flags)
            except re.error as e:
                raise ToolError(f"invalid regular expression: {e}", tool_name=self.name) from e
            matcher = lambda text: pattern.search(text) is not None  # noqa: E731
        elif params.case_sensitive:
            matcher = lambda text: params.query in text  # noqa: E731
        else:
            needle = params.query.lower()
            matcher = lambda text: needle in text.lower()  # noqa: E731

        results = []
        for number, text in enumerate(content.split("\n"), start=1):
            if params.line and params.line != number:
                continue
            if matcher(text):
                results.append({"line_number": number, "line": text})

        self._debug(f"{len(results)} match(es) in {params.path}")
        return json.dumps(results, indent=2)
