"""File tools: read, write, edit and list."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ..agent.errors import ToolError
from .common import WorkspaceTool

DEFAULT_MAX_LINES = 1000
DEFAULT_RECURSIVE_DEPTH = 3


class ReadFileInput(BaseModel):
    path: str = Field(description="The relative path of a file in the working directory.")
    start_line: int = Field(
        default=1, ge=1,
        description="The line number to start reading from (1-indexed). Defaults to 1."
    )
    end_line: int = Field(
        default=0, ge=0,
        description="The line number to end reading at (inclusive). Defaults to reading the whole file."
    )
    max_lines: int = Field(
        default=DEFAULT_MAX_LINES, gt=0,
        description="The maximum number of lines to read. Defaults to 1000."
    )


class ReadFileTool(WorkspaceTool):
    """Reads a whole file or a range of its lines."""

    input_model = ReadFileInput

    @property
    def name(self) -> str:
        return "read_file"

    @property
    def description(self) -> str:
        return (
            "Read the contents of a given relative file path. Can read the whole file or a "
            "specific range of lines. Use this when you want to see what's inside a file. "
            "Do not use this with directory names."
        )

    def run(self, params: ReadFileInput) -> str:
        path = self._resolve(params.path)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ToolError(f"failed to read file {params.path}: {e}", tool_name=self.name) from e

        lines = content.split("\n")
        start = params.start_line
        end = params.end_line
        if end <= 0 or end > len(lines):
            end = len(lines)

        if start > end:
            raise ToolError(f"start line {start} is greater than end line {end}", tool_name=self.name)
        if end - start + 1 > params.max_lines:
            raise ToolError(f"cannot read more than {params.max_lines} lines at once", tool_name=self.name)

        self._debug(f"read {params.path} lines {start}-{end}")
        return "\n".join(lines[start - 1:end])


class WriteFileInput(BaseModel):
    path: str = Field(description="The relative path of the file to write to.")
    content: str = Field(description="The content to write to the file.")
    append: bool = Field(
        default=False,
        description="If true, appends the content to the file. If false (default), overwrites the file."
    )


class WriteFileTool(WorkspaceTool):
    """Creates, overwrites or appends to a file."""

    input_model = WriteFileInput

    @property
    def name(self) -> str:
        return "write_file"

    @property
    def description(self) -> str:
        return (
            "Write content to a file. This tool can create a new file, overwrite an existing "
            "file, or append to an existing file. Use the 'append' parameter to control the "
            "behavior. By default, it overwrites."
        )

    def run(self, params: WriteFileInput) -> str:
        if not params.path:
            raise ToolError("path cannot be empty", tool_name=self.name)
        path = self._resolve(params.path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if params.append:
                with open(path, "a", encoding="utf-8") as f:
                    f.write(params.content)
                return f"Content appended to file {params.path} successfully."
            path.write_text(params.content, encoding="utf-8")
        except OSError as e:
            raise ToolError(f"failed to write to file {params.path}: {e}", tool_name=self.name) from e
        return f"File {params.path} written successfully."


class EditFileInput(BaseModel):
    path: str = Field(description="The path to the file")
    old_str: str = Field(description="Text to search for. All occurrences will be replaced.")
    new_str: str = Field(description="Text to replace old_str with")


class EditFileTool(WorkspaceTool):
    """Replaces every occurrence of a string in an existing file."""

    input_model = EditFileInput

    @property
    def name(self) -> str:
        return "edit_file"

    @property
    def description(self) -> str:
        return (
            "Make edits to a text file. Replaces ALL occurrences of 'old_str' with 'new_str' "
            "in the given file. 'old_str' and 'new_str' MUST be different from each other. "
            "The file MUST exist. This tool cannot be used to create new files."
        )

    def run(self, params: EditFileInput) -> str:
        if not params.path or not params.old_str or params.old_str == params.new_str:
            raise ToolError(
                "invalid input parameters: path and old_str must be non-empty, "
                "and old_str must be different from new_str",
                tool_name=self.name,
            )
        path = self._resolve(params.path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ToolError(f"failed to read file: {e}", tool_name=self.name) from e

        replacements = content.count(params.old_str)
        if replacements == 0:
            return "No occurrences of `old_str` found. No changes made to the file."

        try:
            path.write_text(content.replace(params.old_str, params.new_str), encoding="utf-8")
        except OSError as e:
            raise ToolError(f"failed to write file: {e}", tool_name=self.name) from e
        return f"OK. Edited file successfully. Made {replacements} replacement(s)."


class ListFilesInput(BaseModel):
    path: str = Field(
        default="",
        description="Optional relative path to list files from. Defaults to current directory if not provided."
    )
    recursive: bool = Field(default=False, description="Whether to list files recursively. Defaults to false.")
    max_depth: int = Field(
        default=0, ge=0,
        description="Maximum recursion depth. Only used if recursive is true. Defaults to 3."
    )
    include_hidden: bool = Field(
        default=False,
        description=(
            "Whether to include hidden files and directories (those starting with a dot). "
            "Defaults to false."
        ),
    )


def _timestamp(mtime: float) -> str:
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class ListFilesTool(WorkspaceTool):
    """Lists a directory as a JSON tree, directories first."""

    input_model = ListFilesInput

    @property
    def name(self) -> str:
        return "list_files"

    @property
    def description(self) -> str:
        return (
            "List files and directories in a tree-like structure for a given relative directory "
            "path. Use this to see the contents of a directory. By default, it lists the current "
            "directory non-recursively."
        )

    def run(self, params: ListFilesInput) -> str:
        display = params.path or "."
        directory = self._resolve(display)
        if not directory.exists():
            raise ToolError(f"directory not found: {display}", tool_name=self.name)
        if not directory.is_dir():
            raise ToolError(f"path is not a directory: {display}", tool_name=self.name)

        max_depth = 1
        if params.recursive:
            max_depth = params.max_depth or DEFAULT_RECURSIVE_DEPTH

        root: dict[str, Any] = {
            "path": display,
            "is_dir": True,
            "last_modified": _timestamp(directory.stat().st_mtime),
        }
        try:
            children = self._walk(directory, 0, max_depth, params.include_hidden)
        except OSError as e:
            raise ToolError(f"failed to list files: {e}", tool_name=self.name) from e
        if children:
            root["children"] = children
        return json.dumps(root, indent=2)

    def _walk(self, directory: Path, depth: int, max_depth: int, include_hidden: bool) -> list[dict[str, Any]]:
        if depth >= max_depth:
            return []

        nodes = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if not include_hidden and entry.name.startswith("."):
                    continue
                try:
                    info = entry.stat()
                    is_dir = entry.is_dir()
                except OSError:
                    # vanished between listing and stat
                    continue

                node: dict[str, Any] = {"path": entry.name, "is_dir": is_dir}
                if not is_dir and info.st_size:
                    node["size"] = info.st_size
                node["last_modified"] = _timestamp(info.st_mtime)
                if is_dir:
                    children = self._walk(Path(entry.path), depth + 1, max_depth, include_hidden)
                    if children:
                        node["children"] = children
                nodes.append(node)

        nodes.sort(key=lambda n: (not n["is_dir"], n["path"]))
        return nodes
