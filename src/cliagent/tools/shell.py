"""Shell command tool."""

import json
import os
import subprocess
import sys
from pathlib import Path

from pydantic import BaseModel, Field

from ..agent.errors import ToolError
from .common import WorkspaceTool

DEFAULT_COMMAND_TIMEOUT = 120.0


class RunShellCommandInput(BaseModel):
    command: str = Field(description="The shell command to execute.")
    directory: str = Field(
        default="",
        description="The directory to run the command in. Defaults to the current directory."
    )


class RunShellCommandTool(WorkspaceTool):
    """Runs a command through the system shell and reports its output as JSON."""

    input_model = RunShellCommandInput

    def __init__(self, base_path: Path | None = None, timeout: float = DEFAULT_COMMAND_TIMEOUT):
        super().__init__(base_path)
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "run_shell_command"

    @property
    def description(self) -> str:
        return (
            "Executes a shell command.\n"
            "**DANGER**: This tool allows the execution of arbitrary shell commands. "
            "This can be very dangerous. Only use it with trusted commands.\n"
            "It returns the stdout, stderr, and exit code."
        )

    def run(self, params: RunShellCommandInput) -> str:
        if not params.command.strip():
            raise ToolError("command cannot be empty", tool_name=self.name)

        if sys.platform == "win32":
            argv = ["cmd", "/c", params.command]
        else:
            argv = ["sh", "-c", params.command]
        cwd = self._resolve(params.directory or ".")

        output = {"stdout": "", "stderr": "", "exit_code": 0}
        self._debug(f"running {params.command!r} in {cwd}")
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                env=os.environ.copy(),
            )
        except subprocess.TimeoutExpired as e:
            output["stdout"] = _as_text(e.stdout)
            output["stderr"] = _as_text(e.stderr)
            output["exit_code"] = -1
            output["error"] = f"command timed out after {self._timeout:g}s"
        except OSError as e:
            output["exit_code"] = -1
            output["error"] = str(e)
        else:
            output["stdout"] = completed.stdout
            output["stderr"] = completed.stderr
            output["exit_code"] = completed.returncode
            if completed.returncode != 0:
                output["error"] = f"exit status {completed.returncode}"

        return json.dumps(output, indent=2)


def _as_text(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
