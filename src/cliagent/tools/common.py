from pathlib import Path

from ..agent.tools import BaseTool


class WorkspaceTool(BaseTool):
    """Base for tools that resolve relative paths against a working directory."""

    def __init__(self, base_path: Path | None = None):
        """Initialize the tool.

        Args:
            base_path: Base directory for relative paths (defaults to the cwd)
        """
        super().__init__()
        self._base_path = Path(base_path) if base_path else Path.cwd()

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _resolve(self, path: str) -> Path:
        resolved = Path(path or ".").expanduser()
        if not resolved.is_absolute():
            resolved = self._base_path / resolved
        return resolved
