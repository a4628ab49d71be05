"""User preferences persisted across sessions."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..llm.catalog import DEFAULT_MODEL


class Preferences(BaseModel):
    """Preferences stored as JSON in the config directory.

    Attributes:
        selected_model: Model chosen in the model selector
        require_tool_confirmation: Ask before every tool call
        enable_thinking_mode: Request reasoning traces from thinking models
    """

    selected_model: str = Field(default=DEFAULT_MODEL)
    require_tool_confirmation: bool = True
    enable_thinking_mode: bool = False

    def save(self, path: Path) -> None:
        """Write preferences, creating the directory if needed.

        Raises:
            OSError: If the file cannot be written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")


def load_preferences(path: Path) -> Preferences:
    """Load preferences, falling back to defaults.

    A missing, unreadable or corrupt file yields default preferences.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return Preferences()
    if not isinstance(data, dict):
        return Preferences()
    try:
        return Preferences.model_validate(data)
    except ValidationError:
        return Preferences()
