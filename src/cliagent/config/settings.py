"""Process settings read from the environment.

Environment variables:
    GOOGLE_API_KEY: Gemini API key (required; GEMINI_API_KEY is accepted too)
    GOOGLE_MODEL: Model used at startup (default: gemini-2.5-flash)
    CLIAGENT_TURN_TIMEOUT: Seconds a whole turn may take (default: 300)
    CLIAGENT_CONFIRM_TIMEOUT: Seconds to wait for a tool confirmation (default: 30)
    CLIAGENT_CONFIG_DIR: Directory holding preferences.json (default: ~/.config/cli-agent)
"""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..agent.errors import ConfigurationError
from ..llm.catalog import DEFAULT_MODEL

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "cli-agent"


class Settings(BaseModel):
    """Validated startup settings."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1, repr=False)
    model: str = DEFAULT_MODEL
    turn_timeout: float = Field(default=300.0, gt=0)
    confirmation_timeout: float = Field(default=30.0, gt=0)
    config_dir: Path = DEFAULT_CONFIG_DIR

    @property
    def preferences_path(self) -> Path:
        return self.config_dir / "preferences.json"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read instead of os.environ

    Raises:
        ConfigurationError: If the API key is missing or a value is invalid
    """
    env = os.environ if environ is None else environ

    api_key = env.get("GOOGLE_API_KEY") or env.get("GEMINI_API_KEY")
    if not api_key:
        raise ConfigurationError("GOOGLE_API_KEY environment variable is required")

    values: dict[str, object] = {"api_key": api_key}
    if env.get("GOOGLE_MODEL"):
        values["model"] = env["GOOGLE_MODEL"]
    if env.get("CLIAGENT_TURN_TIMEOUT"):
        values["turn_timeout"] = env["CLIAGENT_TURN_TIMEOUT"]
    if env.get("CLIAGENT_CONFIRM_TIMEOUT"):
        values["confirmation_timeout"] = env["CLIAGENT_CONFIRM_TIMEOUT"]
    if env.get("CLIAGENT_CONFIG_DIR"):
        values["config_dir"] = Path(env["CLIAGENT_CONFIG_DIR"]).expanduser()

    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
