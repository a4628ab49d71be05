"""Factory functions for the CLI.

Centralizes creation of settings, the model client and the engine from
environment variables. Hides configuration details from the command.
"""

from pathlib import Path

import typer
from rich.console import Console

from ..agent import AgentConfig, ConfigurationError, ConversationEngine, StreamingBridge
from ..config import Preferences, Settings, load_settings
from ..llm import ModelClient, create_model_client
from ..prompts import get_system_prompt
from ..tools import create_default_registry

# Default console for output
_console = Console()


def require_settings(console: Console | None = None) -> Settings:
    """Load settings, exiting with code 1 if they are unusable.

    Raises:
        typer.Exit: If GOOGLE_API_KEY is missing or a value is invalid
    """
    con = console or _console
    try:
        return load_settings()
    except ConfigurationError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


def resolve_model(settings: Settings, preferences: Preferences, override: str | None = None) -> str:
    """Pick the startup model.

    An explicit --model wins; otherwise the model saved in the preferences
    file; otherwise GOOGLE_MODEL (or the default).
    """
    if override:
        return override
    if settings.preferences_path.exists():
        return preferences.selected_model
    return settings.model


def get_model_client(settings: Settings, model: str) -> ModelClient:
    return create_model_client("gemini", api_key=settings.api_key, model=model)


def build_bridge(
    client: ModelClient,
    settings: Settings,
    model: str,
    base_path: Path | None = None,
) -> StreamingBridge:
    """Wire the tool registry, engine and bridge together."""
    engine = ConversationEngine(
        client,
        create_default_registry(base_path),
        model=model,
        config=AgentConfig(system_prompt=get_system_prompt()),
    )
    return StreamingBridge(
        engine,
        confirmation_timeout=settings.confirmation_timeout,
        turn_timeout=settings.turn_timeout,
    )


__all__ = [
    "require_settings",
    "resolve_model",
    "get_model_client",
    "build_bridge",
]
