"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console

from ..config import load_preferences
from .providers import build_bridge, get_model_client, require_settings, resolve_model

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="cliagent",
    help="AI coding assistant for the terminal, powered by Gemini",
    add_completion=False,
)

# Console for rich output
console = Console()


@app.command()
def run(
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model to start with (overrides GOOGLE_MODEL and saved preferences)"
    ),
    confirm: bool | None = typer.Option(
        None,
        "--confirm/--no-confirm",
        help="Ask before every tool call (default: saved preference)"
    ),
    thinking: bool | None = typer.Option(
        None,
        "--thinking/--no-thinking",
        help="Request reasoning traces from thinking models (default: saved preference)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive coding assistant."""
    settings = require_settings(console)
    preferences = load_preferences(settings.preferences_path)

    updates = {"selected_model": resolve_model(settings, preferences, model)}
    if confirm is not None:
        updates["require_tool_confirmation"] = confirm
    if thinking is not None:
        updates["enable_thinking_mode"] = thinking
    preferences = preferences.model_copy(update=updates)

    async def _tui():
        from ..ui import run_tui

        client = get_model_client(settings, preferences.selected_model)
        try:
            bridge = build_bridge(client, settings, preferences.selected_model)
            await run_tui(
                bridge,
                preferences=preferences,
                preferences_path=settings.preferences_path,
                log_level=log_level,
            )
        finally:
            await client.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
