"""Modal screens for the TUI.

This module hides the design decisions about:
- Confirmation dialog appearance (CSS, layout)
- Model selector layout
- Keyboard shortcuts for dialogs

Screens hold no interaction state of their own. Every key is forwarded to
the application, which runs it through the UI state machine and then
pushes, refreshes or pops the screens to match.
"""

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from ..agent.events import ConfirmationRequest
from .formatting import format_arguments, format_model_option

if TYPE_CHECKING:
    from .state import UIStateMachine


class ToolConfirmScreen(ModalScreen[None]):
    """Modal dialog asking whether a tool call may run."""

    CSS = """
    ToolConfirmScreen {
        align: center middle;
        background: $background 70%;
    }

    #confirmation-dialog {
        width: 70;
        height: auto;
        max-height: 80%;
        border: tall $warning;
        background: $surface;
        padding: 1 2;
    }

    #confirmation-title {
        width: 100%;
        height: auto;
        text-align: center;
        text-style: bold;
        color: $warning;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #confirmation-tool {
        width: 100%;
        height: auto;
        text-style: bold;
        margin-bottom: 1;
    }

    #confirmation-arguments {
        width: 100%;
        height: auto;
        max-height: 20;
        padding: 0 1;
        background: $panel;
        border: round $border;
        color: $foreground;
        overflow-y: auto;
    }

    #confirmation-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    #confirmation-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("y,Y", "answer('y')", "Yes", show=False),
        Binding("n,N", "answer('n')", "No", show=False),
    ]

    def __init__(self, request: ConfirmationRequest) -> None:
        super().__init__()
        self.request = request

    def compose(self) -> ComposeResult:
        with Vertical(id="confirmation-dialog"):
            yield Static("⚠️  Tool Execution Request", id="confirmation-title")
            yield Static(f"Tool: [bold]{escape(self.request.tool_name)}[/]", id="confirmation-tool")
            yield Static(
                escape(format_arguments(self.request.arguments)),
                id="confirmation-arguments",
            )
            with Horizontal(id="confirmation-buttons"):
                yield Button("Yes", id="btn-y", variant="success")
                yield Button("No", id="btn-n", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id.startswith("btn-"):
            self.action_answer(button_id[4:])

    def action_answer(self, key: str) -> None:
        self.app.dispatch_key(key)


class ModelSelectScreen(ModalScreen[None]):
    """Modal list of the available models with a cursor."""

    CSS = """
    ModelSelectScreen {
        align: center middle;
        background: $background 70%;
    }

    #model-dialog {
        width: 60;
        height: auto;
        border: tall $primary;
        background: $surface;
        padding: 1 2;
    }

    #model-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $primary;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #model-list {
        width: 100%;
        height: auto;
    }

    #model-help {
        width: 100%;
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("up", "navigate('up')", "Up", show=False),
        Binding("down", "navigate('down')", "Down", show=False),
        Binding("enter", "navigate('enter')", "Select", show=False),
    ]

    def __init__(self, state: "UIStateMachine") -> None:
        super().__init__()
        self._state = state

    def compose(self) -> ComposeResult:
        with Vertical(id="model-dialog"):
            yield Static("Select Model", id="model-title")
            yield Static(id="model-list")
            yield Static("↑↓ Navigate • Enter Select • Esc Cancel", id="model-help")

    def on_mount(self) -> None:
        self.refresh_from(self._state)

    def refresh_from(self, state: "UIStateMachine") -> None:
        """Redraw the list with the state's cursor highlighted."""
        lines = []
        for index, model_id in enumerate(state.models):
            line = escape(format_model_option(model_id, state.current_model))
            if index == state.model_cursor:
                line = f"[reverse bold]{line}[/]"
            lines.append(line)
        self.query_one("#model-list", Static).update("\n".join(lines))

    def action_navigate(self, key: str) -> None:
        self.app.dispatch_key(key)
