"""Main Textual TUI application.

Orchestrates the UI components. Keys and stream events go through the
UIStateMachine; the app only performs the side effects it asks for and
re-renders when the state's revision changes.
"""

import asyncio
import threading
import time
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..agent.bridge import StreamingBridge
from ..config import Preferences
from ..llm.catalog import model_ids
from .config import DRAIN_INTERVAL, SPINNER_FRAMES, SPINNER_RATE, WELCOME_MESSAGE, LogLevel
from .models import EntryKind
from .screens import ModelSelectScreen, ToolConfirmScreen
from .state import KeyAction, UIState, UIStateMachine
from .styles import APP_CSS
from .themes import AGENT_DARK
from .widgets import DebugPanel, EntryWidget, InputBar, StatusBar, TranscriptView


class AgentApp(App):
    """Textual TUI for the coding assistant."""

    CSS = APP_CSS
    TITLE = "CLI Code Assistant"

    BINDINGS = [
        Binding("ctrl+c", "dispatch_key('ctrl+c')", "Quit", priority=True),
        Binding("escape", "dispatch_key('escape')", "Cancel", priority=True),
        Binding("f2", "dispatch_key('f2')", "Model", priority=True),
        Binding("f3", "dispatch_key('f3')", "Confirm", priority=True),
        Binding("f4", "dispatch_key('f4')", "Think", priority=True),
        Binding("ctrl+t", "dispatch_key('ctrl+t')", "Collapse", priority=True),
        Binding("ctrl+k", "dispatch_key('ctrl+k')", "Clear", priority=True),
        Binding("ctrl+d", "toggle_debug", "Debug", priority=True),
    ]

    def __init__(
        self,
        bridge: StreamingBridge,
        preferences: Preferences | None = None,
        preferences_path: Path | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        preferences = preferences or Preferences()
        self._bridge = bridge
        self._preferences_path = preferences_path
        self._log_level = log_level
        self._state = UIStateMachine(
            models=model_ids(),
            current_model=bridge.engine.model,
            require_confirmation=preferences.require_tool_confirmation,
            enable_thinking=preferences.enable_thinking_mode,
        )
        self._rendered_revision = -1

    @property
    def state(self) -> UIStateMachine:
        return self._state

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield TranscriptView(id="transcript")
        yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield StatusBar(id="status-bar")
            yield InputBar(id="input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(AGENT_DARK)
        self.theme = "cliagent-dark"

        if self._log_level is not None:
            log_panel = self.query_one("#debug-panel", DebugPanel)
            log_panel.log_level = LogLevel.parse(self._log_level)
            log_panel.show()
            log_panel.record(
                "TUI", f"Log panel enabled with level: {log_panel.log_level.name}", LogLevel.INFO
            )

        self._bridge.set_debug_callback(self._debug_callback)
        self._bridge.engine.set_debug_callback(self._debug_callback)

        self._state.add_entry(EntryKind.WELCOME, WELCOME_MESSAGE)
        self._render_state()
        self.set_interval(DRAIN_INTERVAL, self._drain)
        self.query_one("#input-bar", InputBar).focus_input()

    async def on_unmount(self) -> None:
        """Cancel any running turn before the loop goes away."""
        self._bridge.set_debug_callback(None)
        self._bridge.engine.set_debug_callback(None)
        await self._bridge.shutdown()

    # -- logging -----------------------------------------------------------

    def _call_thread_safe(self, func: Any, *args: Any, **kwargs: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        if self._thread_id != threading.get_ident():
            self.call_from_thread(func, *args, **kwargs)
        else:
            func(*args, **kwargs)

    def _debug_callback(self, level: str, component: str, message: str) -> None:
        """Route debug messages from any component to the log panel.

        Tools log from worker threads, so the write is marshalled onto the
        app thread.
        """
        self._call_thread_safe(self._write_log, component, message, LogLevel.parse(level))

    def _write_log(self, component: str, message: str, level: LogLevel) -> None:
        self.query_one("#debug-panel", DebugPanel).record(component, message, level)

    def _log(self, message: str, level: str = "info") -> None:
        self._debug_callback(level, "TUI", message)

    # -- event loop --------------------------------------------------------

    def _drain(self) -> None:
        """Fold everything the running turn has published into the state."""
        events = self._bridge.poll()
        if events:
            self._state.apply_all(events)
        self._state.sync_confirmation()
        if self._state.revision != self._rendered_revision:
            self._render_state()
        elif self._state.busy:
            self._update_status()

    def _render_state(self) -> None:
        self._rendered_revision = self._state.revision
        self.query_one("#transcript", TranscriptView).sync(self._state.entries)
        self._update_status()
        self._sync_screens()

    def _update_status(self) -> None:
        usage = self._bridge.engine.token_usage
        spinner = ""
        if self._state.busy:
            spinner = SPINNER_FRAMES[int(time.monotonic() * SPINNER_RATE) % len(SPINNER_FRAMES)]
        self.query_one("#status-bar", StatusBar).update_status(
            model=self._state.current_model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            require_confirmation=self._state.require_confirmation,
            enable_thinking=self._state.enable_thinking,
            mode=self._state.state.value,
            spinner=spinner,
        )

    def _close_overlays(self) -> None:
        while isinstance(self.screen, (ToolConfirmScreen, ModelSelectScreen)):
            self.pop_screen()

    def _sync_screens(self) -> None:
        """Push, refresh or pop the modal screens to match the UI state."""
        state = self._state.state
        top = self.screen
        if state is UIState.TOOL_CONFIRM and self._state.pending is not None:
            if isinstance(top, ToolConfirmScreen) and top.request is self._state.pending:
                return
            self._close_overlays()
            self.push_screen(ToolConfirmScreen(self._state.pending))
        elif state is UIState.MODEL_SELECT:
            if isinstance(top, ModelSelectScreen):
                top.refresh_from(self._state)
                return
            self._close_overlays()
            self.push_screen(ModelSelectScreen(self._state))
        else:
            self._close_overlays()

    # -- input -------------------------------------------------------------

    def on_input_bar_submitted(self, event: InputBar.Submitted) -> None:
        """Handle user input submission."""
        if not self._state.submit(event.value):
            if self._state.busy:
                self.notify("Please wait for the current response", severity="warning", timeout=2)
            return
        self._log(f"Starting turn: '{event.value[:50]}'")
        self._bridge.start_turn(
            event.value,
            confirmation_required=self._state.require_confirmation,
            enable_thinking=self._state.enable_thinking,
        )
        self._render_state()

    def on_entry_widget_toggled(self, event: EntryWidget.Toggled) -> None:
        if self._state.toggle_collapsed(event.entry_id):
            self._render_state()

    def action_dispatch_key(self, key: str) -> None:
        self.dispatch_key(key)

    def dispatch_key(self, key: str) -> None:
        """Run a key through the state machine and perform what it asks for."""
        action = self._state.handle_key(key)
        self._perform(action)
        if self._state.revision != self._rendered_revision:
            self._render_state()

    def _perform(self, action: KeyAction) -> None:
        if action is KeyAction.QUIT:
            self.exit()
        elif action is KeyAction.CANCEL_TURN:
            if self._bridge.cancel():
                self._log("Turn cancelled by user")
        elif action is KeyAction.CLEAR_CONVERSATION:
            self._bridge.engine.clear_conversation()
            self.notify("Conversation cleared", timeout=2)
        elif action is KeyAction.MODEL_CHANGED:
            self._bridge.engine.model = self._state.current_model
            self._log(f"Model switched to {self._state.current_model}")
            self._save_preferences()
        elif action is KeyAction.PREFERENCES_CHANGED:
            self._save_preferences()

    def _save_preferences(self) -> None:
        if self._preferences_path is None:
            return
        preferences = Preferences(
            selected_model=self._state.current_model,
            require_tool_confirmation=self._state.require_confirmation,
            enable_thinking_mode=self._state.enable_thinking,
        )
        try:
            preferences.save(self._preferences_path)
        except OSError as e:
            self._debug_callback("error", "Prefs", f"Failed to save preferences: {e}")
            self._state.add_notice(f"Failed to save preferences: {e}", is_error=True)
        else:
            self._debug_callback("debug", "Prefs", f"Preferences saved to {self._preferences_path}")

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)


async def run_tui(
    bridge: StreamingBridge,
    preferences: Preferences | None = None,
    preferences_path: Path | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        bridge: Streaming bridge wrapping the conversation engine
        preferences: Initial toggles and model
        preferences_path: Where toggles and model changes are persisted, None to skip
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = AgentApp(
        bridge=bridge,
        preferences=preferences,
        preferences_path=preferences_path,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await bridge.shutdown()
