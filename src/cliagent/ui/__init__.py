"""Terminal UI module for cliagent.

Provides a Textual-based TUI over the streaming bridge.

Module structure (each module hides a design decision):
- models.py: Transcript entries, log records and input history
- state.py: UI state machine (modes, keys, event folding)
- formatting.py: Markdown and status text
- widgets.py: Custom widgets (transcript, status bar, input history, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (tool confirmation, model selection)
- app.py: Application orchestration (drain loop, side effects)
"""

from .app import AgentApp, run_tui
from .config import LogLevel
from .models import EntryKind, InputHistory, TranscriptEntry
from .state import KeyAction, Trigger, UIState, UIStateMachine
from .widgets import DebugPanel, EntryWidget, InputBar, StatusBar, TranscriptView

__all__ = [
    "AgentApp",
    "DebugPanel",
    "EntryKind",
    "EntryWidget",
    "InputBar",
    "InputHistory",
    "KeyAction",
    "LogLevel",
    "StatusBar",
    "TranscriptEntry",
    "TranscriptView",
    "Trigger",
    "UIState",
    "UIStateMachine",
    "run_tui",
]
