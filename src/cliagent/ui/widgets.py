"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history navigation
- Transcript entry rendering and reconciliation
- Status bar formatting
- Log buffering, filtering and copying
"""

from collections import deque
from collections.abc import Sequence

from rich.markup import escape
from rich.text import Text
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click, Paste
from textual.message import Message
from textual.widgets import Button, Input, RichLog, Static

from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_MAX_RECORDS,
    LOG_TIMESTAMP_FORMAT,
    LogLevel,
)
from .formatting import entry_body, entry_header, format_tokens, render_markdown, short_cwd
from .models import EntryKind, InputHistory, LogRecord, TranscriptEntry

# Entry kinds whose body is rendered as markdown; the rest are shown verbatim
MARKDOWN_KINDS = (EntryKind.AGENT, EntryKind.TOOL, EntryKind.THOUGHT, EntryKind.WELCOME)


class EntryWidget(Vertical):
    """One transcript entry: a header line and a collapsible body.

    Clicking the entry posts ``Toggled`` so the owner can flip its collapsed
    state. The widget never mutates the entry itself.
    """

    class Toggled(Message):
        """Posted when the user clicks an entry."""

        def __init__(self, entry_id: int) -> None:
            super().__init__()
            self.entry_id = entry_id

    def __init__(self, entry: TranscriptEntry, *args, **kwargs) -> None:
        super().__init__(*args, classes=f"entry entry-{entry.kind.value}", **kwargs)
        self.entry_id = entry.id
        self._entry = entry
        self._rendered: tuple | None = None
        self._header = Static(classes="entry-header")
        self._body = Static(classes="entry-body")

    def compose(self):
        yield self._header
        yield self._body

    def on_mount(self) -> None:
        self._render_entry()

    def update_entry(self, entry: TranscriptEntry) -> None:
        """Re-render if anything visible about the entry changed."""
        self._entry = entry
        if self.is_mounted:
            self._render_entry()

    def _render_entry(self) -> None:
        entry = self._entry
        key = (entry.content, entry.collapsed, entry.streaming, entry.is_error)
        if key == self._rendered:
            return
        self._rendered = key

        self.set_class(entry.is_error, "-error")
        self.set_class(entry.streaming, "-streaming")
        self.set_class(entry.collapsed, "-collapsed")
        self._header.update(Text(entry_header(entry)))

        body = entry_body(entry)
        if entry.collapsed or not body:
            self._body.display = False
            return
        self._body.display = True
        if entry.kind in MARKDOWN_KINDS:
            self._body.update(render_markdown(body))
        else:
            self._body.update(Text(body))

    def on_click(self, event: Click) -> None:
        event.stop()
        self.post_message(self.Toggled(self.entry_id))


class TranscriptView(VerticalScroll):
    """Scrollable transcript that mirrors the state machine's entry list.

    Entries are matched to widgets by id, so a sync only mounts new entries,
    removes vanished ones and re-renders those whose content changed.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True
    ALLOW_SELECT = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._widgets: dict[int, EntryWidget] = {}

    def sync(self, entries: Sequence[TranscriptEntry]) -> None:
        live = {entry.id for entry in entries}
        for entry_id in [i for i in self._widgets if i not in live]:
            self._widgets.pop(entry_id).remove()

        # Walk backwards so every new widget can be placed before its successor
        following: EntryWidget | None = None
        for entry in reversed(entries):
            widget = self._widgets.get(entry.id)
            if widget is None:
                widget = EntryWidget(entry)
                self._widgets[entry.id] = widget
                if following is None:
                    self.mount(widget)
                else:
                    self.mount(widget, before=following)
            else:
                widget.update_entry(entry)
            following = widget

        self.border_subtitle = f"{len(entries)} entries" if entries else "Conversation history"
        self.scroll_end(animate=False)


class StatusBar(Static):
    """Single-panel status line: model, directory, token usage, toggles.

    The second line lists the keys that apply to the current mode.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = ""
        self._input_tokens = 0
        self._output_tokens = 0
        self._require_confirmation = True
        self._enable_thinking = False
        self._mode = "idle"
        self._spinner = ""

    def on_mount(self) -> None:
        self._update_display()

    def update_status(
        self,
        model: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        require_confirmation: bool = True,
        enable_thinking: bool = False,
        mode: str = "idle",
        spinner: str = "",
    ) -> None:
        """Update the status display.

        Args:
            model: Current model id
            input_tokens: Cumulative input tokens
            output_tokens: Cumulative output tokens
            require_confirmation: Whether tools need approval
            enable_thinking: Whether thinking mode is on
            mode: UI state value (idle, awaiting_response, tool_confirm, model_select)
            spinner: Current busy indicator frame, empty when idle
        """
        self._model = model
        self._input_tokens = input_tokens
        self._output_tokens = output_tokens
        self._require_confirmation = require_confirmation
        self._enable_thinking = enable_thinking
        self._mode = mode
        self._spinner = spinner
        self._update_display()

    def _help_text(self) -> str:
        if self._mode == "tool_confirm":
            return "Y: Confirm | N/Esc: Deny"
        if self._mode == "model_select":
            return "↑↓ Navigate • Enter Select • Esc Cancel"
        confirm = "ON" if self._require_confirmation else "OFF"
        thinking = "ON" if self._enable_thinking else "OFF"
        help_text = f"F2 Model • F3 Confirm:{confirm} • F4 Think:{thinking} • Ctrl+C Exit"
        if self._mode == "awaiting_response":
            help_text = "Esc Cancel • " + help_text
        return help_text

    def _update_display(self) -> None:
        parts = [
            f"[bold cyan]{escape(self._model)}[/]",
            f"[dim]{escape(short_cwd())}[/]",
            format_tokens(self._input_tokens, self._output_tokens),
        ]
        if self._spinner:
            parts.append(f"[bold yellow]{self._spinner} Working...[/]")
        self.update("  ".join(parts) + f"\n[dim]{self._help_text()}[/]")

    def get_plain_text(self) -> str:
        return (
            f"Model: {self._model}  "
            f"Tokens: {self._input_tokens}/{self._output_tokens}"
        )


LEVEL_STYLES = {
    LogLevel.DEBUG: "dim white",
    LogLevel.INFO: "cyan",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "red",
}

COMPONENT_STYLES = {
    "TUI": "cyan",
    "Engine": "green",
    "LLM": "magenta",
    "Tool": "bright_cyan",
    "Bridge": "bright_blue",
    "Prefs": "bright_yellow",
}


class DebugPanel(RichLog):
    """Trace log fed by the debug callbacks of every component.

    Records are buffered, so raising or lowering the level re-filters what
    was already logged. Hidden until --log-level is given or Ctrl+D is
    pressed; a click copies the visible records.
    """

    BORDER_TITLE = "Log"

    def __init__(self, *args, log_level: LogLevel = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(*args, markup=True, highlight=False, auto_scroll=True, wrap=False, **kwargs)
        self._log_level = log_level
        self._records: deque[LogRecord] = deque(maxlen=LOG_MAX_RECORDS)

    @property
    def log_level(self) -> LogLevel:
        return self._log_level

    @log_level.setter
    def log_level(self, level: LogLevel) -> None:
        self._log_level = level
        self.clear()
        for record in self.visible_records():
            self.write(self._markup(record))
        self._update_subtitle()

    def on_mount(self) -> None:
        self.display = False
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        self.border_subtitle = f"Level: {self._log_level.name}" if self.display else "Hidden"

    def visible_records(self) -> list[LogRecord]:
        return [r for r in self._records if r.level >= self._log_level]

    @staticmethod
    def _markup(record: LogRecord) -> str:
        level = LogLevel(record.level)
        timestamp = record.timestamp.strftime(LOG_TIMESTAMP_FORMAT)
        level_style = LEVEL_STYLES.get(level, "white")
        component_style = COMPONENT_STYLES.get(record.component, "white")
        return (
            f"[dim]{timestamp}[/] [{level_style}]{level.name:<7}[/] "
            f"[{component_style}]\\[{record.component}][/] {escape(record.message)}"
        )

    def record(self, component: str, message: str, level: LogLevel = LogLevel.DEBUG) -> None:
        """Buffer a record and show it if it passes the current level.

        Args:
            component: Source component (Engine, LLM, Tool, Bridge, TUI, Prefs)
            message: Log text, shown verbatim and truncated if very long
            level: Record level
        """
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        entry = LogRecord(level=level, component=component, message=message)
        self._records.append(entry)
        if level >= self._log_level:
            self.write(self._markup(entry))

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self._update_subtitle()

    def toggle(self) -> bool:
        """Flip visibility and return whether the panel is now shown."""
        if self.display:
            self.hide()
        else:
            self.show()
        return bool(self.display)

    def get_plain_text(self) -> str:
        return "\n".join(
            f"{r.timestamp.strftime(LOG_TIMESTAMP_FORMAT)} {LogLevel(r.level).name:<7} "
            f"[{r.component}] {r.message}"
            for r in self.visible_records()
        )

    def on_click(self, event: Click) -> None:
        event.stop()
        text = self.get_plain_text()
        if not text:
            self.app.notify("Debug log is empty", timeout=2)
            return
        self.app.copy_to_clipboard(text)
        self.app.notify("Debug log copied", timeout=2)


class HistoryInput(Input):
    """Prompt input; Up/Down browse earlier submissions.

    Pasted text is folded onto one line.
    """

    BINDINGS = [
        Binding("up", "history_previous", "Previous prompt", show=False),
        Binding("down", "history_next", "Next prompt", show=False),
    ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.history = InputHistory(INPUT_HISTORY_MAX_SIZE)

    def _on_paste(self, event: Paste) -> None:
        if event.text:
            self.insert_text_at_cursor(" ".join(event.text.split()))
            event.prevent_default()
            event.stop()

    def _recall(self, text: str | None) -> None:
        if text is not None:
            self.value = text
            self.cursor_position = len(text)

    def action_history_previous(self) -> None:
        self._recall(self.history.previous(self.value))

    def action_history_next(self) -> None:
        self._recall(self.history.next())


class InputBar(Horizontal):
    """Prompt input with history and a Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        yield HistoryInput(placeholder="Ask me anything...", id="chat-input")
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Enter)"
        )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def _submit(self) -> None:
        text_input = self.query_one("#chat-input", HistoryInput)
        value = text_input.value.strip()
        if value:
            text_input.history.add(value)
            text_input.value = ""
            self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", HistoryInput).focus()
