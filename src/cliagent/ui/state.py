"""UI state machine.

Interprets key presses and stream events, and maintains the transcript the
widgets render. Has no Textual dependency so it can be driven directly.

States and transitions:

    Idle --submit--> AwaitingResponse --terminal--> Idle
    AwaitingResponse --confirmation request--> ToolConfirm
    ToolConfirm --answered / expired--> AwaitingResponse
    ToolConfirm --terminal--> Idle
    Idle --open--> ModelSelect --close--> Idle
"""

from collections.abc import Sequence
from enum import Enum

from ..agent.data_structures import MessageKind
from ..agent.errors import InvalidTransitionError
from ..agent.events import (
    Complete,
    ConfirmationRequest,
    Error,
    StreamEvent,
    TextChunk,
    ThoughtMessage,
    ToolMessage,
)
from .models import EntryKind, TranscriptEntry

STREAM_SEPARATOR = "\n\n"


class UIState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    MODEL_SELECT = "model_select"
    TOOL_CONFIRM = "tool_confirm"


class Trigger(str, Enum):
    SUBMIT = "submit"
    TERMINAL = "terminal"
    CONFIRMATION_REQUESTED = "confirmation_requested"
    CONFIRMATION_SETTLED = "confirmation_settled"
    OPEN_MODEL_SELECT = "open_model_select"
    CLOSE_MODEL_SELECT = "close_model_select"


TRANSITIONS: dict[tuple[UIState, Trigger], UIState] = {
    (UIState.IDLE, Trigger.SUBMIT): UIState.AWAITING_RESPONSE,
    (UIState.AWAITING_RESPONSE, Trigger.TERMINAL): UIState.IDLE,
    (UIState.AWAITING_RESPONSE, Trigger.CONFIRMATION_REQUESTED): UIState.TOOL_CONFIRM,
    (UIState.TOOL_CONFIRM, Trigger.CONFIRMATION_SETTLED): UIState.AWAITING_RESPONSE,
    (UIState.TOOL_CONFIRM, Trigger.TERMINAL): UIState.IDLE,
    (UIState.IDLE, Trigger.OPEN_MODEL_SELECT): UIState.MODEL_SELECT,
    (UIState.MODEL_SELECT, Trigger.CLOSE_MODEL_SELECT): UIState.IDLE,
}


class KeyAction(str, Enum):
    """What the application must do after a key was handled."""

    IGNORED = "ignored"
    HANDLED = "handled"
    QUIT = "quit"
    CANCEL_TURN = "cancel_turn"
    CLEAR_CONVERSATION = "clear_conversation"
    PREFERENCES_CHANGED = "preferences_changed"
    MODEL_CHANGED = "model_changed"


class UIStateMachine:
    """Holds the interaction mode, transcript and toggles of the TUI.

    Hidden design decisions:
    - Transition table and which keys each state accepts
    - Where tool and thought entries are placed relative to streamed text
    - Idempotent turn finalization
    """

    def __init__(
        self,
        models: Sequence[str],
        current_model: str,
        require_confirmation: bool = True,
        enable_thinking: bool = False,
    ):
        self.state = UIState.IDLE
        self.entries: list[TranscriptEntry] = []
        self.models = list(models)
        if current_model not in self.models:
            self.models.append(current_model)
        self.current_model = current_model
        self.model_cursor = self.models.index(current_model)
        self.require_confirmation = require_confirmation
        self.enable_thinking = enable_thinking
        self.pending: ConfirmationRequest | None = None
        self.revision = 0
        self._streaming: TranscriptEntry | None = None
        self._interrupted = False
        self._turn_active = False
        self._next_id = 0

    # -- transitions -------------------------------------------------------

    def can(self, trigger: Trigger) -> bool:
        return (self.state, trigger) in TRANSITIONS

    def fire(self, trigger: Trigger) -> UIState:
        """Apply a transition from the table.

        Raises:
            InvalidTransitionError: If the current state does not accept the trigger
        """
        target = TRANSITIONS.get((self.state, trigger))
        if target is None:
            raise InvalidTransitionError(self.state.value, trigger.value)
        self.state = target
        self._touch()
        return target

    @property
    def busy(self) -> bool:
        return self.state in (UIState.AWAITING_RESPONSE, UIState.TOOL_CONFIRM)

    # -- transcript --------------------------------------------------------

    def _touch(self) -> None:
        self.revision += 1

    def _new_entry(self, kind: EntryKind, content: str, is_error: bool = False) -> TranscriptEntry:
        self._next_id += 1
        return TranscriptEntry(
            id=self._next_id,
            kind=kind,
            content=content,
            is_error=is_error,
            collapsed=kind.collapsible,
        )

    def add_entry(self, kind: EntryKind, content: str, is_error: bool = False) -> TranscriptEntry:
        entry = self._new_entry(kind, content, is_error)
        self.entries.append(entry)
        self._touch()
        return entry

    def add_notice(self, content: str, is_error: bool = False) -> TranscriptEntry:
        return self.add_entry(EntryKind.NOTICE, content, is_error)

    def find_entry(self, entry_id: int) -> TranscriptEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def toggle_collapsed(self, entry_id: int) -> bool:
        """Flip one tool or thought entry; returns False for other entries."""
        entry = self.find_entry(entry_id)
        if entry is None or not entry.kind.collapsible:
            return False
        entry.collapsed = not entry.collapsed
        self._touch()
        return True

    def toggle_all_collapsed(self) -> None:
        """Collapse every tool and thought entry if any is expanded, else expand all."""
        collapsible = [e for e in self.entries if e.kind.collapsible]
        any_expanded = any(not e.collapsed for e in collapsible)
        for entry in collapsible:
            entry.collapsed = any_expanded
        self._touch()

    def clear_transcript(self) -> None:
        self.entries.clear()
        self._streaming = None
        self._interrupted = False
        self._touch()

    # -- input -------------------------------------------------------------

    def submit(self, text: str) -> bool:
        """Record user input and enter AwaitingResponse.

        Returns:
            True if a turn should be started
        """
        if not text.strip() or not self.can(Trigger.SUBMIT):
            return False
        self.add_entry(EntryKind.USER, text)
        self._streaming = None
        self._interrupted = False
        self._turn_active = True
        self.fire(Trigger.SUBMIT)
        return True

    def handle_key(self, key: str) -> KeyAction:
        """Interpret a key press for the current state."""
        if key == "ctrl+c":
            return KeyAction.QUIT
        if self.state is UIState.TOOL_CONFIRM:
            return self._confirm_key(key)
        if self.state is UIState.MODEL_SELECT:
            return self._model_select_key(key)

        if key == "escape":
            return KeyAction.CANCEL_TURN if self.busy else KeyAction.IGNORED
        if key == "f2":
            if not self.can(Trigger.OPEN_MODEL_SELECT):
                return KeyAction.IGNORED
            self.model_cursor = self.models.index(self.current_model)
            self.fire(Trigger.OPEN_MODEL_SELECT)
            return KeyAction.HANDLED
        if key == "f3":
            self.require_confirmation = not self.require_confirmation
            status = "enabled" if self.require_confirmation else "disabled"
            self.add_notice(f"Tool confirmation {status}")
            return KeyAction.PREFERENCES_CHANGED
        if key == "f4":
            self.enable_thinking = not self.enable_thinking
            if self.enable_thinking:
                self.add_notice("🧠 Thinking mode enabled")
            else:
                self.add_notice("💭 Thinking mode disabled")
            return KeyAction.PREFERENCES_CHANGED
        if key == "ctrl+t":
            self.toggle_all_collapsed()
            return KeyAction.HANDLED
        if key == "ctrl+k":
            if self.busy:
                return KeyAction.IGNORED
            self.clear_transcript()
            return KeyAction.CLEAR_CONVERSATION
        return KeyAction.IGNORED

    def _confirm_key(self, key: str) -> KeyAction:
        if key in ("y", "Y"):
            self.answer_confirmation(True)
            return KeyAction.HANDLED
        if key in ("n", "N", "escape"):
            self.answer_confirmation(False)
            return KeyAction.HANDLED
        return KeyAction.IGNORED

    def _model_select_key(self, key: str) -> KeyAction:
        if key == "up":
            self.model_cursor = (self.model_cursor - 1) % len(self.models)
            self._touch()
            return KeyAction.HANDLED
        if key == "down":
            self.model_cursor = (self.model_cursor + 1) % len(self.models)
            self._touch()
            return KeyAction.HANDLED
        if key == "enter":
            return self.select_model(self.model_cursor)
        if key == "escape":
            self.fire(Trigger.CLOSE_MODEL_SELECT)
            return KeyAction.HANDLED
        return KeyAction.IGNORED

    def select_model(self, index: int) -> KeyAction:
        """Pick a model from the selector and close it."""
        if self.state is not UIState.MODEL_SELECT or not 0 <= index < len(self.models):
            return KeyAction.IGNORED
        self.model_cursor = index
        self.current_model = self.models[index]
        self.fire(Trigger.CLOSE_MODEL_SELECT)
        self.add_notice(f"Model switched to: {self.current_model}")
        return KeyAction.MODEL_CHANGED

    def answer_confirmation(self, approved: bool) -> bool:
        """Answer the pending confirmation request.

        Returns:
            False if there was nothing to answer
        """
        if self.state is not UIState.TOOL_CONFIRM or self.pending is None:
            return False
        self.pending.resolve(approved)
        self.pending = None
        self.fire(Trigger.CONFIRMATION_SETTLED)
        return True

    def sync_confirmation(self) -> bool:
        """Leave ToolConfirm if the pending request expired on the other side.

        Returns:
            True if the overlay must be closed
        """
        if self.state is UIState.TOOL_CONFIRM and self.pending is not None and self.pending.done:
            self.pending = None
            self.fire(Trigger.CONFIRMATION_SETTLED)
            return True
        return False

    # -- stream events -----------------------------------------------------

    def apply(self, event: StreamEvent) -> None:
        """Fold one stream event into the transcript and state."""
        if isinstance(event, TextChunk):
            self._apply_text(event.text)
        elif isinstance(event, ToolMessage):
            self._insert_before_stream(EntryKind.TOOL, event.message.content, event.message.is_error)
        elif isinstance(event, ThoughtMessage):
            self._insert_before_stream(EntryKind.THOUGHT, event.message.content, event.message.is_error)
        elif isinstance(event, ConfirmationRequest):
            self._apply_confirmation(event)
        elif isinstance(event, Complete):
            self._apply_terminal(event)
        elif isinstance(event, Error):
            self._apply_terminal(event)

    def apply_all(self, events: Sequence[StreamEvent]) -> None:
        for event in events:
            self.apply(event)

    def _apply_text(self, text: str) -> None:
        if not self._turn_active:
            return
        if self._streaming is None:
            self._streaming = self._new_entry(EntryKind.AGENT, text)
            self._streaming.streaming = True
            self.entries.append(self._streaming)
        else:
            if self._interrupted:
                self._streaming.content += STREAM_SEPARATOR
            self._streaming.content += text
        self._interrupted = False
        self._touch()

    def _insert_before_stream(self, kind: EntryKind, content: str, is_error: bool) -> None:
        if not self._turn_active:
            return
        entry = self._new_entry(kind, content, is_error)
        if self._streaming is not None:
            self.entries.insert(self.entries.index(self._streaming), entry)
            self._interrupted = True
        else:
            self.entries.append(entry)
        self._touch()

    def _apply_confirmation(self, request: ConfirmationRequest) -> None:
        if not self._turn_active or not self.can(Trigger.CONFIRMATION_REQUESTED):
            request.deny()
            return
        if request.done:
            return
        self.pending = request
        self.fire(Trigger.CONFIRMATION_REQUESTED)

    def _finalize_stream(self) -> None:
        if self._streaming is not None:
            self._streaming.streaming = False
            self._streaming = None
        self._interrupted = False

    def _apply_terminal(self, event: Complete | Error) -> None:
        if not self._turn_active:
            return
        self._turn_active = False
        self._finalize_stream()
        if self.pending is not None:
            self.pending.expire()
            self.pending = None

        if isinstance(event, Error):
            self.add_entry(EntryKind.AGENT, event.message, is_error=True)
        else:
            for message in event.messages:
                if message.kind is MessageKind.AGENT and message.is_error:
                    self.add_entry(EntryKind.AGENT, message.content, is_error=True)

        if self.can(Trigger.TERMINAL):
            self.fire(Trigger.TERMINAL)
        else:
            self._touch()
