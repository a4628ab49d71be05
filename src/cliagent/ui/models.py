"""Data models for the TUI.

Hides the internal representation of transcript entries, log records and
input history.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EntryKind(str, Enum):
    """What a transcript entry shows."""

    WELCOME = "welcome"
    USER = "user"
    AGENT = "agent"
    TOOL = "tool"
    THOUGHT = "thought"
    NOTICE = "notice"

    @property
    def collapsible(self) -> bool:
        return self in (EntryKind.TOOL, EntryKind.THOUGHT)


@dataclass
class TranscriptEntry:
    """A rendered item of the conversation transcript.

    Only the UI state machine mutates entries; widgets read them.
    """

    id: int
    kind: EntryKind
    content: str
    is_error: bool = False
    streaming: bool = False
    collapsed: bool = False
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class LogRecord:
    """A line of the log panel, kept so it can be re-filtered."""

    level: int
    component: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)


class InputHistory:
    """Submitted prompts, browsable newest-first.

    Browsing starts from the draft being typed; stepping past the newest
    entry gives the draft back.
    """

    def __init__(self, max_size: int):
        self._entries: list[str] = []
        self._max_size = max_size
        self._cursor: int | None = None
        self._draft = ""

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, text: str) -> None:
        """Record a submission; consecutive duplicates are stored once."""
        if text and (not self._entries or self._entries[-1] != text):
            self._entries.append(text)
            del self._entries[:-self._max_size]
        self._cursor = None
        self._draft = ""

    def previous(self, current: str) -> str | None:
        """Step to an older entry; None when there is no history."""
        if not self._entries:
            return None
        if self._cursor is None:
            self._draft = current
            self._cursor = len(self._entries) - 1
        elif self._cursor > 0:
            self._cursor -= 1
        return self._entries[self._cursor]

    def next(self) -> str | None:
        """Step to a newer entry or back to the draft; None when not browsing."""
        if self._cursor is None:
            return None
        if self._cursor < len(self._entries) - 1:
            self._cursor += 1
            return self._entries[self._cursor]
        self._cursor = None
        return self._draft
