"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

from enum import IntEnum


class LogLevel(IntEnum):
    """Log panel threshold; a record is shown when its level >= the panel's."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """Map 'debug' / 'info' / 'warning' / 'error' to a level (DEBUG if unknown)."""
        return cls.__members__.get(value.upper(), cls.DEBUG)


# Event drain loop
DRAIN_INTERVAL = 1 / 30  # Seconds between channel drains

# Busy indicator
SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
SPINNER_RATE = 10  # Frames per second

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Output truncation limits
MAX_TOOL_RESULT_LENGTH = 2000  # Characters before truncating tool results in the transcript

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages
LOG_MAX_RECORDS = 2000  # Records kept for re-filtering when the level changes

# Status bar configuration
TOKEN_WARNING_THRESHOLD = 500_000  # Total tokens before the counter turns red

WELCOME_MESSAGE = (
    "Welcome to the AI Code Assistant! Type your request below and press Enter "
    "to send, or press F2 to select a different model."
)
