"""
cliagent: An AI coding assistant for the terminal.

Streams Gemini responses, runs local tools behind a confirmation gate and
renders the conversation in a Textual TUI. Each module hides a specific
design decision.
"""

__version__ = "0.1.0"

from .agent import ConversationEngine, StreamingBridge
from .llm import create_model_client
from .tools import create_default_registry

__all__ = [
    "ConversationEngine",
    "StreamingBridge",
    "create_model_client",
    "create_default_registry",
]
