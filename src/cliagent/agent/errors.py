class AgentError(Exception):
    """Base class for agent errors."""


class TransportError(AgentError):
    """The model stream failed; the turn is aborted."""


class EmptyResponseError(TransportError):
    """The model stream produced no candidate at all."""

    def __init__(self, message: str = "no response candidates received from model"):
        super().__init__(message)


class ToolError(AgentError):
    """Raised by a tool when it cannot complete; reported back to the model."""

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message)
        self.tool_name = tool_name


class ConfirmationTimeoutError(AgentError):
    """No answer to a confirmation request arrived in time."""

    def __init__(self, tool_name: str, timeout: float):
        super().__init__(f"Confirmation for '{tool_name}' timed out after {timeout:g}s")
        self.tool_name = tool_name
        self.timeout = timeout


class InvalidTransitionError(AgentError):
    """A UI state transition was requested that the transition table forbids."""

    def __init__(self, state: str, trigger: str):
        super().__init__(f"Invalid transition: {trigger} from {state}")
        self.state = state
        self.trigger = trigger


class ConfigurationError(AgentError):
    """Startup configuration is missing or invalid."""
