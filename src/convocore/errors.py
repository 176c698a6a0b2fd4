"""Exception hierarchy for convocore.

Every error listed here leaves the component that raised it in a stable
state.
"""

from dataclasses import dataclass


class ConvocoreError(Exception):
    """Base class for all convocore errors."""


class AskInFlightError(ConvocoreError):
    """Raised when ask() is called while a previous turn is still running."""

    def __init__(self) -> None:
        super().__init__("A previous ask() call is still in flight")


class SessionUnavailableError(ConvocoreError):
    """Raised when no backend session is selected."""


class CommandError(ConvocoreError):
    """A command handler failed.

    Attributes:
        command_type: Wire name of the command whose handler failed
    """

    def __init__(self, command_type: str, message: str) -> None:
        super().__init__(f"{command_type}: {message}")
        self.command_type = command_type


@dataclass
class APIError(ConvocoreError):
    """HTTP error returned by an account API call."""

    status_code: int
    message: str
    response_text: str = ""

    def __str__(self) -> str:
        return f"APIError(status_code={self.status_code}, message={self.message})"
