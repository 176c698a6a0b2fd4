"""Abstract base class for backend sessions.

This module hides which assistant backend answers the user. Implementations
own the network protocol, authentication and conversation bookkeeping of
their backend.
"""

from abc import ABC, abstractmethod

from .models import BackendReply, Conversation, InitLimitation, SendOptions


class BackendSession(ABC):
    """Uniform contract every backend adapter exposes to the core."""

    @abstractmethod
    async def init(self) -> None:
        """Initialize the session (authenticate, open a conversation, ...)."""

    @abstractmethod
    def is_initialized(self) -> bool:
        """Whether init() has completed successfully."""

    @abstractmethod
    def is_initializing(self) -> bool:
        """Whether init() is currently running."""

    @abstractmethod
    async def send_message(
        self,
        conversation_id: str | None,
        text: str,
        options: SendOptions | None = None
    ) -> BackendReply:
        """Send one user turn and return the backend reply.

        Args:
            conversation_id: Conversation to post into (None lets the backend pick)
            text: User text
            options: Request options such as a selected option id

        Returns:
            The reply fragments for this turn

        Raises:
            Exception: Adapter-specific network or protocol errors
        """

    @abstractmethod
    async def create_new_conversation(self) -> Conversation:
        """Start a fresh conversation."""

    def init_limitation(self) -> InitLimitation | None:
        """Restriction reported during init, if any."""
        return None

    async def close(self) -> None:
        """Release any open connections."""
