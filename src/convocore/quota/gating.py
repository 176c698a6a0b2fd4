"""Send-button gating derived from session and conversation state."""

from ..config import QUOTA_BREACHED_REASON
from ..sessions import Conversation, InitLimitation


def conversation_locked(conversation: Conversation | None, limitation: InitLimitation | None) -> bool:
    """Whether new messages are blocked for the current conversation.

    A quota-breached session without an active conversation is locked, as is
    a read-only conversation.
    """
    if conversation is None:
        return limitation is not None and limitation.reason == QUOTA_BREACHED_REASON
    return conversation.locked


def send_disabled(
    in_progress: bool,
    conversation: Conversation | None,
    limitation: InitLimitation | None
) -> bool:
    """Whether the send action should be disabled."""
    return in_progress or conversation_locked(conversation, limitation)
