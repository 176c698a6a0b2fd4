"""Backend session contract, reply models and model selection."""

from .base import BackendSession
from .factory import create_session
from .manager import ModelSessionManager, resolve_available
from .models import (
    BackendReply,
    CommandFragment,
    Conversation,
    Fragment,
    InitLimitation,
    OptionsFragment,
    PauseFragment,
    ReplyOption,
    SendOptions,
    SessionCandidate,
    SessionDescriptor,
    TextFragment,
)
from .talk import TalkSession

__all__ = [
    "BackendReply",
    "BackendSession",
    "CommandFragment",
    "Conversation",
    "Fragment",
    "InitLimitation",
    "ModelSessionManager",
    "OptionsFragment",
    "PauseFragment",
    "ReplyOption",
    "SendOptions",
    "SessionCandidate",
    "SessionDescriptor",
    "TalkSession",
    "TextFragment",
    "create_session",
    "resolve_available",
]
