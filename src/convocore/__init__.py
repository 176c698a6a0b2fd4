"""
Convocore: client-side orchestration core of a conversational assistant.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .commands import CommandDispatcher, DispatchContext, HostCallbacks
from .config import AssistantConfig, load_config
from .errors import (
    APIError,
    AskInFlightError,
    CommandError,
    ConvocoreError,
    SessionUnavailableError,
)
from .feedback import FeedbackRegistry, FeedbackSink, FeedbackStateMachine, Rating
from .messages import Message, MessageStore
from .pipeline import AskOptions, AskPipeline
from .quota import QuotaAlert, QuotaMonitor, quota_alert
from .sessions import BackendSession, ModelSessionManager, SessionDescriptor, create_session
from .state import AssistantState
from .widget import AssistantWidget

__all__ = [
    "APIError",
    "AskInFlightError",
    "AskOptions",
    "AskPipeline",
    "AssistantConfig",
    "AssistantState",
    "AssistantWidget",
    "BackendSession",
    "CommandDispatcher",
    "CommandError",
    "ConvocoreError",
    "DispatchContext",
    "FeedbackRegistry",
    "FeedbackSink",
    "FeedbackStateMachine",
    "HostCallbacks",
    "Message",
    "MessageStore",
    "ModelSessionManager",
    "QuotaAlert",
    "QuotaMonitor",
    "Rating",
    "SessionDescriptor",
    "SessionUnavailableError",
    "create_session",
    "load_config",
    "quota_alert",
]
