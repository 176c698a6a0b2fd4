"""Per-message feedback: state machine, sinks and thumbs prompts."""

from .factory import create_feedback_sink
from .sink import FeedbackPayload, FeedbackSink, IssueFeedbackSink, LogFeedbackSink, Rating
from .state import (
    FeedbackActions,
    FeedbackCompletion,
    FeedbackForm,
    FeedbackPhase,
    FeedbackRecord,
    FeedbackRegistry,
    FeedbackStateMachine,
)
from .thumbs import Thumb, ThumbsSelection

__all__ = [
    "FeedbackActions",
    "FeedbackCompletion",
    "FeedbackForm",
    "FeedbackPayload",
    "FeedbackPhase",
    "FeedbackRecord",
    "FeedbackRegistry",
    "FeedbackSink",
    "FeedbackStateMachine",
    "IssueFeedbackSink",
    "LogFeedbackSink",
    "Rating",
    "Thumb",
    "ThumbsSelection",
    "create_feedback_sink",
]
