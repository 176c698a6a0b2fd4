"""Timeline messages and the copy-on-write store that holds them."""

from .models import (
    AssistantMessage,
    BannerKind,
    BannerMessage,
    CommandCall,
    FeedbackPromptMessage,
    Message,
    MessageOption,
    SystemKind,
    SystemMessage,
    Usage,
    UserMessage,
    placeholder,
)
from .rendering import BannerContent, banner_content, system_text
from .store import MessageStore

__all__ = [
    "AssistantMessage",
    "BannerContent",
    "BannerKind",
    "BannerMessage",
    "CommandCall",
    "FeedbackPromptMessage",
    "Message",
    "MessageOption",
    "MessageStore",
    "SystemKind",
    "SystemMessage",
    "Usage",
    "UserMessage",
    "banner_content",
    "placeholder",
    "system_text",
]
