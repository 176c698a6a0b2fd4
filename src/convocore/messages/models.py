"""Data models for timeline messages.

Every message is an immutable pydantic model tagged by its origin. The
timeline holds a heterogeneous sequence of these records.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class SystemKind(str, Enum):
    """Wire-stable kinds of system (timeline) messages."""

    EMPTY_RESPONSE = "empty-response"
    REQUEST_ERROR = "request-error"
    REDIRECT = "redirect-message"
    FINISH_CONVERSATION = "finish-conversation-message"


class BannerKind(str, Enum):
    """Wire-stable kinds of interface banners."""

    FINISH_CONVERSATION = "finish-conversation-banner"
    REQUEST_ERROR = "request-error"
    CREATE_SERVICE_ACCOUNT = "create-service-account"
    CREATE_SERVICE_ACCOUNT_FAILED = "create-service-account-failed"
    TOGGLE_ORG_2FA = "toggle-org-2fa"
    TOGGLE_ORG_2FA_FAILED = "toggle-org-2fa-failed"
    MESSAGE_TOO_LONG = "message-too-long"


class MessageOption(BaseModel):
    """A selectable option attached to an assistant message."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Text shown to the user")
    value: str = Field(description="Text sent back when selected")
    option_id: str | None = Field(default=None, description="Backend option identifier")


class CommandCall(BaseModel):
    """A command declared by the assistant, as received."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(description="Wire name of the command")
    args: tuple[str, ...] = Field(default=(), description="Positional command arguments")


class Usage(BaseModel):
    """Quota counters attached to an assistant message."""

    model_config = ConfigDict(frozen=True)

    used: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)
    enabled: bool = True


class _BaseMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=datetime.now)


class UserMessage(_BaseMessage):
    """Text typed (or selected) by the user."""

    origin: Literal["user"] = "user"
    text: str


class AssistantMessage(_BaseMessage):
    """A resolved assistant response, or the placeholder standing in for one."""

    origin: Literal["assistant"] = "assistant"
    text: str | None = None
    options: tuple[MessageOption, ...] | None = None
    command: CommandCall | None = None
    is_loading: bool = False
    usage: Usage | None = None


class SystemMessage(_BaseMessage):
    """A timeline line rendered from a fixed per-kind template."""

    origin: Literal["system"] = "system"
    kind: SystemKind
    args: tuple[str, ...] = ()


class BannerMessage(_BaseMessage):
    """A persistent alert rendered from a fixed per-kind template."""

    origin: Literal["interface-banner"] = "interface-banner"
    kind: BannerKind
    args: tuple[str, ...] = ()


class FeedbackPromptMessage(_BaseMessage):
    """A standalone thumbs-up/thumbs-down prompt."""

    origin: Literal["feedback-prompt"] = "feedback-prompt"
    thumbs_up: str = Field(description="Payload asked when thumbs up is selected")
    thumbs_down: str = Field(description="Payload asked when thumbs down is selected")


Message = Annotated[
    UserMessage | AssistantMessage | SystemMessage | BannerMessage | FeedbackPromptMessage,
    Field(discriminator="origin"),
]


def placeholder(message_id: str | None = None) -> AssistantMessage:
    """Create a loading placeholder for an assistant response."""
    if message_id is None:
        return AssistantMessage(is_loading=True)
    return AssistantMessage(id=message_id, is_loading=True)
