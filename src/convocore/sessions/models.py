"""Data models shared by backend sessions and the ask pipeline.

A reply is an ordered list of fragments. The core only looks at the tagged
fragment shapes below; adapter wire formats never leak past a session.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..messages import Usage

if TYPE_CHECKING:
    from .base import BackendSession


class ReplyOption(BaseModel):
    """An option offered by an options fragment."""

    model_config = ConfigDict(frozen=True)

    text: str
    value: str
    option_id: str | None = None


class TextFragment(BaseModel):
    """Plain assistant text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class OptionsFragment(BaseModel):
    """Assistant text with selectable options."""

    model_config = ConfigDict(frozen=True)

    type: Literal["options"] = "options"
    text: str | None = None
    options: tuple[ReplyOption, ...] = ()


class CommandFragment(BaseModel):
    """A side-effecting command the assistant asks the client to run."""

    model_config = ConfigDict(frozen=True)

    type: Literal["command"] = "command"
    command: str
    args: tuple[str, ...] = ()


class PauseFragment(BaseModel):
    """A pacing hint; carries no content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pause"] = "pause"
    time: int = Field(default=0, ge=0, description="Pause length in milliseconds")
    is_typing: bool = False


Fragment = Annotated[
    TextFragment | OptionsFragment | CommandFragment | PauseFragment,
    Field(discriminator="type"),
]


class BackendReply(BaseModel):
    """Everything a session returns for one user turn."""

    model_config = ConfigDict(frozen=True)

    fragments: tuple[Fragment, ...] = ()
    conversation_id: str | None = None
    usage: Usage | None = None


class SendOptions(BaseModel):
    """Per-request options passed through to a session."""

    model_config = ConfigDict(frozen=True)

    option_id: str | None = None
    stream: bool = False


class Conversation(BaseModel):
    """A backend conversation."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = ""
    locked: bool = False
    created_at: datetime = Field(default_factory=datetime.now)


class InitLimitation(BaseModel):
    """A restriction reported by a session during initialization."""

    model_config = ConfigDict(frozen=True)

    reason: str
    detail: str | None = None


@dataclass(frozen=True)
class SessionDescriptor:
    """One selectable backend ("model")."""

    model_id: str
    session: "BackendSession"
    supports_history: bool = False
    supports_streaming: bool = False
    title: str = ""
    description: str = ""
    is_preview: bool = False
    docs_url: str | None = None
    routes: tuple[str, ...] = ()  # Host paths where this model is preferred


@dataclass(frozen=True)
class SessionCandidate:
    """A descriptor together with its authentication status.

    authenticated is None while the check is still running.
    """

    descriptor: SessionDescriptor
    authenticated: bool | None = None
    error: Exception | None = field(default=None, compare=False)
