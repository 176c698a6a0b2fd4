"""Pytest configuration and shared fixtures."""
import asyncio
from collections.abc import Sequence

import pytest

from convocore.commands import CommandDispatcher, DispatchContext, HostCallbacks
from convocore.config import AssistantConfig
from convocore.messages import BannerKind, MessageStore, SystemKind
from convocore.pipeline import AskPipeline
from convocore.sessions import (
    BackendReply,
    BackendSession,
    Conversation,
    InitLimitation,
    SendOptions,
    TextFragment,
)


class ScriptedSession(BackendSession):
    """Backend session that answers from a script.

    Each entry of replies is returned (or raised, if it is an exception) by
    one send_message() call; once the script runs out an empty reply is
    returned. A gate, when set, holds every send until it is released.
    """

    def __init__(
        self,
        replies: Sequence[BackendReply | Exception] = (),
        gate: asyncio.Event | None = None,
        limitation: InitLimitation | None = None,
    ) -> None:
        self.replies = list(replies)
        self.gate = gate
        self.limitation = limitation
        self.sent: list[tuple[str | None, str, SendOptions | None]] = []
        self.init_calls = 0
        self.conversations_created = 0
        self._initialized = False
        self._initializing = False

    async def init(self) -> None:
        self.init_calls += 1
        self._initializing = True
        await asyncio.sleep(0)
        self._initializing = False
        self._initialized = True

    def is_initialized(self) -> bool:
        return self._initialized

    def is_initializing(self) -> bool:
        return self._initializing

    async def send_message(self, conversation_id, text, options=None) -> BackendReply:
        self.sent.append((conversation_id, text, options))
        if self.gate is not None:
            await self.gate.wait()
        if not self.replies:
            return BackendReply()
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def create_new_conversation(self) -> Conversation:
        self.conversations_created += 1
        return Conversation(id=f"conversation-{self.conversations_created}")

    def init_limitation(self) -> InitLimitation | None:
        return self.limitation


def text_reply(*texts: str, **kwargs) -> BackendReply:
    """Reply made of plain text fragments."""
    return BackendReply(fragments=tuple(TextFragment(text=t) for t in texts), **kwargs)


@pytest.fixture
def fast_config():
    """Return a configuration without pacing delays."""
    return AssistantConfig(min_response_delay=0)


@pytest.fixture
def store():
    """Return an empty message store."""
    return MessageStore()


@pytest.fixture
def session():
    """Return a scripted session with an empty script."""
    return ScriptedSession()


@pytest.fixture
def dispatcher():
    """Return a dispatcher with the default handlers."""
    return CommandDispatcher()


@pytest.fixture
def pipeline(store, session, dispatcher, fast_config):
    """Return a pipeline wired to the scripted session."""
    return AskPipeline(store, lambda: session, dispatcher, config=fast_config)


class RecordingContext:
    """Collects what command handlers append."""

    def __init__(self, host: HostCallbacks | None = None, environment: str = "stage") -> None:
        self.system: list[tuple[SystemKind, tuple[str, ...]]] = []
        self.banners: list[tuple[BannerKind, tuple[str, ...]]] = []
        self.prompts: list[tuple[str, str]] = []
        self.context = DispatchContext(
            add_system_message=lambda kind, args: self.system.append((kind, tuple(args))),
            add_banner=lambda kind, args: self.banners.append((kind, tuple(args))),
            add_thumbs_prompt=lambda up, down: self.prompts.append((up, down)),
            host=host or HostCallbacks(),
            environment=environment,
        )


@pytest.fixture
def recording():
    """Return a recording dispatch context."""
    return RecordingContext()
