"""The assistant widget: composition root of the orchestration core.

Everything a single widget instance needs is created at mount and dropped
at unmount. Renderers read the store snapshot, the quota alert and the
feedback records; they talk back only through the methods below.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from .commands import AccountAPI, CommandDispatcher, HostCallbacks
from .config import SESSION_START_COMMAND, AssistantConfig
from .feedback import (
    FeedbackRegistry,
    FeedbackSink,
    FeedbackStateMachine,
    Thumb,
    ThumbsSelection,
    create_feedback_sink,
)
from .messages import (
    BannerKind,
    FeedbackPromptMessage,
    Message,
    MessageOption,
    MessageStore,
)
from .pipeline import AskOptions, AskPipeline
from .quota import QuotaAlert, QuotaMonitor, conversation_locked, send_disabled
from .sessions import BackendSession, Conversation, InitLimitation, ModelSessionManager
from .state import AssistantState, StateSnapshot

logger = logging.getLogger(__name__)


class AssistantWidget:
    """One mounted assistant.

    Args:
        sessions: Selection of available backend sessions
        config: Runtime settings
        host: Host-provided side effects
        state: Shared state; a private one is created when omitted
        sink: Feedback destination; picked from config when omitted
        dispatcher: Command dispatcher; built from config when omitted
    """

    def __init__(
        self,
        sessions: ModelSessionManager,
        config: AssistantConfig | None = None,
        host: HostCallbacks | None = None,
        state: AssistantState | None = None,
        sink: FeedbackSink | None = None,
        dispatcher: CommandDispatcher | None = None,
    ) -> None:
        self.config = config or AssistantConfig()
        self.host = host or HostCallbacks()
        self.state = state or AssistantState()
        self.sessions = sessions
        self.store = MessageStore()
        self.dispatcher = dispatcher or CommandDispatcher(
            api=AccountAPI(base_url=self.config.sso_base_url, timeout=self.config.http_timeout),
            known_tours=self.config.known_tours,
        )
        self.pipeline = AskPipeline(
            self.store,
            self._current_session,
            self.dispatcher,
            config=self.config,
            host=self.host,
        )
        self.quota = QuotaMonitor(self.store, self.config.quota_warning_margin)
        self._sink = sink or create_feedback_sink(self.config, self.host)
        self.feedback = FeedbackRegistry(
            self._sink,
            self._conversation_id,
            clipboard=self.host.copy_to_clipboard,
        )
        self.thumbs = ThumbsSelection()
        self._tasks: set[asyncio.Task[None]] = set()
        self._unsubscribers: list[Callable[[], None]] = []
        self._mounted = False
        self._opening = False

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.store.all()

    @property
    def conversation(self) -> Conversation | None:
        return self.pipeline.conversation

    @property
    def quota_alert(self) -> QuotaAlert | None:
        return self.quota.alert

    @property
    def init_limitation(self) -> InitLimitation | None:
        session = self._current_session()
        return session.init_limitation() if session is not None else None

    @property
    def conversation_locked(self) -> bool:
        return conversation_locked(self.pipeline.conversation, self.init_limitation)

    @property
    def send_disabled(self) -> bool:
        return send_disabled(self.pipeline.in_progress, self.pipeline.conversation, self.init_limitation)

    async def mount(self) -> None:
        """Attach to shared state and the session manager."""
        if self._mounted:
            return
        self._mounted = True
        self._unsubscribers.append(self.state.subscribe(self._on_state_change))
        self._unsubscribers.append(self.sessions.subscribe(self._on_model_change))

        if self.state.current_model is not None:
            self.sessions.select(self.state.current_model)
        elif self.sessions.current_model_id is not None:
            self.state.update(current_model=self.sessions.current_model_id)

        if self.state.is_open:
            await self.open()

    async def open(self) -> None:
        """Show the widget: initialize the session and flush any pending message."""
        self._opening = True
        try:
            self.state.update(is_open=True)
            self.sessions.set_open(True)
        finally:
            self._opening = False
        await self.sessions.settle()
        await self._send_pending()

    async def close(self) -> None:
        self.state.update(is_open=False)
        self.sessions.set_open(False)

    async def unmount(self) -> None:
        """Tear down; in-flight turns finish without touching the timeline."""
        self.pipeline.detach()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.quota.close()
        self.sessions.set_open(False)
        for task in list(self._tasks):
            task.cancel()
        await self.dispatcher.close()
        close = getattr(self._sink, "close", None)
        if close is not None:
            await close()
        self._mounted = False

    async def send(self, text: str, options: AskOptions | None = None) -> bool:
        """Send user text through the pipeline.

        Returns:
            False if sending is disabled or the text is too long
        """
        if self.send_disabled:
            logger.warning("Send is disabled, dropping message")
            return False
        limit = self.config.max_message_length
        if len(text) > limit:
            self.pipeline.add_banner(BannerKind.MESSAGE_TOO_LONG, (str(limit),))
            return False
        await self.pipeline.ask(text, options)
        return True

    async def select_option(self, option: MessageOption) -> bool:
        """Answer an options message with one of its options."""
        return await self.send(
            option.value,
            AskOptions(option_id=option.option_id, label=option.label)
        )

    async def select_thumb(self, prompt: FeedbackPromptMessage, thumb: Thumb) -> bool:
        """Answer a thumbs prompt; repeated selections are ignored."""
        payload = self.thumbs.select(prompt, thumb)
        if payload is None:
            return False
        return await self.send(payload, AskOptions(hide_user_echo=True))

    def feedback_for(self, message: Message) -> FeedbackStateMachine:
        return self.feedback.feedback_for(message)

    async def start(self) -> None:
        """Open the backend session with a hidden session-start turn."""
        await self.pipeline.ask(
            SESSION_START_COMMAND,
            AskOptions(hide_user_echo=True, wait_for_all_responses=False)
        )

    def stop(self) -> None:
        """Forget the conversation and its per-message state."""
        self.pipeline.reset()
        self.feedback.clear()
        self.thumbs.clear()

    async def new_conversation(self) -> Conversation:
        """Start a fresh conversation, e.g. after the quota was reached."""
        conversation = await self.pipeline.start_new_conversation()
        self.feedback.clear()
        self.thumbs.clear()
        await self._send_pending()
        return conversation

    def _current_session(self) -> BackendSession | None:
        descriptor = self.sessions.current
        return descriptor.session if descriptor is not None else None

    def _conversation_id(self) -> str | None:
        conversation = self.pipeline.conversation
        return conversation.id if conversation is not None else None

    def _on_model_change(self, model_id: str | None) -> None:
        self.state.update(current_model=model_id)

    def _on_state_change(self, snapshot: StateSnapshot) -> None:
        if snapshot.current_model is not None and snapshot.current_model != self.sessions.current_model_id:
            self.sessions.select(snapshot.current_model)
        if snapshot.is_open != self.sessions.is_open:
            self.sessions.set_open(snapshot.is_open)
        if snapshot.is_open and snapshot.message and not self._opening:
            self._schedule(self._send_pending())

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Picked up by the next open()
            coro.close()
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._log_failure)

    async def _send_pending(self) -> None:
        message = self.state.message
        if not message or not self.state.is_open or self.pipeline.in_progress:
            return
        if self.conversation_locked:
            logger.info("Conversation is locked, keeping the pending message")
            return
        self.state.update(message=None)
        if not await self.send(message):
            logger.warning("Pending message was refused (%d characters)", len(message))

    @staticmethod
    def _log_failure(task: "asyncio.Task[None]") -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Sending the pending message failed: %s", task.exception())
