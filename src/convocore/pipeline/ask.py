"""The ask pipeline: one user turn from utterance to rendered messages.

Hidden design decisions:
- How placeholders are created, paced and resolved
- How multi-fragment replies are expanded into timeline entries
- How command fragments reach the dispatcher
- How failures are folded back into the timeline
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import assert_never

from pydantic import BaseModel, ConfigDict

from ..commands import CommandDispatcher, DispatchContext, HostCallbacks
from ..config import AssistantConfig
from ..errors import SessionUnavailableError
from ..messages import (
    AssistantMessage,
    BannerKind,
    BannerMessage,
    CommandCall,
    FeedbackPromptMessage,
    Message,
    MessageOption,
    MessageStore,
    SystemKind,
    SystemMessage,
    Usage,
    UserMessage,
    placeholder,
)
from ..sessions import (
    BackendReply,
    BackendSession,
    CommandFragment,
    Conversation,
    Fragment,
    OptionsFragment,
    PauseFragment,
    SendOptions,
    TextFragment,
)
from .delay import scaled_delay
from .guard import Lease, SingleFlight

logger = logging.getLogger(__name__)

SessionProvider = Callable[[], BackendSession | None]
Resolved = tuple[Fragment | None, Usage | None]


class AskOptions(BaseModel):
    """Options for a single ask() call."""

    model_config = ConfigDict(frozen=True)

    hide_user_echo: bool = False
    wait_for_all_responses: bool = True
    option_id: str | None = None
    label: str | None = None  # Echo text when it differs from what is sent


class AskPipeline:
    """Drives user turns against the active backend session.

    The pipeline is the only writer of its MessageStore. Renderers read
    snapshots from the store and never mutate it.
    """

    def __init__(
        self,
        store: MessageStore,
        session_provider: SessionProvider,
        dispatcher: CommandDispatcher,
        config: AssistantConfig | None = None,
        host: HostCallbacks | None = None,
    ) -> None:
        self._store = store
        self._session_provider = session_provider
        self._dispatcher = dispatcher
        self._config = config or AssistantConfig()
        self._host = host or HostCallbacks()
        self._flight = SingleFlight()
        self._conversation: Conversation | None = None
        self._generation = 0
        self._detached = False
        self.error: BaseException | None = None

    @property
    def in_progress(self) -> bool:
        """Whether a user turn is still running."""
        return self._flight.held

    @property
    def conversation(self) -> Conversation | None:
        return self._conversation

    def detach(self) -> None:
        """Stop writing results into the store (widget teardown).

        In-flight requests are not aborted; their results are discarded.
        """
        self._detached = True

    def reset(self) -> None:
        """Forget the conversation and clear the timeline."""
        self._conversation = None
        self._generation += 1
        self.error = None
        if not self._detached:
            self._store.clear()

    async def start_new_conversation(self) -> Conversation:
        """Open a fresh backend conversation and clear the timeline."""
        session = self._require_session()
        conversation = await session.create_new_conversation()
        self.reset()
        self._conversation = conversation
        return conversation

    async def ask(self, text: str, options: AskOptions | None = None) -> None:
        """Run one user turn.

        Args:
            text: What to send; empty text is ignored
            options: Echo, waiting and option-selection settings

        Raises:
            AskInFlightError: If another turn is still running
            Exception: Whatever the session raised, after the failure was
                recorded in the timeline
        """
        if not text:
            return
        options = options or AskOptions()

        lease = self._flight.acquire()
        network_done: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        turn = asyncio.ensure_future(self._run_turn(text, options, lease, network_done))
        turn.add_done_callback(lambda _: lease.release())
        turn.add_done_callback(self._log_unhandled)

        if options.wait_for_all_responses:
            await turn
            return

        # Later fragments keep expanding in the background
        await asyncio.wait({turn, network_done}, return_when=asyncio.FIRST_COMPLETED)
        if turn.done():
            turn.result()

    async def _run_turn(
        self,
        text: str,
        options: AskOptions,
        lease: Lease,
        network_done: "asyncio.Future[None]"
    ) -> None:
        with lease:
            generation = self._generation
            if not options.hide_user_echo:
                self._append(UserMessage(text=options.label or text))

            try:
                session = self._require_session()
                request = asyncio.ensure_future(self._send(session, text, options, network_done))

                async def first_fragment() -> Resolved:
                    reply = await request
                    return (reply.fragments[0] if reply.fragments else None), reply.usage

                await self._load(first_fragment(), self._config.min_response_delay)

                reply = await request
                for fragment in reply.fragments[1:]:
                    if generation != self._generation:
                        logger.debug("Conversation was reset, dropping remaining fragments")
                        return
                    await self._load(self._ready(fragment, reply.usage), self._delay_for(fragment))
            except Exception as exc:
                if generation != self._generation:
                    logger.warning("Turn failed after the conversation was reset: %s", exc)
                    return
                self.error = exc
                logger.error("Error in ask(): %s", exc, exc_info=True)
                self._append(SystemMessage(kind=SystemKind.REQUEST_ERROR))
                self._append(BannerMessage(kind=BannerKind.REQUEST_ERROR))
                raise

    async def _send(
        self,
        session: BackendSession,
        text: str,
        options: AskOptions,
        network_done: "asyncio.Future[None]"
    ) -> BackendReply:
        # A reset while awaiting must not adopt this turn's conversation
        generation = self._generation
        conversation = self._conversation
        if conversation is None:
            conversation = await session.create_new_conversation()
            if generation == self._generation:
                self._conversation = conversation
        reply = await session.send_message(
            conversation.id,
            text,
            SendOptions(option_id=options.option_id)
        )
        if (
            generation == self._generation
            and reply.conversation_id
            and reply.conversation_id != conversation.id
        ):
            self._conversation = conversation.model_copy(update={"id": reply.conversation_id})
        if not network_done.done():
            network_done.set_result(None)
        return reply

    async def _ready(self, fragment: Fragment, usage: Usage | None) -> Resolved:
        return fragment, usage

    def _delay_for(self, fragment: Fragment) -> float:
        if self._config.scaled_delay is None:
            return self._config.min_response_delay
        text = fragment.text if isinstance(fragment, TextFragment | OptionsFragment) else None
        return scaled_delay(text, self._config.scaled_delay)

    async def _load(self, content: Awaitable[Resolved], min_delay: float) -> None:
        pending = placeholder()
        self._append(pending)
        try:
            (fragment, usage), _ = await asyncio.gather(content, asyncio.sleep(min_delay))
        except BaseException:
            self._remove(pending.id)
            raise
        await self._resolve(pending.id, fragment, usage)

    async def _resolve(self, message_id: str, fragment: Fragment | None, usage: Usage | None) -> None:
        if fragment is None:
            self._replace(message_id, SystemMessage(id=message_id, kind=SystemKind.EMPTY_RESPONSE))
        elif isinstance(fragment, TextFragment):
            self._replace(message_id, AssistantMessage(id=message_id, text=fragment.text, usage=usage))
        elif isinstance(fragment, OptionsFragment):
            options = tuple(
                MessageOption(label=o.text, value=o.value, option_id=o.option_id)
                for o in fragment.options
            )
            self._replace(
                message_id,
                AssistantMessage(id=message_id, text=fragment.text, options=options or None, usage=usage)
            )
        elif isinstance(fragment, CommandFragment):
            command = CommandCall(type=fragment.command, args=fragment.args)
            self._replace(message_id, AssistantMessage(id=message_id, command=command, usage=usage))
            if not self._detached:
                await self._dispatcher.dispatch(command.type, command.args, self._dispatch_context())
        elif isinstance(fragment, PauseFragment):
            if fragment.time:
                await asyncio.sleep(fragment.time / 1000)
            self._remove(message_id)
        else:
            assert_never(fragment)

    def _dispatch_context(self) -> DispatchContext:
        return DispatchContext(
            add_system_message=self._add_system_message,
            add_banner=self.add_banner,
            add_thumbs_prompt=self._add_thumbs_prompt,
            host=self._host,
            environment=self._config.environment,
            is_preview=self._config.is_preview,
        )

    def _add_system_message(self, kind: SystemKind, args: Sequence[str]) -> None:
        self._append(SystemMessage(kind=kind, args=tuple(args)))

    def add_banner(self, kind: BannerKind, args: Sequence[str] = ()) -> None:
        """Append an interface banner."""
        self._append(BannerMessage(kind=kind, args=tuple(args)))

    def _add_thumbs_prompt(self, thumbs_up: str, thumbs_down: str) -> None:
        self._append(FeedbackPromptMessage(thumbs_up=thumbs_up, thumbs_down=thumbs_down))

    def _require_session(self) -> BackendSession:
        session = self._session_provider()
        if session is None:
            raise SessionUnavailableError("No backend session is selected")
        return session

    def _append(self, message: Message) -> None:
        if not self._detached:
            self._store.append(message)

    def _replace(self, message_id: str, message: Message) -> None:
        if not self._detached:
            self._store.replace_by_id(message_id, message)

    def _remove(self, message_id: str) -> None:
        if not self._detached:
            self._store.remove_by_id(message_id)

    @staticmethod
    def _log_unhandled(turn: "asyncio.Future[None]") -> None:
        # Marks the exception as retrieved for turns nobody awaits anymore
        if not turn.cancelled() and turn.exception() is not None:
            logger.debug("Turn finished with %r", turn.exception())
