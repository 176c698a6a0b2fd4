"""Per-message feedback state machine.

    idle --open_positive/open_negative--> open --submit--> submitting
    submitting --success--> done
    submitting --failure--> open (retryable)
    open --close_detail--> idle

Once done, every further transition is a no-op.
"""

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from ..config import NEGATIVE_QUICK_RESPONSES, POSITIVE_QUICK_RESPONSES
from ..messages import AssistantMessage, Message
from .sink import FeedbackPayload, FeedbackSink, Rating

logger = logging.getLogger(__name__)

RecordListener = Callable[["FeedbackRecord"], None]


class FeedbackPhase(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    SUBMITTING = "submitting"
    DONE = "done"


class FeedbackRecord(BaseModel):
    """Snapshot of one message's feedback state."""

    model_config = ConfigDict(frozen=True)

    rating: Rating | None = None
    sent: bool = False
    sending: bool = False
    detail_open: bool = False
    show_completion: bool = False

    @property
    def phase(self) -> FeedbackPhase:
        if self.sent:
            return FeedbackPhase.DONE
        if self.sending:
            return FeedbackPhase.SUBMITTING
        if self.detail_open and self.rating is not None:
            return FeedbackPhase.OPEN
        return FeedbackPhase.IDLE


class FeedbackActions(BaseModel):
    """Per-message action affordances."""

    model_config = ConfigDict(frozen=True)

    positive_id: str
    negative_id: str
    copy_id: str
    rating_disabled: bool


class FeedbackForm(BaseModel):
    """The detail form shown after a sentiment is picked."""

    model_config = ConfigDict(frozen=True)

    title: str
    quick_responses: tuple[str, ...]
    submit_word: str = "Send feedback"
    has_text_area: bool = True


class FeedbackCompletion(BaseModel):
    """Notice shown after feedback was sent."""

    model_config = ConfigDict(frozen=True)

    title: str = "Thank you."
    body: str = "We appreciate your input. It helps us improve this experience."


class FeedbackStateMachine:
    """Feedback lifecycle of a single assistant message.

    The sending flag is set before the first await in submit(), so a second
    submit() issued while the first is still in flight is a no-op.
    """

    def __init__(
        self,
        message: Message,
        sink: FeedbackSink,
        conversation_id: Callable[[], str | None],
        clipboard: Callable[[str], None] | None = None,
    ) -> None:
        self._message = message
        self._sink = sink
        self._conversation_id = conversation_id
        self._clipboard = clipboard
        self._record = FeedbackRecord()
        self._listeners: list[RecordListener] = []

    @property
    def record(self) -> FeedbackRecord:
        return self._record

    @property
    def phase(self) -> FeedbackPhase:
        return self._record.phase

    @property
    def message(self) -> Message:
        return self._message

    def subscribe(self, listener: RecordListener) -> Callable[[], None]:
        """Register a listener for record changes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def open_positive(self) -> None:
        self._open(Rating.POSITIVE)

    def open_negative(self) -> None:
        self._open(Rating.NEGATIVE)

    def close_detail(self) -> None:
        """Close the detail form and forget the picked sentiment."""
        if self.phase == FeedbackPhase.OPEN:
            self._update(rating=None, detail_open=False)

    def close_completion(self) -> None:
        """Hide the completion notice; the record stays sent."""
        if self._record.show_completion:
            self._update(show_completion=False)

    async def submit(self, quick_response: str = "", free_text: str = "") -> None:
        """Send the picked rating with optional quick response and free text."""
        record = self._record
        if record.sent or record.sending or record.rating is None:
            return
        conversation_id = self._conversation_id()
        if not conversation_id or not self._message.id:
            return

        self._update(sending=True)
        payload = FeedbackPayload(
            rating=record.rating,
            predefined_response=quick_response,
            freeform=free_text,
        )
        try:
            await self._sink.submit(conversation_id, self._message.id, payload)
        except Exception:
            logger.error("Error sending feedback for message %s", self._message.id, exc_info=True)
            self._update(sending=False)
            return

        self._update(sent=True, sending=False, detail_open=False, show_completion=True)

    def copy(self) -> None:
        """Copy the message text to the clipboard."""
        if self._clipboard is None:
            logger.debug("No clipboard available")
            return
        text = self._message.text if isinstance(self._message, AssistantMessage) else None
        self._clipboard(text or "")

    def actions(self) -> FeedbackActions | None:
        """Rating and copy affordances; None for non-assistant messages."""
        if not isinstance(self._message, AssistantMessage):
            return None
        message_id = self._message.id
        return FeedbackActions(
            positive_id=f"positive-feedback-{message_id}",
            negative_id=f"negative-feedback-{message_id}",
            copy_id=f"copy-message-{message_id}",
            rating_disabled=self._record.sent or self._record.sending,
        )

    def form(self) -> FeedbackForm | None:
        """Detail form, while a sentiment is picked."""
        record = self._record
        if not record.detail_open or record.rating is None:
            return None
        if record.rating == Rating.POSITIVE:
            return FeedbackForm(title="Thank you. Any more feedback?", quick_responses=POSITIVE_QUICK_RESPONSES)
        return FeedbackForm(title="Thank you. How can we improve?", quick_responses=NEGATIVE_QUICK_RESPONSES)

    def completion(self) -> FeedbackCompletion | None:
        """Completion notice, while it is shown."""
        if not self._record.show_completion:
            return None
        return FeedbackCompletion()

    def _open(self, rating: Rating) -> None:
        if self.phase != FeedbackPhase.IDLE:
            return
        self._update(rating=rating, detail_open=True)

    def _update(self, **changes: object) -> None:
        self._record = self._record.model_copy(update=changes)
        for listener in list(self._listeners):
            listener(self._record)


class FeedbackRegistry:
    """One state machine per assistant message id."""

    def __init__(
        self,
        sink: FeedbackSink,
        conversation_id: Callable[[], str | None],
        clipboard: Callable[[str], None] | None = None,
    ) -> None:
        self._sink = sink
        self._conversation_id = conversation_id
        self._clipboard = clipboard
        self._machines: dict[str, FeedbackStateMachine] = {}

    def feedback_for(self, message: Message) -> FeedbackStateMachine:
        """Return the state machine for a message, creating it on first use."""
        machine = self._machines.get(message.id)
        if machine is None:
            machine = FeedbackStateMachine(message, self._sink, self._conversation_id, self._clipboard)
            self._machines[message.id] = machine
        return machine

    def clear(self) -> None:
        self._machines.clear()
