"""Observer that keeps the quota alert in step with the timeline."""

from collections.abc import Callable

from ..config import QUOTA_WARNING_MARGIN
from ..messages import AssistantMessage, Message, MessageStore
from .alert import QuotaAlert, quota_alert

AlertListener = Callable[[QuotaAlert | None], None]


def latest_usage_message(messages: tuple[Message, ...]) -> AssistantMessage | None:
    """Most recent resolved assistant message carrying usage counters."""
    for message in reversed(messages):
        if isinstance(message, AssistantMessage) and not message.is_loading and message.usage is not None:
            return message
    return None


class QuotaMonitor:
    """Recomputes the alert on every timeline change."""

    def __init__(self, store: MessageStore, warning_margin: int = QUOTA_WARNING_MARGIN) -> None:
        self._warning_margin = warning_margin
        self._alert: QuotaAlert | None = None
        self._source_id: str | None = None
        self._listeners: list[AlertListener] = []
        self._unsubscribe = store.subscribe(self._on_change)
        self._on_change(store.all())

    @property
    def alert(self) -> QuotaAlert | None:
        return self._alert

    def subscribe(self, listener: AlertListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop observing the store."""
        self._unsubscribe()

    def _on_change(self, messages: tuple[Message, ...]) -> None:
        message = latest_usage_message(messages)
        source_id = message.id if message is not None else None
        alert = quota_alert(message.usage, self._warning_margin) if message is not None else None
        if source_id == self._source_id and alert == self._alert:
            return
        self._source_id = source_id
        self._alert = alert
        for listener in list(self._listeners):
            listener(alert)
