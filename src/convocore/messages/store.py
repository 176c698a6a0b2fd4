"""Copy-on-write message timeline.

The store hides how the timeline is held. Every mutation builds a new
tuple, so a snapshot handed to an observer never changes underneath it.
"""

from collections.abc import Callable

from .models import Message

Listener = Callable[[tuple[Message, ...]], None]


class MessageStore:
    """Ordered, id-addressable sequence of timeline messages.

    Observers registered with subscribe() receive the new snapshot after
    every effective mutation. No-op mutations do not notify.
    """

    def __init__(self, messages: tuple[Message, ...] = ()) -> None:
        self._messages: tuple[Message, ...] = tuple(messages)
        self._listeners: list[Listener] = []

    def all(self) -> tuple[Message, ...]:
        """Return the current snapshot."""
        return self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def find(self, message_id: str) -> Message | None:
        """Return the message with the given id, if present."""
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def append(self, message: Message) -> None:
        """Append a message at the end of the timeline."""
        self._commit(self._messages + (message,))

    def replace_by_id(self, message_id: str, message: Message) -> bool:
        """Replace the message with the given id in place.

        Returns:
            True if a message was replaced, False if the id was missing
        """
        index = self._index_of(message_id)
        if index is None:
            return False
        self._commit(self._messages[:index] + (message,) + self._messages[index + 1:])
        return True

    def remove_by_id(self, message_id: str) -> bool:
        """Remove the message with the given id.

        Returns:
            True if a message was removed, False if the id was missing
        """
        index = self._index_of(message_id)
        if index is None:
            return False
        self._commit(self._messages[:index] + self._messages[index + 1:])
        return True

    def clear(self) -> None:
        """Drop every message."""
        if self._messages:
            self._commit(())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _index_of(self, message_id: str) -> int | None:
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        return None

    def _commit(self, messages: tuple[Message, ...]) -> None:
        self._messages = messages
        for listener in list(self._listeners):
            listener(messages)
