"""Shared assistant state.

One AssistantState can be shared by several widgets (and by host code that
wants to open the assistant with a prefilled message). It holds only what
must survive across widget instances.
"""

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

StateListener = Callable[["StateSnapshot"], None]


class StateSnapshot(BaseModel):
    """Immutable view of the shared state."""

    model_config = ConfigDict(frozen=True)

    is_open: bool = False
    message: str | None = None  # Pending outbound message
    current_model: str | None = None


class AssistantState:
    """Observable holder for StateSnapshot."""

    def __init__(
        self,
        is_open: bool = False,
        message: str | None = None,
        current_model: str | None = None
    ) -> None:
        self._snapshot = StateSnapshot(is_open=is_open, message=message, current_model=current_model)
        self._listeners: list[StateListener] = []

    @property
    def snapshot(self) -> StateSnapshot:
        return self._snapshot

    @property
    def is_open(self) -> bool:
        return self._snapshot.is_open

    @property
    def message(self) -> str | None:
        return self._snapshot.message

    @property
    def current_model(self) -> str | None:
        return self._snapshot.current_model

    def update(self, **changes: object) -> None:
        """Apply changes and notify listeners if anything differs."""
        snapshot = self._snapshot.model_copy(update=changes)
        if snapshot == self._snapshot:
            return
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
