"""Single-flight guard for user turns."""

from types import TracebackType

from ..errors import AskInFlightError


class Lease:
    """Proof of holding the guard; releases it exactly once."""

    def __init__(self, flight: "SingleFlight") -> None:
        self._flight = flight
        self._released = False

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._flight._held = False

    def __enter__(self) -> "Lease":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None
    ) -> None:
        self.release()


class SingleFlight:
    """At most one outstanding lease at a time.

    acquire() is synchronous so that two turns started in the same event
    loop iteration cannot both pass the check.
    """

    def __init__(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> Lease:
        """Take the guard.

        Raises:
            AskInFlightError: If a lease is already outstanding
        """
        if self._held:
            raise AskInFlightError()
        self._held = True
        return Lease(self)
