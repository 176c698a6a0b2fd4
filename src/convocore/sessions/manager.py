"""Selection and lazy initialization of backend sessions.

Hides which backend is active. The descriptor list may arrive late, grow or
shrink; the manager keeps the selection valid and initializes the selected
session at most once, only while the widget is open.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence

from .models import SessionCandidate, SessionDescriptor

logger = logging.getLogger(__name__)

SelectionListener = Callable[[str | None], None]


def resolve_available(
    candidates: Iterable[SessionCandidate]
) -> tuple[SessionDescriptor, ...] | None:
    """Turn authentication candidates into the list of usable descriptors.

    Returns:
        None while any candidate is still being checked, otherwise the
        descriptors whose authentication succeeded, in candidate order
    """
    candidates = list(candidates)
    if any(c.authenticated is None for c in candidates):
        return None
    for candidate in candidates:
        if candidate.error is not None:
            logger.error(
                "Session %s unavailable: %s",
                candidate.descriptor.model_id,
                candidate.error
            )
    return tuple(c.descriptor for c in candidates if c.authenticated)


def route_matches(route: str, path: str) -> bool:
    """Whether a host path matches a route pattern.

    ``:name`` segments match any single segment and a trailing ``*`` matches
    the rest of the path. Matching ignores case and surrounding slashes.
    """
    route_parts = [part for part in route.lower().split("/") if part]
    path_parts = [part for part in path.lower().split("/") if part]
    if route_parts and route_parts[-1] == "*":
        route_parts = route_parts[:-1]
        path_parts = path_parts[:len(route_parts)]
    if len(route_parts) != len(path_parts):
        return False
    return all(r.startswith(":") or r == p for r, p in zip(route_parts, path_parts))


class ModelSessionManager:
    """Keeps current_model_id pointing at an available session.

    Correction rules:
    - an empty or not-yet-stable list leaves current_model_id untouched
    - an unset or unknown id is corrected to the first descriptor whose
      routes match the host path, else to the first descriptor
    - a known id is kept even if the list order changes
    """

    def __init__(self, current_model_id: str | None = None, path: str | None = None) -> None:
        self._descriptors: tuple[SessionDescriptor, ...] = ()
        self._path = path
        self._current_model_id = current_model_id
        self._is_open = False
        self._init_tasks: dict[str, asyncio.Task[None]] = {}
        self._listeners: list[SelectionListener] = []

    @property
    def descriptors(self) -> tuple[SessionDescriptor, ...]:
        return self._descriptors

    @property
    def current_model_id(self) -> str | None:
        return self._current_model_id

    @property
    def current(self) -> SessionDescriptor | None:
        """Descriptor of the selected session, if it is available."""
        return self._find(self._current_model_id)

    @property
    def is_open(self) -> bool:
        return self._is_open

    def selection_options(self) -> list[SessionDescriptor]:
        """Descriptors ordered by title for a model picker."""
        return sorted(self._descriptors, key=lambda d: (d.title or d.model_id).lower())

    def set_descriptors(self, descriptors: Sequence[SessionDescriptor] | None) -> None:
        """Replace the available descriptors.

        Args:
            descriptors: New list, or None while it is still being resolved
        """
        if descriptors is None:
            return
        self._descriptors = tuple(descriptors)
        self._reconcile()

    def update_candidates(self, candidates: Iterable[SessionCandidate]) -> None:
        """Replace the descriptors from authentication candidates."""
        self.set_descriptors(resolve_available(candidates))

    def select(self, model_id: str | None) -> None:
        """Request a model; unknown ids are corrected on the spot."""
        self._set_current(model_id)
        self._reconcile()

    def set_path(self, path: str | None) -> None:
        """Track the host page path used to prefer a model on correction."""
        self._path = path
        self._reconcile()

    def set_open(self, is_open: bool) -> None:
        """Track widget visibility; opening may trigger initialization."""
        self._is_open = is_open
        self._maybe_init()

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register a listener for selection changes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def settle(self) -> None:
        """Wait for any pending session initialization to finish."""
        self._maybe_init()
        pending = [task for task in self._init_tasks.values() if not task.done()]
        if pending:
            await asyncio.gather(*pending)

    def _find(self, model_id: str | None) -> SessionDescriptor | None:
        if model_id is None:
            return None
        for descriptor in self._descriptors:
            if descriptor.model_id == model_id:
                return descriptor
        return None

    def _set_current(self, model_id: str | None) -> None:
        if model_id == self._current_model_id:
            return
        self._current_model_id = model_id
        for listener in list(self._listeners):
            listener(model_id)

    def _reconcile(self) -> None:
        if self._descriptors and self._find(self._current_model_id) is None:
            corrected = self._preferred().model_id
            if self._current_model_id is not None:
                logger.info(
                    "Model %s is not available, switching to %s",
                    self._current_model_id,
                    corrected
                )
            self._set_current(corrected)
        self._maybe_init()

    def _preferred(self) -> SessionDescriptor:
        if self._path is not None:
            for descriptor in self._descriptors:
                if any(route_matches(route, self._path) for route in descriptor.routes):
                    return descriptor
        return self._descriptors[0]

    def _maybe_init(self) -> None:
        descriptor = self.current
        if not self._is_open or descriptor is None:
            return

        session = descriptor.session
        if session.is_initialized() or session.is_initializing():
            return

        task = self._init_tasks.get(descriptor.model_id)
        if task is not None and not task.done():
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Deferred until settle() runs inside the event loop
            return

        self._init_tasks[descriptor.model_id] = loop.create_task(self._run_init(descriptor))

    async def _run_init(self, descriptor: SessionDescriptor) -> None:
        try:
            await descriptor.session.init()
        except Exception:
            logger.error("Failed to initialize session %s", descriptor.model_id, exc_info=True)
