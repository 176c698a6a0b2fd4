"""Callbacks supplied by the host application.

The core never talks to the browser, the identity provider or the tour
engine directly; it goes through these callbacks.
"""

import logging
import webbrowser
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


def open_in_new_tab(url: str) -> None:
    """Open a URL in a new browser tab without an opener reference."""
    webbrowser.open_new_tab(url)


def _no_feedback_modal(is_open: bool) -> None:
    logger.debug("No feedback modal registered (requested open=%s)", is_open)


def _no_tour(tour: str) -> None:
    logger.debug("No tour engine registered (requested %s)", tour)


async def _no_token() -> str:
    raise RuntimeError("No auth token provider registered")


async def _no_user() -> dict[str, Any] | None:
    return None


@dataclass
class HostCallbacks:
    """Host-provided side effects."""

    toggle_feedback_modal: Callable[[bool], None] = _no_feedback_modal
    get_auth_token: Callable[[], Awaitable[str]] = _no_token
    get_current_user: Callable[[], Awaitable[dict[str, Any] | None]] = _no_user
    open_url: Callable[[str], None] = open_in_new_tab
    start_tour: Callable[[str], None] = _no_tour
    copy_to_clipboard: Callable[[str], None] | None = field(default=None)
