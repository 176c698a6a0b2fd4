"""Thumbs-up/thumbs-down prompt selection.

Both affordances of a prompt share one selection: picking either disables
both.
"""

from enum import Enum

from ..messages import FeedbackPromptMessage


class Thumb(str, Enum):
    UP = "up"
    DOWN = "down"


class ThumbsSelection:
    """Remembers which prompts have been answered."""

    def __init__(self) -> None:
        self._selected: dict[str, Thumb] = {}

    def selected(self, prompt: FeedbackPromptMessage) -> Thumb | None:
        return self._selected.get(prompt.id)

    def is_disabled(self, prompt: FeedbackPromptMessage) -> bool:
        return prompt.id in self._selected

    def select(self, prompt: FeedbackPromptMessage, thumb: Thumb) -> str | None:
        """Record a selection.

        Returns:
            The payload to ask with the user echo hidden, or None if the
            prompt was already answered
        """
        if prompt.id in self._selected:
            return None
        self._selected[prompt.id] = thumb
        return prompt.thumbs_up if thumb == Thumb.UP else prompt.thumbs_down

    def clear(self) -> None:
        self._selected.clear()
