"""Response pacing helpers."""

from ..config import ResponseDelay


def lerp(low: float, high: float, t: float) -> float:
    """Linear interpolation between low and high."""
    return low + t * (high - low)


def scaled_delay(text: str | None, bounds: ResponseDelay) -> float:
    """Delay for a message, growing linearly with its word count.

    Word counts are clamped to [words_min, words_max]; empty text gets the
    minimum delay.
    """
    if not text:
        return bounds.delay_min
    span = bounds.words_max - bounds.words_min
    if span <= 0:
        return bounds.delay_max
    words = min(bounds.words_max, max(bounds.words_min, len(text.split(" "))))
    return lerp(bounds.delay_min, bounds.delay_max, (words - bounds.words_min) / span)
