"""The ask pipeline and its pacing helpers."""

from .ask import AskOptions, AskPipeline
from .delay import lerp, scaled_delay
from .guard import Lease, SingleFlight

__all__ = [
    "AskOptions",
    "AskPipeline",
    "Lease",
    "SingleFlight",
    "lerp",
    "scaled_delay",
]
