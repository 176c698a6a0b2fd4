"""Feedback sinks.

A sink receives one rating per assistant message. The abstraction hides
where feedback goes: a backend feedback endpoint, an issue tracker, or a
test double.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from ..config import DEFAULT_HTTP_TIMEOUT, ENV_PROD

logger = logging.getLogger(__name__)


class Rating(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class FeedbackPayload(BaseModel):
    """What a user said about one assistant message."""

    model_config = ConfigDict(frozen=True)

    rating: Rating
    predefined_response: str = ""
    freeform: str = ""


class FeedbackSink(ABC):
    """Destination for message feedback."""

    @abstractmethod
    async def submit(self, conversation_id: str, message_id: str, payload: FeedbackPayload) -> None:
        """Deliver feedback for a message.

        Raises:
            Exception: If delivery failed; callers treat this as retryable
        """


class IssueFeedbackSink(FeedbackSink):
    """Files feedback as an issue with a summary, description and labels."""

    def __init__(
        self,
        url: str,
        environment: str,
        get_current_user: Callable[[], Awaitable[dict[str, Any] | None]],
        label: str = "VA",
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._environment = environment
        self._get_current_user = get_current_user
        self._label = label
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def submit(self, conversation_id: str, message_id: str, payload: FeedbackPayload) -> None:
        user = await self._get_current_user()
        if not user:
            raise RuntimeError("User not found")

        tag = "[PROD]" if self._environment == ENV_PROD else "[PRE-PROD]"
        parts = [p for p in (payload.predefined_response, payload.freeform) if p]
        body = {
            "summary": f"{tag}App Feedback",
            "description": "; ".join(parts) or "No description provided",
            "labels": [self._label, payload.rating.value, self._environment],
        }
        response = await self._client.post(self._url, json=body)
        response.raise_for_status()
        logger.debug("Feedback for %s/%s filed", conversation_id, message_id)


class LogFeedbackSink(FeedbackSink):
    """Records feedback in the log only; used when no endpoint is configured."""

    async def submit(self, conversation_id: str, message_id: str, payload: FeedbackPayload) -> None:
        logger.info(
            "Feedback for %s/%s: %s (%s) %s",
            conversation_id,
            message_id,
            payload.rating.value,
            payload.predefined_response or "-",
            payload.freeform or "-"
        )
