"""Quota alert derivation.

Pure functions; nothing here touches the timeline.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ..config import QUOTA_WARNING_MARGIN
from ..messages import Usage

NEW_CONVERSATION_ACTION = "start-new-conversation"


class AlertLevel(str, Enum):
    WARNING = "warning"
    DANGER = "danger"


class QuotaAlert(BaseModel):
    """Alert shown for a message's quota counters."""

    model_config = ConfigDict(frozen=True)

    level: AlertLevel
    title: str
    body: str = ""
    action: str | None = None
    action_label: str | None = None


def quota_exceeded(usage: Usage | None) -> bool:
    if usage is None or not usage.enabled or usage.used is None or usage.limit is None:
        return False
    return usage.used >= usage.limit


def quota_alert(usage: Usage | None, warning_margin: int = QUOTA_WARNING_MARGIN) -> QuotaAlert | None:
    """Map usage counters to an alert.

    danger when used >= limit; warning exactly when used + warning_margin
    == limit, a single point before the limit rather than a range.
    """
    if usage is None or not usage.enabled or usage.used is None or usage.limit is None:
        return None

    if quota_exceeded(usage):
        return QuotaAlert(
            level=AlertLevel.DANGER,
            title="Message limit reached",
            body="You have reached the message limit for this conversation. "
                 "To continue, you can start a new chat.",
            action=NEW_CONVERSATION_ACTION,
            action_label="Start a new chat",
        )

    if usage.used + warning_margin == usage.limit:
        return QuotaAlert(
            level=AlertLevel.WARNING,
            title=f"You are nearing the message limit for this conversation. "
                  f"{usage.used} of {usage.limit} messages used.",
        )

    return None
