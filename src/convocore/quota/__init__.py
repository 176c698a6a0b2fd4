"""Quota alerts and send gating."""

from .alert import NEW_CONVERSATION_ACTION, AlertLevel, QuotaAlert, quota_alert, quota_exceeded
from .gating import conversation_locked, send_disabled
from .monitor import QuotaMonitor, latest_usage_message

__all__ = [
    "AlertLevel",
    "NEW_CONVERSATION_ACTION",
    "QuotaAlert",
    "QuotaMonitor",
    "conversation_locked",
    "latest_usage_message",
    "quota_alert",
    "quota_exceeded",
    "send_disabled",
]
