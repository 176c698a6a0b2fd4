"""Unit tests for the quota module."""
from hypothesis import given
from hypothesis import strategies as st

from convocore.messages import AssistantMessage, MessageStore, Usage, UserMessage, placeholder
from convocore.quota import (
    AlertLevel,
    QuotaMonitor,
    conversation_locked,
    quota_alert,
    send_disabled,
)
from convocore.sessions import Conversation, InitLimitation


class TestQuotaAlert:
    """Tests for quota_alert."""

    def test_warning_five_before_limit(self):
        """Test that 15 of 20 warns."""
        alert = quota_alert(Usage(used=15, limit=20))

        assert alert is not None
        assert alert.level == AlertLevel.WARNING
        assert "15 of 20" in alert.title

    def test_danger_at_limit(self):
        """Test that reaching the limit is dangerous."""
        alert = quota_alert(Usage(used=20, limit=20))

        assert alert is not None
        assert alert.level == AlertLevel.DANGER
        assert alert.action is not None

    def test_danger_over_limit(self):
        """Test that exceeding the limit is dangerous."""
        alert = quota_alert(Usage(used=25, limit=20))

        assert alert is not None
        assert alert.level == AlertLevel.DANGER

    def test_no_alert_far_from_limit(self):
        """Test that 10 of 20 shows nothing."""
        assert quota_alert(Usage(used=10, limit=20)) is None

    def test_no_alert_without_limit(self):
        """Test that a missing limit shows nothing."""
        assert quota_alert(Usage(used=5, limit=None)) is None

    def test_no_alert_without_usage(self):
        """Test missing or disabled counters."""
        assert quota_alert(None) is None
        assert quota_alert(Usage(used=None, limit=20)) is None
        assert quota_alert(Usage(used=20, limit=20, enabled=False)) is None

    def test_warning_is_exact(self):
        """Test that the warning fires at a single point, not a range."""
        assert quota_alert(Usage(used=14, limit=20)) is None
        assert quota_alert(Usage(used=16, limit=20)) is None

    def test_custom_margin(self):
        """Test a non-default warning margin."""
        alert = quota_alert(Usage(used=18, limit=20), warning_margin=2)

        assert alert is not None
        assert alert.level == AlertLevel.WARNING

    @given(st.integers(min_value=0, max_value=500), st.integers(min_value=0, max_value=500))
    def test_danger_iff_used_reaches_limit(self, used: int, limit: int):
        """Property test: danger exactly when used >= limit."""
        alert = quota_alert(Usage(used=used, limit=limit))

        is_danger = alert is not None and alert.level == AlertLevel.DANGER
        assert is_danger == (used >= limit)


class TestQuotaMonitor:
    """Tests for QuotaMonitor."""

    def test_follows_latest_usage(self):
        """Test the alert tracks the most recent message with counters."""
        store = MessageStore()
        monitor = QuotaMonitor(store)
        alerts = []
        monitor.subscribe(alerts.append)

        store.append(AssistantMessage(text="a", usage=Usage(used=15, limit=20)))
        assert monitor.alert is not None
        assert monitor.alert.level == AlertLevel.WARNING

        store.append(AssistantMessage(text="b", usage=Usage(used=16, limit=20)))
        assert monitor.alert is None

        store.append(AssistantMessage(text="c", usage=Usage(used=20, limit=20)))
        assert monitor.alert.level == AlertLevel.DANGER
        assert [a.level if a else None for a in alerts] == [AlertLevel.WARNING, None, AlertLevel.DANGER]

    def test_ignores_placeholders_and_other_messages(self):
        """Test that loading and non-assistant entries do not reset the alert."""
        store = MessageStore()
        monitor = QuotaMonitor(store)

        store.append(AssistantMessage(text="a", usage=Usage(used=20, limit=20)))
        store.append(UserMessage(text="more"))
        store.append(placeholder())

        assert monitor.alert is not None
        assert monitor.alert.level == AlertLevel.DANGER

    def test_recomputes_for_a_new_message_with_same_counters(self):
        """Test that a new message re-notifies even with identical counters."""
        store = MessageStore()
        monitor = QuotaMonitor(store)
        alerts = []
        monitor.subscribe(alerts.append)

        store.append(AssistantMessage(text="a", usage=Usage(used=20, limit=20)))
        store.append(AssistantMessage(text="b", usage=Usage(used=20, limit=20)))

        assert len(alerts) == 2

    def test_close_stops_observing(self):
        """Test that a closed monitor keeps its last alert."""
        store = MessageStore()
        monitor = QuotaMonitor(store)
        monitor.close()

        store.append(AssistantMessage(text="a", usage=Usage(used=20, limit=20)))

        assert monitor.alert is None


class TestGating:
    """Tests for send gating."""

    def test_quota_breached_without_conversation_locks(self):
        """Test that a quota-breached session with no conversation is locked."""
        limitation = InitLimitation(reason="quota-breached")

        assert conversation_locked(None, limitation) is True
        assert send_disabled(False, None, limitation) is True

    def test_active_conversation_unlocks(self):
        """Test that an active conversation is not locked by the limitation."""
        limitation = InitLimitation(reason="quota-breached")

        assert conversation_locked(Conversation(id="c"), limitation) is False

    def test_locked_conversation(self):
        """Test a read-only conversation."""
        assert conversation_locked(Conversation(id="c", locked=True), None) is True

    def test_other_reasons_do_not_lock(self):
        """Test that unrelated limitations leave sending enabled."""
        assert conversation_locked(None, InitLimitation(reason="maintenance")) is False
        assert conversation_locked(None, None) is False

    def test_in_progress_disables_send(self):
        """Test that a running turn disables send."""
        assert send_disabled(True, Conversation(id="c"), None) is True
        assert send_disabled(False, Conversation(id="c"), None) is False
