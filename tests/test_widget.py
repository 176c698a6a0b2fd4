"""Integration tests for the assistant widget."""
import asyncio

import pytest
from conftest import ScriptedSession, text_reply

from convocore.config import AssistantConfig, load_config
from convocore.feedback import Thumb
from convocore.messages import (
    AssistantMessage,
    BannerKind,
    BannerMessage,
    FeedbackPromptMessage,
    MessageOption,
    Usage,
    UserMessage,
)
from convocore.quota import AlertLevel
from convocore.sessions import BackendReply, CommandFragment, InitLimitation, ModelSessionManager, SessionDescriptor
from convocore.state import AssistantState
from convocore.widget import AssistantWidget


def make_widget(*sessions, state=None, **config):
    manager = ModelSessionManager()
    manager.set_descriptors([
        SessionDescriptor(model_id=f"model-{i}", session=s, title=f"Model {i}")
        for i, s in enumerate(sessions)
    ])
    return AssistantWidget(
        manager,
        config=AssistantConfig(min_response_delay=0, **config),
        state=state,
    )


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class TestAssistantWidget:
    """Tests for AssistantWidget."""

    @pytest.mark.asyncio
    async def test_open_initializes_and_sends(self):
        """Test the basic conversation flow."""
        session = ScriptedSession([text_reply("hi there")])
        widget = make_widget(session)
        await widget.mount()

        await widget.open()
        sent = await widget.send("hello")

        assert sent is True
        assert session.init_calls == 1
        assert [type(m) for m in widget.messages] == [UserMessage, AssistantMessage]
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_message_too_long(self):
        """Test that oversized input is refused with a banner."""
        session = ScriptedSession()
        widget = make_widget(session, max_message_length=10)

        sent = await widget.send("x" * 11)

        assert sent is False
        assert session.sent == []
        banner = widget.messages[-1]
        assert isinstance(banner, BannerMessage)
        assert banner.kind == BannerKind.MESSAGE_TOO_LONG
        assert banner.args == ("10",)
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_message_at_limit_is_sent(self):
        """Test the limit is inclusive."""
        session = ScriptedSession([text_reply("ok")])
        widget = make_widget(session, max_message_length=10)

        assert await widget.send("x" * 10) is True
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_quota_breach_locks_until_new_conversation(self):
        """Test the quota-breached lock and its release."""
        session = ScriptedSession([text_reply("ok")], limitation=InitLimitation(reason="quota-breached"))
        widget = make_widget(session)

        assert widget.conversation_locked is True
        assert widget.send_disabled is True
        assert await widget.send("hello") is False
        assert session.sent == []

        await widget.new_conversation()

        assert widget.send_disabled is False
        assert await widget.send("hello") is True
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_quota_alert_follows_replies(self):
        """Test that the widget exposes the current quota alert."""
        session = ScriptedSession([text_reply("last one", usage=Usage(used=20, limit=20))])
        widget = make_widget(session)

        await widget.send("hello")

        assert widget.quota_alert is not None
        assert widget.quota_alert.level == AlertLevel.DANGER
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_pending_message_sent_on_open(self):
        """Test that a host-provided message is sent once the widget opens."""
        state = AssistantState(message="help me")
        session = ScriptedSession([text_reply("sure")])
        widget = make_widget(session, state=state)
        await widget.mount()

        await widget.open()

        assert [text for _, text, _ in session.sent] == ["help me"]
        assert state.message is None
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_pending_message_while_open(self):
        """Test that a message pushed into shared state is sent."""
        state = AssistantState()
        session = ScriptedSession([text_reply("sure")])
        widget = make_widget(session, state=state)
        await widget.mount()
        await widget.open()

        state.update(message="from the host")
        await wait_until(lambda: len(widget.messages) == 2)

        assert [text for _, text, _ in session.sent] == ["from the host"]
        assert state.message is None
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_pending_message_waits_while_closed(self):
        """Test that nothing is sent while the widget is closed."""
        state = AssistantState()
        session = ScriptedSession()
        widget = make_widget(session, state=state)
        await widget.mount()

        state.update(message="later")
        await asyncio.sleep(0.01)

        assert session.sent == []
        assert state.message == "later"
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_pending_message_kept_while_locked(self):
        """Test that a locked conversation keeps the pending message for later."""
        state = AssistantState(message="help me")
        session = ScriptedSession([text_reply("sure")], limitation=InitLimitation(reason="quota-breached"))
        widget = make_widget(session, state=state)
        await widget.mount()

        await widget.open()

        assert session.sent == []
        assert state.message == "help me"

        await widget.new_conversation()

        assert [text for _, text, _ in session.sent] == ["help me"]
        assert state.message is None
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_refused_pending_message_shows_banner(self):
        """Test that an oversized pending message is reported, not silently lost."""
        state = AssistantState(message="x" * 11)
        session = ScriptedSession()
        widget = make_widget(session, state=state, max_message_length=10)
        await widget.mount()

        await widget.open()

        assert session.sent == []
        assert state.message is None
        banner = widget.messages[-1]
        assert isinstance(banner, BannerMessage)
        assert banner.kind == BannerKind.MESSAGE_TOO_LONG
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_select_option(self):
        """Test that an option is sent with its id and echoed by label."""
        session = ScriptedSession([text_reply("ok")])
        widget = make_widget(session)

        await widget.select_option(MessageOption(label="Yes please", value="yes", option_id="o-1"))

        _, text, options = session.sent[0]
        assert text == "yes"
        assert options.option_id == "o-1"
        assert widget.messages[0].text == "Yes please"
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_thumbs_prompt_round_trip(self):
        """Test a thumbs command followed by a selection."""
        reply = BackendReply(fragments=(CommandFragment(command="thumbs"),))
        session = ScriptedSession([reply, text_reply("thanks")])
        widget = make_widget(session)
        await widget.send("hello")
        prompt = widget.messages[-1]
        assert isinstance(prompt, FeedbackPromptMessage)

        assert await widget.select_thumb(prompt, Thumb.UP) is True
        assert await widget.select_thumb(prompt, Thumb.DOWN) is False

        assert session.sent[1][1] == "/feedback_thumbs_up"
        assert not any(isinstance(m, UserMessage) and m.text == "/feedback_thumbs_up" for m in widget.messages)
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_start_sends_hidden_session_start(self):
        """Test the hidden session-start turn."""
        session = ScriptedSession([text_reply("Welcome")])
        widget = make_widget(session)

        await widget.start()
        await wait_until(lambda: not widget.pipeline.in_progress)

        assert session.sent[0][1] == "/session_start"
        assert [m.text for m in widget.messages] == ["Welcome"]
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_stop_clears_timeline(self):
        """Test stop forgets the conversation."""
        session = ScriptedSession([text_reply("a")])
        widget = make_widget(session)
        await widget.send("hello")

        widget.stop()

        assert widget.messages == ()
        assert widget.conversation is None
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_feedback_uses_current_conversation(self):
        """Test that feedback is filed against the widget's conversation."""
        session = ScriptedSession([text_reply("a")])
        widget = make_widget(session)
        await widget.send("hello")
        answer = widget.messages[-1]

        machine = widget.feedback_for(answer)
        machine.open_positive()
        await machine.submit("Accurate")

        assert machine.record.sent is True
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_current_model_mirrors_state(self):
        """Test that model selection and shared state stay in step."""
        state = AssistantState()
        widget = make_widget(ScriptedSession(), ScriptedSession(), state=state)
        await widget.mount()

        assert state.current_model == "model-0"

        widget.sessions.select("model-1")
        assert state.current_model == "model-1"

        state.update(current_model="model-0")
        assert widget.sessions.current_model_id == "model-0"
        await widget.unmount()

    @pytest.mark.asyncio
    async def test_unmount_discards_late_results(self):
        """Test that a turn finishing after unmount leaves the timeline alone."""
        gate = asyncio.Event()
        session = ScriptedSession([text_reply("late")], gate=gate)
        widget = make_widget(session)

        task = asyncio.create_task(widget.send("hello"))
        await asyncio.sleep(0.01)
        before = widget.messages

        await widget.unmount()
        gate.set()
        await task

        assert widget.messages == before


class TestAssistantState:
    """Tests for the shared state."""

    def test_update_notifies_on_change_only(self):
        """Test change detection."""
        state = AssistantState()
        snapshots = []
        state.subscribe(snapshots.append)

        state.update(is_open=True)
        state.update(is_open=True)
        state.update(message="hi")

        assert [(s.is_open, s.message) for s in snapshots] == [(True, None), (True, "hi")]

    def test_unsubscribe(self):
        """Test removing a listener."""
        state = AssistantState()
        snapshots = []
        unsubscribe = state.subscribe(snapshots.append)

        unsubscribe()
        state.update(is_open=True)

        assert snapshots == []


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        for name in ("CONVOCORE_MIN_RESPONSE_DELAY", "CONVOCORE_MAX_MESSAGE_LENGTH", "CONVOCORE_ENVIRONMENT"):
            monkeypatch.delenv(name, raising=False)

        config = load_config()

        assert config.min_response_delay == 2.0
        assert config.max_message_length == 2048
        assert config.quota_warning_margin == 5

    def test_environment_overrides(self, monkeypatch):
        """Test reading values from the environment."""
        monkeypatch.setenv("CONVOCORE_MIN_RESPONSE_DELAY", "0.5")
        monkeypatch.setenv("CONVOCORE_ENVIRONMENT", "PROD")
        monkeypatch.setenv("CONVOCORE_KNOWN_TOURS", "a, b")
        monkeypatch.setenv("CONVOCORE_SCALED_DELAY", "true")

        config = load_config(max_message_length=100)

        assert config.min_response_delay == 0.5
        assert config.environment == "prod"
        assert config.known_tours == ("a", "b")
        assert config.scaled_delay is not None
        assert config.max_message_length == 100
