"""Unit tests for the messages module."""
import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import TypeAdapter, ValidationError

from convocore.messages import (
    AssistantMessage,
    BannerKind,
    BannerMessage,
    FeedbackPromptMessage,
    Message,
    MessageStore,
    SystemKind,
    SystemMessage,
    UserMessage,
    banner_content,
    placeholder,
    system_text,
)


class TestMessageModels:
    """Tests for message models."""

    def test_messages_are_immutable(self):
        """Test that messages cannot be mutated in place."""
        message = UserMessage(text="hello")

        with pytest.raises(ValidationError):
            message.text = "changed"  # type: ignore

    def test_messages_get_unique_ids(self):
        """Test that every message gets its own id."""
        assert UserMessage(text="a").id != UserMessage(text="a").id

    def test_placeholder_is_loading(self):
        """Test placeholder construction."""
        pending = placeholder("fixed")

        assert pending.id == "fixed"
        assert pending.is_loading is True
        assert pending.text is None

    def test_discriminated_by_origin(self):
        """Test that raw dicts validate into the right message type."""
        adapter = TypeAdapter(Message)

        assert isinstance(adapter.validate_python({"origin": "user", "text": "hi"}), UserMessage)
        assert isinstance(
            adapter.validate_python({"origin": "interface-banner", "kind": "message-too-long"}),
            BannerMessage
        )
        assert isinstance(
            adapter.validate_python({"origin": "system", "kind": "empty-response"}),
            SystemMessage
        )

    def test_wire_kinds_are_stable(self):
        """Test the wire names of system and banner kinds."""
        assert {k.value for k in SystemKind} == {
            "empty-response",
            "request-error",
            "redirect-message",
            "finish-conversation-message",
        }
        assert {k.value for k in BannerKind} == {
            "finish-conversation-banner",
            "request-error",
            "create-service-account",
            "create-service-account-failed",
            "toggle-org-2fa",
            "toggle-org-2fa-failed",
            "message-too-long",
        }


class TestMessageStore:
    """Tests for MessageStore."""

    def test_append_and_all(self):
        """Test appending keeps order."""
        store = MessageStore()
        first = UserMessage(text="one")
        second = AssistantMessage(text="two")

        store.append(first)
        store.append(second)

        assert store.all() == (first, second)
        assert len(store) == 2

    def test_replace_by_id_keeps_position(self):
        """Test that a replacement keeps its position."""
        store = MessageStore()
        pending = placeholder()
        store.append(UserMessage(text="q"))
        store.append(pending)
        store.append(UserMessage(text="later"))

        resolved = AssistantMessage(id=pending.id, text="answer")
        assert store.replace_by_id(pending.id, resolved) is True

        assert store.all()[1] == resolved
        assert store.find(pending.id) == resolved

    def test_missing_id_is_a_noop(self):
        """Test that replace/remove on a missing id do nothing."""
        store = MessageStore()
        store.append(UserMessage(text="q"))
        calls = []
        store.subscribe(calls.append)

        assert store.replace_by_id("missing", AssistantMessage(text="x")) is False
        assert store.remove_by_id("missing") is False
        assert len(store) == 1
        assert calls == []

    def test_snapshots_are_copy_on_write(self):
        """Test that a held snapshot never changes."""
        store = MessageStore()
        store.append(UserMessage(text="one"))
        snapshot = store.all()

        store.append(UserMessage(text="two"))
        store.remove_by_id(snapshot[0].id)

        assert len(snapshot) == 1
        assert snapshot[0].text == "one"

    def test_subscribe_and_unsubscribe(self):
        """Test observers receive each new snapshot until unsubscribed."""
        store = MessageStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.append(UserMessage(text="one"))
        unsubscribe()
        store.append(UserMessage(text="two"))

        assert len(seen) == 1
        assert len(seen[0]) == 1

    def test_clear(self):
        """Test clearing the timeline."""
        store = MessageStore()
        store.append(UserMessage(text="one"))

        store.clear()

        assert store.all() == ()

    @given(st.lists(st.text(min_size=1, max_size=20), max_size=20))
    def test_append_preserves_order(self, texts: list[str]):
        """Property test: the timeline keeps append order."""
        store = MessageStore()
        for text in texts:
            store.append(UserMessage(text=text))

        assert [m.text for m in store.all()] == texts


class TestRendering:
    """Tests for system message and banner templates."""

    def test_system_texts(self):
        """Test system message templates."""
        assert "trouble responding" in system_text(SystemMessage(kind=SystemKind.EMPTY_RESPONSE))
        assert system_text(SystemMessage(kind=SystemKind.FINISH_CONVERSATION)) == "End of conversation"
        assert system_text(SystemMessage(kind=SystemKind.REQUEST_ERROR)) == "Please try again later."

        redirect = system_text(SystemMessage(kind=SystemKind.REDIRECT, args=("https://example.com",)))
        assert "https://example.com" in redirect

    def test_message_too_long_banner(self):
        """Test the message-too-long banner carries the limit."""
        content = banner_content(BannerMessage(kind=BannerKind.MESSAGE_TOO_LONG, args=("2048",)))

        assert content.title == "Your message cannot exceed 2048 characters."
        assert content.variant == "info"

    def test_service_account_banner_shows_credentials(self):
        """Test the success banner renders all four arguments."""
        content = banner_content(BannerMessage(
            kind=BannerKind.CREATE_SERVICE_ACCOUNT,
            args=("svc", "desc", "client-1", "s3cret")
        ))

        assert content.variant == "success"
        assert "Client Id: client-1" in content.body
        assert "Secret: s3cret" in content.body

    def test_failed_banners_are_danger(self):
        """Test failure banners use the danger variant."""
        for kind in (BannerKind.CREATE_SERVICE_ACCOUNT_FAILED, BannerKind.TOGGLE_ORG_2FA_FAILED, BannerKind.REQUEST_ERROR):
            assert banner_content(BannerMessage(kind=kind)).variant == "danger"

    def test_toggle_2fa_banner_follows_flag(self):
        """Test the 2FA banner title depends on the flag argument."""
        enabled = banner_content(BannerMessage(kind=BannerKind.TOGGLE_ORG_2FA, args=("true",)))
        disabled = banner_content(BannerMessage(kind=BannerKind.TOGGLE_ORG_2FA, args=("false",)))

        assert "enabled" in enabled.title
        assert "disabled" in disabled.title

    def test_feedback_prompt_defaults(self):
        """Test the feedback prompt keeps both payloads."""
        prompt = FeedbackPromptMessage(thumbs_up="/up", thumbs_down="/down")

        assert prompt.origin == "feedback-prompt"
        assert (prompt.thumbs_up, prompt.thumbs_down) == ("/up", "/down")
