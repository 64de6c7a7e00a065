"""Tests for the message log and entry classification."""

from __future__ import annotations

import pytest

from groupchat_client.message_log import (
    SELF_SENDER_MARKER,
    MessageLog,
    is_media_body,
    is_self_authored,
)
from groupchat_client.protocol import ChatEntry


class TestMessageLog:
    """Tests for MessageLog."""

    def test_starts_empty(self):
        """Test a new log has no entries."""
        log = MessageLog()
        assert len(log) == 0
        assert log.entries == ()

    def test_append_preserves_order(self):
        """Test entries come back in insertion order."""
        log = MessageLog()
        entries = [ChatEntry("Bob", "one"), ChatEntry("Alice", "two"), ChatEntry("Bob", "one")]
        for entry in entries:
            log.append(entry)

        assert list(log) == entries
        assert log[0] == entries[0]
        assert log[-1] == entries[-1]
        assert len(log) == 3

    def test_entries_is_snapshot(self):
        """Test a snapshot does not change after later appends."""
        log = MessageLog()
        log.append(ChatEntry("Bob", "one"))
        snapshot = log.entries
        log.append(ChatEntry("Bob", "two"))
        assert snapshot == (ChatEntry("Bob", "one"),)

    def test_rejects_non_entries(self):
        """Test only ChatEntry values can be appended."""
        log = MessageLog()
        with pytest.raises(TypeError, match="ChatEntry"):
            log.append({"from": "Bob", "message": "hi"})  # type: ignore[arg-type]

    def test_repr(self):
        """Test repr shows the entry count."""
        log = MessageLog()
        log.append(ChatEntry("Bob", "hi"))
        assert repr(log) == "MessageLog(entries=1)"


class TestIsSelfAuthored:
    """Tests for is_self_authored()."""

    def test_marker(self):
        """Test the server's marker identifies own messages."""
        assert SELF_SENDER_MARKER == "You"
        assert is_self_authored(ChatEntry("You", "hi"))

    def test_other_sender(self):
        """Test other senders are not self-authored."""
        assert not is_self_authored(ChatEntry("Bob", "hi"))

    def test_case_sensitive(self):
        """Test the marker must match exactly."""
        assert not is_self_authored(ChatEntry("you", "hi"))

    def test_local_name_is_not_marker(self):
        """Test a message carrying the local name is not treated as own."""
        assert not is_self_authored(ChatEntry("Alice", "hi"))

    def test_custom_marker(self):
        """Test a configured marker is honoured."""
        assert is_self_authored(ChatEntry("me", "hi"), marker="me")


class TestIsMediaBody:
    """Tests for is_media_body()."""

    @pytest.mark.parametrize(
        "body",
        ["https://example.com/cat.gif", "https://media.giphy.com/media/abc/giphy"],
    )
    def test_media(self, body):
        """Test gif links are recognised."""
        assert is_media_body(body)

    @pytest.mark.parametrize("body", ["hello", "cat.gif is funny", "gif"])
    def test_text(self, body):
        """Test ordinary text is not media."""
        assert not is_media_body(body)
