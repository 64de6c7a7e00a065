"""Tests for the chat view model."""

from __future__ import annotations

from groupchat_client.protocol import ChatEntry
from groupchat_client.roster import DEFAULT_AVATAR_BASE, apply_roster, avatar_url
from groupchat_client.view import build_view


class TestBuildView:
    """Tests for build_view()."""

    def test_empty(self):
        """Test an empty session renders placeholders."""
        view = build_view((), ())
        assert view.is_empty_roster
        assert view.is_empty_log
        assert view.participant_count == 0

    def test_participants(self):
        """Test the roster is passed through."""
        participants = apply_roster(["Alice", "Bob"])
        view = build_view(participants, ())
        assert view.participants == participants
        assert view.participant_count == 2
        assert not view.is_empty_roster

    def test_entry_from_roster_member(self):
        """Test senders on the roster reuse their roster avatar."""
        participants = apply_roster(["Bob"], avatar_base="https://ex.test")
        view = build_view(participants, [ChatEntry("Bob", "hi")], avatar_base="https://other.test")
        (item,) = view.entries
        assert item.avatar_url == "https://ex.test/Bob.svg"
        assert not item.self_authored
        assert not item.is_media

    def test_entry_from_unknown_sender(self):
        """Test senders off the roster get a derived avatar."""
        view = build_view((), [ChatEntry("Carol", "hi")])
        assert view.entries[0].avatar_url == avatar_url("Carol")

    def test_self_authored_entry(self):
        """Test own messages use the marker avatar."""
        view = build_view((), [ChatEntry("You", "hello")])
        (item,) = view.entries
        assert item.self_authored
        assert item.avatar_url == f"{DEFAULT_AVATAR_BASE}/you.svg"

    def test_media_entry(self):
        """Test gif bodies are flagged."""
        view = build_view((), [ChatEntry("Bob", "https://x.test/a.gif")])
        assert view.entries[0].is_media

    def test_order_preserved(self):
        """Test view entries follow log order."""
        messages = [ChatEntry("Bob", "1"), ChatEntry("You", "2"), ChatEntry("Bob", "3")]
        view = build_view((), messages)
        assert [item.entry for item in view.entries] == messages
