"""Tests for roster reconciliation."""

from __future__ import annotations

import pytest

from groupchat_client.roster import (
    DEFAULT_AVATAR_BASE,
    Participant,
    apply_roster,
    avatar_url,
    find_participant,
)


class TestAvatarUrl:
    """Tests for avatar_url()."""

    def test_default_base(self):
        """Test the identicon URL for a plain name."""
        assert avatar_url("Alice") == f"{DEFAULT_AVATAR_BASE}/Alice.svg"

    def test_name_is_url_encoded(self):
        """Test reserved characters in names are escaped."""
        assert avatar_url("Ann Lee/#1") == f"{DEFAULT_AVATAR_BASE}/Ann%20Lee%2F%231.svg"

    def test_custom_base_trailing_slash(self):
        """Test a trailing slash on the base is not doubled."""
        assert avatar_url("Bob", base="https://ex.test/av/") == "https://ex.test/av/Bob.svg"

    def test_deterministic(self):
        """Test the same name always yields the same URL."""
        assert avatar_url("Bob") == avatar_url("Bob")


class TestApplyRoster:
    """Tests for apply_roster()."""

    def test_order_preserved(self):
        """Test participants follow the snapshot order."""
        participants = apply_roster(["Alice", "Bob"])
        assert participants == (
            Participant("Alice", avatar_url("Alice")),
            Participant("Bob", avatar_url("Bob")),
        )

    def test_duplicates_kept(self):
        """Test duplicate names are not collapsed."""
        assert [p.name for p in apply_roster(["Bob", "Bob"])] == ["Bob", "Bob"]

    def test_empty(self):
        """Test an empty snapshot yields no participants."""
        assert apply_roster([]) == ()

    def test_custom_avatar_base(self):
        """Test the avatar base is applied to each participant."""
        (participant,) = apply_roster(["Bob"], avatar_base="https://ex.test")
        assert participant.avatar_url == "https://ex.test/Bob.svg"

    def test_full_replace(self):
        """Test each snapshot is independent of the previous one."""
        first = apply_roster(["Alice", "Bob"])
        second = apply_roster(["Carol"])
        assert second == (Participant("Carol", avatar_url("Carol")),)
        assert apply_roster(["Alice", "Bob"]) == first

    def test_participant_is_frozen(self):
        """Test participants cannot be mutated."""
        (participant,) = apply_roster(["Bob"])
        with pytest.raises(AttributeError):
            participant.name = "Eve"  # type: ignore[misc]


class TestFindParticipant:
    """Tests for find_participant()."""

    def test_found(self):
        """Test the first matching participant is returned."""
        participants = apply_roster(["Alice", "Bob"])
        assert find_participant(participants, "Bob") == participants[1]

    def test_missing(self):
        """Test None is returned for an absent name."""
        assert find_participant(apply_roster(["Alice"]), "Bob") is None
