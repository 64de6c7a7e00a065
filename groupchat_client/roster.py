"""Roster reconciliation.

A roster snapshot always replaces the previous participant list wholesale.
No state is carried between snapshots, so a participant who leaves and
rejoins comes back as a new (value-equal) Participant.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from urllib.parse import quote

DEFAULT_AVATAR_BASE = "https://avatars.dicebear.com/api/adventurer-neutral"


@dataclass(frozen=True)
class Participant:
    """A connected participant and their identicon URL."""

    name: str
    avatar_url: str


def avatar_url(name: str, *, base: str = DEFAULT_AVATAR_BASE) -> str:
    """Return the identicon URL for a display name."""
    return f"{base.rstrip('/')}/{quote(name, safe='')}.svg"


def apply_roster(
    names: Iterable[str], *, avatar_base: str = DEFAULT_AVATAR_BASE
) -> tuple[Participant, ...]:
    """Map a roster snapshot to participants.

    Order and duplicates are kept exactly as received.
    """
    return tuple(
        Participant(name=name, avatar_url=avatar_url(name, base=avatar_base))
        for name in names
    )


def find_participant(
    participants: Sequence[Participant], name: str
) -> Participant | None:
    """Return the first participant named ``name``, if any."""
    for participant in participants:
        if participant.name == name:
            return participant
    return None
