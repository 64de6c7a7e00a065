"""Read-only view model handed to the presentation layer.

The presentation layer renders these snapshots and never mutates session
state. Styling and layout are left entirely to the renderer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .message_log import SELF_SENDER_MARKER, is_media_body, is_self_authored
from .protocol import ChatEntry
from .roster import DEFAULT_AVATAR_BASE, Participant, avatar_url, find_participant


@dataclass(frozen=True)
class ChatViewEntry:
    """A chat entry with the attributes a renderer needs."""

    entry: ChatEntry
    self_authored: bool
    avatar_url: str
    is_media: bool


@dataclass(frozen=True)
class ChatView:
    """Snapshot of the roster and message log."""

    participants: tuple[Participant, ...]
    entries: tuple[ChatViewEntry, ...]

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_empty_roster(self) -> bool:
        return not self.participants

    @property
    def is_empty_log(self) -> bool:
        return not self.entries


def _entry_avatar(
    entry: ChatEntry,
    participants: Sequence[Participant],
    *,
    self_authored: bool,
    marker: str,
    avatar_base: str,
) -> str:
    if self_authored:
        return avatar_url(marker.lower(), base=avatar_base)
    participant = find_participant(participants, entry.sender)
    if participant is not None:
        return participant.avatar_url
    return avatar_url(entry.sender, base=avatar_base)


def build_view(
    participants: Sequence[Participant],
    messages: Sequence[ChatEntry],
    *,
    marker: str = SELF_SENDER_MARKER,
    avatar_base: str = DEFAULT_AVATAR_BASE,
) -> ChatView:
    """Build a view snapshot from the current roster and log.

    Senders still on the roster reuse their roster avatar; others get one
    derived from their name.
    """
    entries: list[ChatViewEntry] = []
    for entry in messages:
        own = is_self_authored(entry, marker)
        entries.append(
            ChatViewEntry(
                entry=entry,
                self_authored=own,
                avatar_url=_entry_avatar(
                    entry,
                    participants,
                    self_authored=own,
                    marker=marker,
                    avatar_base=avatar_base,
                ),
                is_media=is_media_body(entry.body),
            )
        )
    return ChatView(participants=tuple(participants), entries=tuple(entries))
