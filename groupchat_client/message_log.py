"""Append-only chat message log and entry classification."""

from __future__ import annotations

from collections.abc import Iterator

from .protocol import ChatEntry

SELF_SENDER_MARKER = "You"

_MEDIA_HOST = "giphy.com"
_MEDIA_SUFFIX = ".gif"


class MessageLog:
    """Insertion-ordered log of chat entries for one session.

    Entries are never removed or reordered and there is no capacity bound.
    The log is only mutated from the session's control path.
    """

    def __init__(self) -> None:
        self._entries: list[ChatEntry] = []

    def append(self, entry: ChatEntry) -> None:
        """Append an entry to the end of the log."""
        if not isinstance(entry, ChatEntry):
            raise TypeError(f"Expected ChatEntry, got {type(entry).__name__}")
        self._entries.append(entry)

    @property
    def entries(self) -> tuple[ChatEntry, ...]:
        """Snapshot of the log in insertion order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChatEntry]:
        return iter(tuple(self._entries))

    def __getitem__(self, index: int) -> ChatEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"MessageLog(entries={len(self._entries)})"


def is_self_authored(entry: ChatEntry, marker: str = SELF_SENDER_MARKER) -> bool:
    """Return True when the server labelled ``entry`` as the local user's own.

    The client never tags its outbound messages; the server echoes them back
    with ``marker`` as the sender.
    """
    return entry.sender == marker


def is_media_body(body: str) -> bool:
    """Return True when a message body is an animated image link."""
    return body.endswith(_MEDIA_SUFFIX) or _MEDIA_HOST in body
