"""Frame codec for the group chat wire protocol.

Every frame is a JSON object with a ``messageType`` discriminant and one of
two optional payload fields:

- ``users``: ``dataArray`` holds the ordered roster of display names.
- ``register``: ``data`` holds the local display name (client to server).
- ``message``: ``data`` holds a nested, separately encoded chat entry
  (``{"from": ..., "message": ...}``) inbound, or raw text outbound.

Decoding the envelope never decodes the nested chat entry. Callers run
``decode_chat_entry`` as a second step, and each step can fail on its own.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeGuard

from .errors import MalformedFrameError, UnknownVariantError

FIELD_MESSAGE_TYPE = "messageType"
FIELD_DATA_ARRAY = "dataArray"
FIELD_DATA = "data"

ENTRY_FIELD_SENDER = "from"
ENTRY_FIELD_BODY = "message"

_SEPARATORS = (",", ":")


class MessageType(Enum):
    """Envelope discriminant values as they appear on the wire."""

    USERS = "users"
    REGISTER = "register"
    MESSAGE = "message"


@dataclass(frozen=True)
class Envelope:
    """Outer wire frame.

    ``data_array`` is populated only for ``USERS``; ``data`` only for
    ``REGISTER`` and ``MESSAGE``. A ``MESSAGE`` envelope may arrive with no
    payload, which the session treats as an undecodable chat entry.
    """

    message_type: MessageType
    data_array: tuple[str, ...] | None = None
    data: str | None = None

    def __post_init__(self) -> None:
        if self.message_type is MessageType.USERS:
            if self.data is not None:
                raise ValueError("users envelopes carry dataArray, not data")
        elif self.data_array is not None:
            raise ValueError(
                f"{self.message_type.value} envelopes carry data, not dataArray"
            )

    @classmethod
    def roster(cls, names: Iterable[str] | None) -> Envelope:
        """Build a roster snapshot envelope."""
        return cls(MessageType.USERS, data_array=tuple(names or ()))

    @classmethod
    def register(cls, name: str) -> Envelope:
        """Build the registration envelope for the local user."""
        return cls(MessageType.REGISTER, data=name)

    @classmethod
    def chat(cls, text: str | None) -> Envelope:
        """Build a chat envelope carrying ``text`` as its opaque payload."""
        return cls(MessageType.MESSAGE, data=text)

    @property
    def names(self) -> tuple[str, ...]:
        """Roster names; a roster envelope without a list is an empty roster."""
        return self.data_array or ()


@dataclass(frozen=True)
class ChatEntry:
    """A decoded chat message."""

    sender: str
    body: str


def _is_string_sequence(value: Any) -> TypeGuard[Sequence[str]]:
    """Return True when value is a JSON array holding only strings."""
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _load_object(text: str | bytes, what: str) -> dict[str, Any]:
    """Parse ``text`` as a JSON object or raise MalformedFrameError."""
    try:
        value = json.loads(text)
    except (TypeError, ValueError, RecursionError) as err:
        raise MalformedFrameError(f"{what} is not valid JSON: {err}") from err
    if not isinstance(value, dict):
        raise MalformedFrameError(
            f"{what} must be a JSON object, got {type(value).__name__}"
        )
    return value


def encode_envelope(envelope: Envelope) -> str:
    """Encode an envelope into its canonical compact JSON text.

    Absent payload fields are omitted rather than sent as ``null``.
    """
    frame: dict[str, Any] = {FIELD_MESSAGE_TYPE: envelope.message_type.value}
    if envelope.data_array is not None:
        frame[FIELD_DATA_ARRAY] = list(envelope.data_array)
    if envelope.data is not None:
        frame[FIELD_DATA] = envelope.data
    return json.dumps(frame, ensure_ascii=False, separators=_SEPARATORS)


def decode_envelope(text: str | bytes) -> Envelope:
    """Decode frame text into an Envelope.

    Args:
        text: Raw frame as received from the connection channel.

    Returns:
        The decoded envelope. Unknown fields are ignored, and so is the
        payload field that does not belong to the decoded variant.

    Raises:
        MalformedFrameError: Text is not a JSON object, the discriminant is
            missing, or a payload field has the wrong JSON type.
        UnknownVariantError: The discriminant names no known variant.
    """
    frame = _load_object(text, "Frame")

    raw_type = frame.get(FIELD_MESSAGE_TYPE)
    if not isinstance(raw_type, str):
        raise MalformedFrameError(f"Frame has no string {FIELD_MESSAGE_TYPE}")
    try:
        message_type = MessageType(raw_type)
    except ValueError as err:
        raise UnknownVariantError(raw_type) from err

    if message_type is MessageType.USERS:
        names = frame.get(FIELD_DATA_ARRAY)
        if names is None:
            return Envelope.roster(())
        if not _is_string_sequence(names):
            raise MalformedFrameError(f"{FIELD_DATA_ARRAY} must be a list of strings")
        return Envelope.roster(names)

    data = frame.get(FIELD_DATA)
    if data is not None and not isinstance(data, str):
        raise MalformedFrameError(f"{FIELD_DATA} must be a string")
    return Envelope(message_type, data=data)


def encode_chat_entry(entry: ChatEntry) -> str:
    """Encode a chat entry into the nested payload text."""
    return json.dumps(
        {ENTRY_FIELD_SENDER: entry.sender, ENTRY_FIELD_BODY: entry.body},
        ensure_ascii=False,
        separators=_SEPARATORS,
    )


def decode_chat_entry(payload: str | bytes) -> ChatEntry:
    """Decode the nested payload of a ``message`` envelope.

    Raises:
        MalformedFrameError: Payload is not a JSON object with string
            ``from`` and ``message`` fields.
    """
    obj = _load_object(payload, "Chat payload")
    sender = obj.get(ENTRY_FIELD_SENDER)
    body = obj.get(ENTRY_FIELD_BODY)
    if not isinstance(sender, str) or not isinstance(body, str):
        raise MalformedFrameError(
            f"Chat payload needs string {ENTRY_FIELD_SENDER!r} and "
            f"{ENTRY_FIELD_BODY!r} fields"
        )
    return ChatEntry(sender=sender, body=body)


def build_register(name: str) -> str:
    """Encode the registration frame sent when a session starts."""
    return encode_envelope(Envelope.register(name))


def build_message(text: str) -> str:
    """Encode an outbound chat frame carrying raw, unparsed text."""
    return encode_envelope(Envelope.chat(text))


def build_users(names: Iterable[str]) -> str:
    """Encode a roster snapshot frame, as the server sends it."""
    return encode_envelope(Envelope.roster(names))
