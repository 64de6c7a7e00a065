"""Client error types for group chat protocol and transport failures."""

from __future__ import annotations


class ChatClientError(Exception):
    """Base error for group chat client failures."""


class DecodeError(ChatClientError):
    """Inbound frame could not be decoded."""


class MalformedFrameError(DecodeError):
    """Frame text is not well-formed or does not match the wire schema."""


class UnknownVariantError(DecodeError):
    """Frame carries a message type the client does not know."""

    def __init__(self, message_type: str) -> None:
        super().__init__(f"Unknown message type: {message_type!r}")
        self.message_type = message_type


class SendError(ChatClientError):
    """Outbound frame could not be handed to the connection channel."""


class ChannelClosedError(SendError):
    """Connection channel is closed."""


class ChannelFullError(SendError):
    """Connection channel has no free outbound capacity."""


class ChatTimeout(ChatClientError):
    """Timeout while connecting to the chat server."""


class ChatConnectionError(ChatClientError):
    """Network connection to the chat server failed."""


class ChatHandshakeError(ChatClientError):
    """WebSocket handshake failed."""
