"""Client-side protocol and state engine for a real-time group chat."""

__version__ = "0.1.0"

from .channel import BufferedChannel, ChatChannel, QueueChannel, WebSocketChannel
from .client import ChatClient
from .config import ChatClientConfig, load_config
from .errors import (
    ChannelClosedError,
    ChannelFullError,
    ChatClientError,
    ChatConnectionError,
    ChatHandshakeError,
    ChatTimeout,
    DecodeError,
    MalformedFrameError,
    SendError,
    UnknownVariantError,
)
from .message_log import (
    SELF_SENDER_MARKER,
    MessageLog,
    is_media_body,
    is_self_authored,
)
from .protocol import (
    ChatEntry,
    Envelope,
    MessageType,
    build_message,
    build_register,
    build_users,
    decode_chat_entry,
    decode_envelope,
    encode_chat_entry,
    encode_envelope,
)
from .roster import DEFAULT_AVATAR_BASE, Participant, apply_roster, avatar_url
from .session import ChatSession, SessionDiagnostics, SessionState
from .view import ChatView, ChatViewEntry, build_view
from .ws_client import ChatWsClient, connect_websocket

__all__ = [
    "DEFAULT_AVATAR_BASE",
    "SELF_SENDER_MARKER",
    "BufferedChannel",
    "ChannelClosedError",
    "ChannelFullError",
    "ChatChannel",
    "ChatClient",
    "ChatClientConfig",
    "ChatClientError",
    "ChatConnectionError",
    "ChatEntry",
    "ChatHandshakeError",
    "ChatSession",
    "ChatTimeout",
    "ChatView",
    "ChatViewEntry",
    "ChatWsClient",
    "DecodeError",
    "Envelope",
    "MalformedFrameError",
    "MessageLog",
    "MessageType",
    "Participant",
    "QueueChannel",
    "SendError",
    "SessionDiagnostics",
    "SessionState",
    "UnknownVariantError",
    "WebSocketChannel",
    "__version__",
    "apply_roster",
    "avatar_url",
    "build_message",
    "build_register",
    "build_users",
    "build_view",
    "connect_websocket",
    "decode_chat_entry",
    "decode_envelope",
    "encode_chat_entry",
    "encode_envelope",
    "is_media_body",
    "is_self_authored",
    "load_config",
]
