"""Client configuration.

Configuration is plain data: a frozen dataclass that can be built from
keyword arguments, a mapping, or a YAML file.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .channel import DEFAULT_OUTBOUND_QUEUE_SIZE
from .message_log import SELF_SENDER_MARKER
from .roster import DEFAULT_AVATAR_BASE


@dataclass(frozen=True)
class ChatClientConfig:
    """Settings for connecting to and rendering a chat room.

    Attributes:
        server_url: WebSocket URL of the chat server.
        avatar_base: Base URL of the identicon service.
        self_sender_marker: Sender label the server puts on the local
            user's echoed messages.
        outbound_queue_size: Capacity of the outbound frame queue.
        ping_interval: Keepalive ping interval in seconds.
        connect_timeout: Connection timeout in seconds.
    """

    server_url: str = "ws://127.0.0.1:8080"
    avatar_base: str = DEFAULT_AVATAR_BASE
    self_sender_marker: str = SELF_SENDER_MARKER
    outbound_queue_size: int = DEFAULT_OUTBOUND_QUEUE_SIZE
    ping_interval: int = 20
    connect_timeout: float = 15.0

    def __post_init__(self) -> None:
        if self.outbound_queue_size < 1:
            raise ValueError("outbound_queue_size must be at least 1")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ChatClientConfig:
        """Build a config from a mapping, rejecting unknown keys.

        Raises:
            ValueError: On unknown keys or values of the wrong type.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            expected = _FIELD_TYPES[key]
            # bool is an int subclass but never a valid setting here
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ValueError(
                    f"Config key {key!r} must be {_type_names(expected)}, "
                    f"got {type(value).__name__}"
                )
            values[key] = float(value) if key == "connect_timeout" else value
        return cls(**values)


_FIELD_TYPES: dict[str, type | tuple[type, ...]] = {
    "server_url": str,
    "avatar_base": str,
    "self_sender_marker": str,
    "outbound_queue_size": int,
    "ping_interval": int,
    "connect_timeout": (int, float),
}


def _type_names(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict for an empty file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return data


def load_config(path: str | Path) -> ChatClientConfig:
    """Load client configuration from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration; missing keys keep their defaults.
    """
    return ChatClientConfig.from_mapping(_load_yaml(Path(path)))
