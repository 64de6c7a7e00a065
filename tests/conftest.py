"""Pytest configuration and fixtures for groupchat_client tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from groupchat_client.channel import ChatChannel
from groupchat_client.errors import SendError


class RecordingChannel(ChatChannel):
    """Channel that records sent frames and can be told to fail."""

    def __init__(self, *, fail_with: SendError | None = None) -> None:
        self.sent: list[str] = []
        self.fail_with = fail_with
        self.send_calls = 0

    def send(self, text: str) -> None:
        self.send_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(text)

    def __aiter__(self):
        return self._empty()

    async def _empty(self):
        return
        yield  # pragma: no cover

    def sent_json(self) -> list[dict[str, Any]]:
        return [json.loads(frame) for frame in self.sent]


class AsyncIteratorMock:
    """Async iterator over canned websocket frames."""

    def __init__(self, items: list, *, raise_on_iter: Exception | None = None):
        self._items = items
        self._index = 0
        self._raise_on_iter = raise_on_iter
        self.close = AsyncMock()
        self.send = AsyncMock()
        self.close_code = 1000

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._raise_on_iter is not None:
            raise self._raise_on_iter
        if self._index >= len(self._items):
            raise StopAsyncIteration
        item = self._items[self._index]
        self._index += 1
        return item


@pytest.fixture
def channel() -> RecordingChannel:
    """Create a channel that accepts every frame."""
    return RecordingChannel()


@pytest.fixture
def change_callback() -> MagicMock:
    """Create a mock re-render callback."""
    return MagicMock()


def users_frame(*names: str) -> str:
    """Encode a roster frame the way the server does."""
    return json.dumps({"messageType": "users", "dataArray": list(names)})


def message_frame(sender: str, body: str) -> str:
    """Encode a chat frame with a nested entry the way the server does."""
    entry = json.dumps({"from": sender, "message": body})
    return json.dumps({"messageType": "message", "data": entry})
