"""WebSocket connection carrying chat frames.

The chat server only speaks text frames: one JSON frame per message. Reading
yields the frame text and ends when the connection goes away; the reason is
logged and kept on ``close_reason``. Binary and control frames are skipped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

import websockets
from aiohttp import ClientError, ClientWebSocketResponse, WSMsgType
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    ConnectionClosed,
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from .errors import ChatConnectionError, ChatHandshakeError, ChatTimeout

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_LOGGER = logging.getLogger(__name__)

WEBSOCKET_SCHEMES = frozenset({"ws", "wss"})


async def connect_websocket(
    url: str,
    *,
    ping_interval: int | None = 20,
    timeout: float = 15.0,
) -> ClientConnection:
    """Open a WebSocket connection to the chat server.

    Args:
        url: Server URL, e.g. ``ws://127.0.0.1:8080``
        ping_interval: Keepalive ping interval in seconds, None to disable
        timeout: Connection timeout in seconds

    Raises:
        ChatHandshakeError: The URL is not a ws/wss URL or the server
            rejected the upgrade
        ChatTimeout: The connection did not complete within ``timeout``
        ChatConnectionError: The server could not be reached
    """
    if urlsplit(url).scheme not in WEBSOCKET_SCHEMES:
        raise ChatHandshakeError(f"Not a WebSocket URL: {url!r}")
    try:
        return await asyncio.wait_for(
            websockets.connect(url, ping_interval=ping_interval, close_timeout=5),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise ChatTimeout(f"Timed out connecting to {url}") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise ChatHandshakeError(f"Chat server at {url} refused the upgrade") from err
    except (OSError, WebSocketException) as err:
        raise ChatConnectionError(f"Cannot reach chat server at {url}: {err}") from err


class ChatWsClient:
    """Text-frame connection to the chat server.

    Backed by a websockets ``ClientConnection`` opened with ``connect`` or
    by any connection handed to ``attach``, including an aiohttp
    ``ClientWebSocketResponse``.
    """

    def __init__(self) -> None:
        self._ws: Any = None
        self.close_reason: str | None = None

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    async def connect(
        self,
        url: str,
        *,
        ping_interval: int = 20,
        timeout: float = 15.0,
    ) -> None:
        """Connect to the chat server."""
        self._ws = await connect_websocket(
            url, ping_interval=ping_interval, timeout=timeout
        )

    def attach(self, connection: Any) -> None:
        """Use a connection opened elsewhere."""
        self._ws = connection

    async def close(self) -> None:
        """Close the connection."""
        if self._ws is not None:
            await self._ws.close()

    async def send_text(self, text: str) -> None:
        """Send one text frame.

        Raises:
            ChatConnectionError: If not connected
        """
        if self._ws is None:
            raise ChatConnectionError("WebSocket is not connected")
        if isinstance(self._ws, ClientWebSocketResponse):
            await self._ws.send_str(text)
        else:
            await self._ws.send(text)

    def frames(self) -> AsyncIterator[str]:
        """Iterate inbound text frames until the connection ends.

        Raises:
            ChatConnectionError: If not connected
        """
        if self._ws is None:
            raise ChatConnectionError("WebSocket is not connected")
        if isinstance(self._ws, ClientWebSocketResponse):
            return self._read_aiohttp(self._ws)
        return self._read_websockets(self._ws)

    def __aiter__(self) -> AsyncIterator[str]:
        return self.frames()

    async def _read_websockets(self, ws: Any) -> AsyncIterator[str]:
        try:
            async for frame in ws:
                if isinstance(frame, str):
                    yield frame
                else:
                    _LOGGER.debug("Skipping binary frame (%d bytes)", len(frame))
        except ConnectionClosed as err:
            self._ended(f"connection lost: {err}")
        except (WebSocketException, OSError) as err:
            self._ended(f"transport error: {err}")
        else:
            self._ended(f"closed by server (code {ws.close_code})")

    async def _read_aiohttp(self, ws: ClientWebSocketResponse) -> AsyncIterator[str]:
        try:
            async for msg in ws:
                if msg.type is WSMsgType.TEXT:
                    yield msg.data
                elif msg.type is WSMsgType.ERROR:
                    self._ended(f"transport error: {ws.exception()}")
                    return
                else:
                    _LOGGER.debug("Skipping %s frame", msg.type.name)
        except (ClientError, OSError) as err:
            self._ended(f"transport error: {err}")
        else:
            self._ended(f"closed by server (code {ws.close_code})")

    def _ended(self, reason: str) -> None:
        self.close_reason = reason
        _LOGGER.info("Chat connection ended: %s", reason)
