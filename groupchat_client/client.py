"""High-level chat client.

Wires a websocket connection, a WebSocketChannel and a ChatSession
together and runs the session's control loop and inbound pump as tasks.
Reconnection is not attempted; when the server goes away the session
keeps its last state and further sends are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .channel import WebSocketChannel
from .config import ChatClientConfig
from .session import ChatSession
from .ws_client import ChatWsClient

_LOGGER = logging.getLogger(__name__)


class ChatClient:
    """Chat room client for one local user.

    Usage:
        client = ChatClient("Alice", ChatClientConfig(server_url="ws://host:8080"))
        client.on_change(render)
        await client.start()
        client.submit("hello")
        await client.close()
    """

    def __init__(self, local_name: str, config: ChatClientConfig | None = None):
        self.local_name = local_name
        self.config = config or ChatClientConfig()

        self._ws: ChatWsClient | None = None
        self._channel: WebSocketChannel | None = None
        self._session: ChatSession | None = None
        self._run_task: asyncio.Task[None] | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._change_callback: Callable[[ChatSession], None] | None = None

    @property
    def session(self) -> ChatSession | None:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._run_task is not None and not self._run_task.done()

    def on_change(self, callback: Callable[[ChatSession], None]) -> None:
        """Register the callback invoked whenever roster or log change."""
        self._change_callback = callback
        if self._session is not None:
            self._session.on_change(callback)

    async def start(self) -> ChatSession:
        """Connect, register the local user and start processing frames.

        Raises:
            ChatTimeout: The server did not answer in time
            ChatHandshakeError: The websocket handshake failed
            ChatConnectionError: The server could not be reached
        """
        if self._session is not None:
            return self._session

        _LOGGER.info(
            "[%s] Connecting to %s", self.local_name, self.config.server_url
        )
        ws = ChatWsClient()
        await ws.connect(
            self.config.server_url,
            ping_interval=self.config.ping_interval,
            timeout=self.config.connect_timeout,
        )
        self._ws = ws

        channel = WebSocketChannel(ws, maxsize=self.config.outbound_queue_size)
        channel.start()
        self._channel = channel

        session = ChatSession(
            self.local_name,
            channel,
            avatar_base=self.config.avatar_base,
            self_sender_marker=self.config.self_sender_marker,
        )
        if self._change_callback is not None:
            session.on_change(self._change_callback)
        self._session = session

        self._run_task = asyncio.create_task(session.run())
        self._pump_task = asyncio.create_task(session.pump(channel))
        _LOGGER.info("[%s] Connected", self.local_name)
        return session

    def submit(self, text: str) -> None:
        """Queue a chat message typed by the local user."""
        if self._session is None:
            _LOGGER.warning("[%s] Submit ignored: not started", self.local_name)
            return
        self._session.post_submit(text)

    async def close(self) -> None:
        """Stop processing frames and close the connection."""
        _LOGGER.info("[%s] Closing client", self.local_name)

        if self._pump_task is not None:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except asyncio.CancelledError:
                pass
            self._pump_task = None

        if self._session is not None and self._run_task is not None:
            self._session.stop()
            await self._run_task
            self._run_task = None

        if self._channel is not None:
            await self._channel.aclose()
            self._channel = None
            self._ws = None
