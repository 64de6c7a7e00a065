"""Connection channels between the chat session and the transport.

A channel accepts outbound frames without blocking and yields inbound frames
in arrival order. Establishing and re-establishing the underlying connection
is the caller's job.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from websockets.exceptions import WebSocketException

from .errors import ChannelClosedError, ChannelFullError, ChatClientError
from .ws_client import ChatWsClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_LOGGER = logging.getLogger(__name__)

DEFAULT_OUTBOUND_QUEUE_SIZE = 1000

_CLOSED = object()


class ChatChannel(ABC):
    """Duplex text channel used by ChatSession."""

    @abstractmethod
    def send(self, text: str) -> None:
        """Queue an outbound frame without blocking.

        Raises:
            ChannelClosedError: The channel no longer accepts frames
            ChannelFullError: The outbound queue is at capacity
        """

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[str]:
        """Iterate inbound frames in arrival order."""


class BufferedChannel(ChatChannel):
    """Channel with a bounded outbound queue.

    Outbound frames wait in the queue until a writer (or a test) drains
    them. Subclasses decide where inbound frames come from.
    """

    def __init__(self, maxsize: int = DEFAULT_OUTBOUND_QUEUE_SIZE) -> None:
        self._outbound: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, text: str) -> None:
        if self._closed:
            raise ChannelClosedError("Channel is closed")
        try:
            self._outbound.put_nowait(text)
        except asyncio.QueueFull as err:
            raise ChannelFullError(
                f"Outbound queue full ({self._outbound.maxsize} frames)"
            ) from err

    def drain_outbound(self) -> list[str]:
        """Remove and return every queued outbound frame."""
        frames: list[str] = []
        while not self._outbound.empty():
            frames.append(self._outbound.get_nowait())
        return frames

    async def next_outbound(self) -> str:
        """Wait for the next outbound frame."""
        return await self._outbound.get()

    def close(self) -> None:
        """Stop accepting frames."""
        self._closed = True


class QueueChannel(BufferedChannel):
    """In-memory channel; inbound frames are pushed with ``feed``."""

    def __init__(self, maxsize: int = DEFAULT_OUTBOUND_QUEUE_SIZE) -> None:
        super().__init__(maxsize=maxsize)
        self._inbound: asyncio.Queue[object] = asyncio.Queue()

    def feed(self, text: str) -> None:
        """Deliver an inbound frame."""
        if self._closed:
            raise ChannelClosedError("Channel is closed")
        self._inbound.put_nowait(text)

    def close(self) -> None:
        """Stop accepting frames and end inbound iteration."""
        if self._closed:
            return
        super().close()
        self._inbound.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            item = await self._inbound.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]


class WebSocketChannel(BufferedChannel):
    """Channel whose outbound queue is written to a websocket.

    Inbound iteration yields text frames until the connection ends; the
    channel is closed afterwards.
    """

    def __init__(
        self, ws: ChatWsClient, maxsize: int = DEFAULT_OUTBOUND_QUEUE_SIZE
    ) -> None:
        super().__init__(maxsize=maxsize)
        self._ws = ws
        self._writer_task: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Start the writer task that drains the outbound queue."""
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(self._write_loop())

    async def _write_loop(self) -> None:
        try:
            while True:
                text = await self.next_outbound()
                await self._ws.send_text(text)
                _LOGGER.debug("Frame written (%d chars)", len(text))
        except asyncio.CancelledError:
            _LOGGER.debug("Writer cancelled")
            raise
        except (ChatClientError, WebSocketException, OSError) as err:
            _LOGGER.warning("Write failed, closing channel: %s", err)
            self.close()

    async def __aiter__(self) -> AsyncIterator[str]:
        try:
            async for text in self._ws.frames():
                yield text
        finally:
            self.close()

    async def aclose(self) -> None:
        """Close the channel, stop the writer and close the websocket."""
        self.close()
        if self._writer_task is not None:
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass
            self._writer_task = None
        await self._ws.close()
