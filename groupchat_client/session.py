"""Chat session state machine.

The session owns the participant roster and the message log. It turns
inbound frames into roster and log updates and local user actions into
outbound frames. It handles:
- Registration of the local user on construction
- Inbound frame decoding and dispatch
- Outbound message submission
- Serialization of both through a single event queue

Every decode and send failure is absorbed here: logged, counted in
``diagnostics`` and otherwise ignored. Nothing is retried and nothing is
surfaced to the presentation layer.

Sent messages are not appended locally. They only show up in the log when
the server echoes them back, labelled with the self sender marker.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass
from enum import Enum

from .channel import ChatChannel
from .errors import (
    DecodeError,
    MalformedFrameError,
    SendError,
    UnknownVariantError,
)
from .message_log import SELF_SENDER_MARKER, MessageLog
from .protocol import (
    ChatEntry,
    MessageType,
    build_message,
    build_register,
    decode_chat_entry,
    decode_envelope,
)
from .roster import DEFAULT_AVATAR_BASE, Participant, apply_roster
from .view import ChatView, build_view

_LOGGER = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a chat session. Teardown is handled by the owner."""

    CREATED = "created"
    REGISTERED = "registered"
    ACTIVE = "active"


@dataclass(slots=True)
class SessionDiagnostics:
    """Counters for frames seen, dropped and sent by a session."""

    frames_received: int = 0
    frames_discarded: int = 0
    malformed_frames: int = 0
    unknown_variants: int = 0
    frames_sent: int = 0
    send_failures: int = 0


@dataclass(frozen=True, slots=True)
class _InboundFrame:
    text: str


@dataclass(frozen=True, slots=True)
class _Submission:
    text: str


_STOP = object()


class ChatSession:
    """State machine for one mounted chat view.

    Usage:
        channel = QueueChannel()
        session = ChatSession("Alice", channel)   # sends the register frame
        session.on_change(render)
        runner = asyncio.create_task(session.run())
        session.post_inbound(frame_text)
        session.post_submit("hello")
        session.stop()
        await runner
    """

    def __init__(
        self,
        local_name: str,
        channel: ChatChannel,
        *,
        avatar_base: str = DEFAULT_AVATAR_BASE,
        self_sender_marker: str = SELF_SENDER_MARKER,
    ) -> None:
        """Initialize the session and register the local user.

        Args:
            local_name: Display name of the local user
            channel: Connection channel for outbound and inbound frames
            avatar_base: Base URL of the identicon service
            self_sender_marker: Sender label the server uses for the local
                user's own echoed messages
        """
        self._local_name = local_name
        self._channel = channel
        self._avatar_base = avatar_base
        self._self_sender_marker = self_sender_marker

        self._state = SessionState.CREATED
        self._participants: tuple[Participant, ...] = ()
        self._log = MessageLog()
        self._diagnostics = SessionDiagnostics()

        self._events: asyncio.Queue[object] = asyncio.Queue()
        self._change_callback: Callable[[ChatSession], None] | None = None

        self._register()

    # -------------------------------------------------------------------------
    # Public API: State
    # -------------------------------------------------------------------------

    @property
    def local_name(self) -> str:
        return self._local_name

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def participants(self) -> tuple[Participant, ...]:
        return self._participants

    @property
    def messages(self) -> tuple[ChatEntry, ...]:
        return self._log.entries

    @property
    def message_log(self) -> MessageLog:
        return self._log

    @property
    def diagnostics(self) -> SessionDiagnostics:
        return self._diagnostics

    @property
    def self_sender_marker(self) -> str:
        return self._self_sender_marker

    def view(self) -> ChatView:
        """Snapshot of the roster and log for rendering."""
        return build_view(
            self._participants,
            self._log.entries,
            marker=self._self_sender_marker,
            avatar_base=self._avatar_base,
        )

    def on_change(self, callback: Callable[[ChatSession], None]) -> None:
        """Register the callback invoked whenever roster or log change."""
        self._change_callback = callback

    # -------------------------------------------------------------------------
    # Public API: Transitions
    # -------------------------------------------------------------------------

    def handle_inbound(self, text: str) -> bool:
        """Apply one inbound frame.

        Returns:
            True if the roster or the log changed, False otherwise
        """
        self._diagnostics.frames_received += 1
        self._set_state(SessionState.ACTIVE)

        try:
            envelope = decode_envelope(text)
        except UnknownVariantError as err:
            self._diagnostics.unknown_variants += 1
            self._discard(err)
            return False
        except MalformedFrameError as err:
            self._diagnostics.malformed_frames += 1
            self._discard(err)
            return False

        if envelope.message_type is MessageType.USERS:
            self._participants = apply_roster(
                envelope.names, avatar_base=self._avatar_base
            )
            _LOGGER.debug(
                "[%s] Roster: %d participants",
                self._local_name,
                len(self._participants),
            )
            self._notify()
            return True

        if envelope.message_type is MessageType.MESSAGE:
            if envelope.data is None:
                self._diagnostics.malformed_frames += 1
                self._discard(MalformedFrameError("Chat frame has no payload"))
                return False
            try:
                entry = decode_chat_entry(envelope.data)
            except DecodeError as err:
                self._diagnostics.malformed_frames += 1
                self._discard(err)
                return False
            self._log.append(entry)
            self._notify()
            return True

        # Servers never address register frames to clients.
        _LOGGER.debug("[%s] Ignoring inbound register frame", self._local_name)
        return False

    def submit_outbound(self, raw_text: str) -> bool:
        """Send a chat message typed by the local user.

        Empty text is dropped. Nothing is appended to the log; the message
        appears once the server echoes it back.

        Returns:
            True if a frame was handed to the channel, False otherwise
        """
        if not raw_text:
            return False
        return self._send(build_message(raw_text), "message")

    # -------------------------------------------------------------------------
    # Public API: Event loop
    # -------------------------------------------------------------------------

    def post_inbound(self, text: str) -> None:
        """Queue an inbound frame for the control loop."""
        self._events.put_nowait(_InboundFrame(text))

    def post_submit(self, raw_text: str) -> None:
        """Queue a local submission for the control loop."""
        self._events.put_nowait(_Submission(raw_text))

    def stop(self) -> None:
        """Stop ``run`` once the events queued so far are processed."""
        self._events.put_nowait(_STOP)

    async def run(self) -> None:
        """Apply queued events one at a time until ``stop`` is called."""
        _LOGGER.debug("[%s] Control loop started", self._local_name)
        while True:
            event = await self._events.get()
            if event is _STOP:
                break
            try:
                if isinstance(event, _InboundFrame):
                    self.handle_inbound(event.text)
                elif isinstance(event, _Submission):
                    self.submit_outbound(event.text)
            except Exception as err:
                _LOGGER.exception(
                    "[%s] Unexpected error handling event: %s", self._local_name, err
                )
        _LOGGER.debug("[%s] Control loop stopped", self._local_name)

    async def pump(self, frames: AsyncIterable[str]) -> None:
        """Forward inbound frames into the control loop in arrival order."""
        count = 0
        async for text in frames:
            count += 1
            self.post_inbound(text)
        _LOGGER.info(
            "[%s] Inbound stream ended after %d frames", self._local_name, count
        )

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _register(self) -> None:
        """Send the register frame. Failure does not stop the session."""
        self._send(build_register(self._local_name), "register")
        self._set_state(SessionState.REGISTERED)

    def _send(self, frame: str, what: str) -> bool:
        try:
            self._channel.send(frame)
        except SendError as err:
            self._diagnostics.send_failures += 1
            _LOGGER.warning(
                "[%s] Failed to send %s frame: %s", self._local_name, what, err
            )
            return False
        self._diagnostics.frames_sent += 1
        _LOGGER.debug("[%s] %s frame sent", self._local_name, what.capitalize())
        return True

    def _discard(self, err: DecodeError) -> None:
        self._diagnostics.frames_discarded += 1
        _LOGGER.debug("[%s] Discarding frame: %s", self._local_name, err)

    def _set_state(self, state: SessionState) -> None:
        if self._state is not state:
            _LOGGER.debug(
                "[%s] State: %s → %s",
                self._local_name,
                self._state.value,
                state.value,
            )
            self._state = state

    def _notify(self) -> None:
        if self._change_callback is None:
            return
        try:
            self._change_callback(self)
        except Exception as err:
            _LOGGER.exception(
                "[%s] Change callback error: %s", self._local_name, err
            )
