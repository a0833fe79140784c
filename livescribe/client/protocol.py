"""
WebSocket Session Client

Owns the single streaming connection of a live transcription session
and runs the session-lifecycle protocol over it.

Protocol:
1. Connect to {ws_url}/live-transcribe?lang=<language>[&token=<token>]
2. Send {"type": "info", "language": <language>}
3. Stream raw PCM16 frames (binary, fire-and-forget)
4. Send {"text": "stop"} to end input
5. Receive JSON events until {"type": "session_end", ...}

State machine:
    Idle --connect--> Connecting --open--> Streaming --stop--> StopRequested
    StopRequested --session_end--> Completed
    Streaming/StopRequested --close, error, timeout--> Failed
    Completed/Failed --connect--> Connecting (new session)

Only the first terminal event is honoured; anything after it is ignored.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from livescribe.config import LIVE_ENDPOINT, Settings, get_settings
from livescribe.core.errors import ProtocolError, TransportError
from livescribe.core.models import ErrorEvent, SessionEndEvent, SessionState, TranscriptEvent

from .events import decode_message, extract_session_id, info_message, parse_event, stop_message

logger = logging.getLogger(__name__)

# Max buffered frames before new audio is dropped (100 x 100ms = 10s)
AUDIO_QUEUE_SIZE = 100

Connector = Callable[[str], Awaitable[Any]]


class SessionClient:
    """
    Live transcription client for one connection at a time.

    Usage:
        client = SessionClient(on_event=assembler.feed)

        await client.connect("English")
        client.send(frame)            # from the event loop thread
        state = await client.stop()   # Completed or Failed
    """

    def __init__(
        self,
        settings: Settings | None = None,
        connector: Connector | None = None,
        on_event: Callable[[TranscriptEvent], None] | None = None,
        on_state_change: Callable[[SessionState, SessionState], None] | None = None,
        on_session_id: Callable[[str], None] | None = None,
        queue_size: int = AUDIO_QUEUE_SIZE,
    ):
        """
        Initialize session client.

        Args:
            settings: Endpoint and timeout configuration
            connector: Coroutine function opening a connection for a URI
                (defaults to websockets.connect)
            on_event: Called with every parsed event, in arrival order
            on_state_change: Called with (old, new) on each transition
            on_session_id: Called once when the server assigns an id
            queue_size: Outbound audio queue capacity in frames
        """
        self.settings = settings or get_settings()
        self._connector = connector or self._open_websocket
        self.on_event = on_event
        self.on_state_change = on_state_change
        self.on_session_id = on_session_id
        self.language = self.settings.language
        self._queue_size = queue_size

        self._state = SessionState.IDLE
        self._ws = None
        self._session_id: str | None = None
        self._audio_queue: asyncio.Queue | None = None
        self._send_task: asyncio.Task | None = None
        self._recv_task: asyncio.Task | None = None
        self._terminal: asyncio.Event | None = None
        self._stop_sent: asyncio.Event | None = None

        self.failure: str | None = None
        self.frames_sent = 0
        self.frames_dropped = 0

    # ── Properties ─────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session_id(self) -> str | None:
        """Server-assigned id; immutable once learned."""
        return self._session_id

    @property
    def endpoint(self) -> str:
        """WebSocket endpoint without query parameters (safe to log)."""
        return f"{self.settings.ws_url}{LIVE_ENDPOINT}"

    # ── Lifecycle ──────────────────────────────────────────────────

    async def connect(self, language: str | None = None) -> bool:
        """
        Open the streaming connection.

        No-op while a session is already connecting, streaming or stopping.

        Returns:
            True if a new connection was opened

        Raises:
            TransportError: The connection could not be opened (state is Failed)
        """
        if self._state.is_active:
            logger.warning(f"connect() ignored: session is {self._state.value}")
            return False

        if language:
            self.language = language

        self._reset()
        self._set_state(SessionState.CONNECTING)
        logger.info(f"Connecting to {self.endpoint} (lang={self.language})")

        try:
            self._ws = await self._connector(self.settings.live_uri(self.language))
            await self._ws.send(info_message(self.language))
        except (OSError, TimeoutError, WebSocketException) as e:
            self._fail(f"connect failed: {e}")
            await self._close_transport()
            raise TransportError("Could not connect to live transcription", str(e)) from e

        self._audio_queue = asyncio.Queue(maxsize=self._queue_size)
        self._set_state(SessionState.STREAMING)

        self._send_task = asyncio.create_task(self._send_loop(self._ws))
        self._recv_task = asyncio.create_task(self._receive_loop(self._ws))
        return True

    def send(self, frame: bytes) -> bool:
        """
        Queue one audio frame for sending (fire-and-forget).

        Must be called from the event loop thread. Frames are dropped,
        never raised on, outside the Streaming state or when the queue
        is full.

        Returns:
            True if the frame was queued
        """
        if self._state is not SessionState.STREAMING or self._audio_queue is None:
            self.frames_dropped += 1
            return False

        try:
            self._audio_queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.frames_dropped += 1
            logger.warning("Audio queue full, dropping audio chunk")
            return False
        return True

    async def request_stop(self) -> bool:
        """
        Send the end-of-input control message behind any queued audio.

        Returns once the message is written (or the stop timeout passes).
        No-op outside the Streaming state.

        Returns:
            True if a stop was requested
        """
        if self._state is not SessionState.STREAMING:
            logger.debug(f"stop() ignored: session is {self._state.value}")
            return False

        self._set_state(SessionState.STOP_REQUESTED)

        async def enqueue_and_flush():
            await self._audio_queue.put(stop_message())
            await self._stop_sent.wait()

        try:
            await asyncio.wait_for(enqueue_and_flush(), timeout=self.settings.stop_timeout)
        except TimeoutError:
            logger.warning("Stop message not written before timeout")
        return True

    async def wait_for_end(self, timeout: float | None = None) -> SessionState:
        """
        Wait for the terminal event, then release the connection.

        A session still open when the timeout passes becomes Failed.

        Returns:
            Final state (Completed or Failed), or the current state if
            no session was started
        """
        if self._terminal is None:
            return self._state

        timeout = timeout if timeout is not None else self.settings.stop_timeout
        try:
            await asyncio.wait_for(self._terminal.wait(), timeout=timeout)
        except TimeoutError:
            self._fail(f"no session_end within {timeout:.1f}s")

        await self.close()
        return self._state

    async def stop(self, release: Callable[[], None] | None = None) -> SessionState:
        """
        Two-phase stop.

        1. Signal end of input to the backend
        2. Run `release` (local device teardown) without waiting on the network
        3. Await at most one terminal response, bounded by stop_timeout

        `release` runs even when there is nothing to stop.
        """
        requested = await self.request_stop()

        if release:
            release()

        if not requested:
            return self._state
        return await self.wait_for_end()

    async def close(self) -> None:
        """Tear down I/O tasks and the transport. Safe to call repeatedly."""
        if self._state in (
            SessionState.CONNECTING,
            SessionState.STREAMING,
            SessionState.STOP_REQUESTED,
        ):
            self._fail("closed by client")

        current = asyncio.current_task()
        tasks = [
            t for t in (self._send_task, self._recv_task) if t and not t.done() and t is not current
        ]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        await self._close_transport()

    # ── I/O loops ──────────────────────────────────────────────────

    async def _open_websocket(self, uri: str):
        return await websockets.connect(
            uri,
            open_timeout=self.settings.connect_timeout,
            close_timeout=self.settings.stop_timeout,
        )

    async def _send_loop(self, ws):
        """Drain the outbound queue: audio frames (bytes) then the stop message (str)."""
        while True:
            item = await self._audio_queue.get()
            try:
                await ws.send(item)
            except (ConnectionClosed, OSError) as e:
                logger.error(f"Send error: {e}")
                self._fail(f"send failed: {e}")
                return

            if isinstance(item, str):
                logger.info(f"Stop sent after {self.frames_sent} frames")
                self._stop_sent.set()
                return
            self.frames_sent += 1

    async def _receive_loop(self, ws):
        """Read inbound messages until the session ends or the transport closes."""
        reason = "connection closed"
        try:
            async for message in ws:
                self._handle_message(message)
                if self._state.is_terminal:
                    break
        except ConnectionClosed as e:
            reason = f"connection closed ({e})"
        except OSError as e:
            reason = f"transport error: {e}"

        if self._state.is_terminal:
            logger.debug(f"Transport finished after terminal state: {reason}")
        else:
            self._fail(reason)

        if self._send_task and not self._send_task.done():
            self._send_task.cancel()
        await self._close_transport()

    def _handle_message(self, message: str | bytes):
        if self._state.is_terminal:
            logger.debug("Ignoring message after session end")
            return

        try:
            data = decode_message(message)
            self._learn_session_id(data)
            event = parse_event(data)
        except ProtocolError as e:
            logger.warning(f"Skipping malformed message: {e}")
            return

        if event is None:
            return

        if isinstance(event, ErrorEvent):
            logger.warning(f"Backend error: {event.detail}")

        if self.on_event:
            try:
                self.on_event(event)
            except Exception:
                logger.exception(f"on_event handler failed for {event.kind} event")

        if isinstance(event, SessionEndEvent):
            self._complete()

    def _learn_session_id(self, data: dict):
        session_id = extract_session_id(data)
        if session_id is None:
            return
        if self._session_id is None:
            self._session_id = session_id
            logger.info(f"Session id: {session_id}")
            if self.on_session_id:
                self.on_session_id(session_id)
        elif session_id != self._session_id:
            logger.warning(f"Ignoring session id change {self._session_id} → {session_id}")

    # ── State helpers ──────────────────────────────────────────────

    def _reset(self):
        self._session_id = None
        self._ws = None
        self._audio_queue = None
        self._send_task = None
        self._recv_task = None
        self._terminal = asyncio.Event()
        self._stop_sent = asyncio.Event()
        self.failure = None
        self.frames_sent = 0
        self.frames_dropped = 0

    def _set_state(self, new: SessionState):
        old = self._state
        if old is new:
            return
        self._state = new
        logger.debug(f"State: {old.value} → {new.value}")
        if self.on_state_change:
            self.on_state_change(old, new)

    def _mark_terminal(self):
        self._terminal.set()
        # Unblocks a pending request_stop whose message can no longer be sent
        self._stop_sent.set()

    def _complete(self):
        if self._state.is_terminal:
            return
        self._set_state(SessionState.COMPLETED)
        self._mark_terminal()
        logger.info(f"Session completed: {self._session_id or '(no id)'}")

    def _fail(self, reason: str):
        if self._state.is_terminal:
            return
        self.failure = reason
        logger.warning(f"Session failed: {reason}")
        self._set_state(SessionState.FAILED)
        self._mark_terminal()

    async def _close_transport(self):
        ws, self._ws = self._ws, None
        if ws is None:
            return
        try:
            await ws.close()
        except (OSError, WebSocketException) as e:
            logger.debug(f"Close error: {e}")

    def __repr__(self) -> str:
        return f"SessionClient(state={self._state.value}, session_id={self._session_id})"
