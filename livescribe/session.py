"""
Live Session

Owns everything one live transcription needs: the microphone capture,
the frame encoder, the audio recorder, the streaming client and the
transcript assembler. Records are written to an injected SessionStore.

Threading:
    Capture callbacks run on the audio driver's thread. Frames are handed
    to the event loop with call_soon_threadsafe; all transcript and
    connection state is only touched from the loop.

Stop:
    1. The end-of-input message is queued behind pending audio
    2. Microphone and recorder are released right away
    3. The backend gets stop_timeout seconds to send session_end
"""

import asyncio
import logging
from collections.abc import Callable

from livescribe.audio import AudioCapture, AudioEncoder, AudioRecorder, MicrophoneCapture
from livescribe.client import SessionClient, TranscriptAssembler, TranscriptState
from livescribe.client.protocol import Connector
from livescribe.config import Settings, get_settings
from livescribe.core.errors import ExportError, TransportError
from livescribe.core.models import SessionState, TranscriptEvent
from livescribe.export import ExportArtifact, render, render_bundle
from livescribe.store import Session, SessionStore, local_session_id

logger = logging.getLogger(__name__)

CaptureFactory = Callable[[Callable[[bytes], None]], AudioCapture]


class LiveSession:
    """
    Handle for one live transcription at a time; reusable for new sessions.

    Usage:
        store = SessionStore()
        async with LiveSession(store=store) as live:
            await live.start("English")
            ...
            state = await live.stop()
            live.export("srt")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: SessionStore | None = None,
        connector: Connector | None = None,
        capture_factory: CaptureFactory | None = None,
        device_index: int | None = None,
    ):
        """
        Args:
            settings: Configuration (defaults to the environment)
            store: Session registry the results are written to
            connector: Transport opener passed to the SessionClient
            capture_factory: Builds the audio capture for a frame callback
                (defaults to the PyAudio microphone)
            device_index: Input device for the default microphone capture
        """
        self.settings = settings or get_settings()
        self.store = store if store is not None else SessionStore(self.settings.history_limit)
        self.device_index = device_index

        self.encoder = AudioEncoder(self.settings.frame_samples)
        self.recorder = AudioRecorder(self.settings.sample_rate)
        self.assembler = TranscriptAssembler()
        self.assembler.on_change = self._on_transcript_change
        self.client = SessionClient(
            self.settings,
            connector=connector,
            on_event=self._on_event,
            on_state_change=self._on_state_change,
            on_session_id=self._on_session_id,
        )

        self._capture_factory = capture_factory or self._microphone
        self._capture: AudioCapture | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._record_id: str | None = None
        self._released = True

        self.language = self.settings.language
        self.audio: bytes | None = None
        self.on_update: Callable[[TranscriptState], None] | None = None

    # ── Properties ─────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        state = self.client.state
        if state is SessionState.STOP_REQUESTED and self._released:
            return SessionState.FINALIZING
        return state

    @property
    def session_id(self) -> str | None:
        return self._record_id

    @property
    def record(self) -> Session | None:
        if self._record_id is None:
            return None
        return self.store.get(self._record_id)

    @property
    def transcript(self) -> str:
        """Final transcript when confirmed, else the committed live text."""
        record = self.record
        if record is not None:
            return record.transcript
        return self.assembler.text

    @property
    def export_text(self) -> str:
        """Transcript with one settled segment per line."""
        record = self.record
        if record is not None:
            return record.export_text
        return self.assembler.state.export_text

    @property
    def display_text(self) -> str:
        """Committed text plus the in-progress interim tail."""
        return self.assembler.display_text

    # ── Lifecycle ──────────────────────────────────────────────────

    async def start(self, language: str | None = None) -> bool:
        """
        Open the microphone and connect.

        Returns:
            False if a session is already running

        Raises:
            DeviceError: Microphone unavailable (nothing is connected)
            TransportError: Connection failed (microphone is released again)
        """
        if self.client.state.is_active:
            logger.warning(f"start() ignored: session is {self.client.state.value}")
            return False

        self.language = language or self.settings.language
        self._loop = asyncio.get_running_loop()
        self._record_id = None
        self.audio = None
        self.assembler.reset()

        capture = self._capture_factory(self._on_frame_threadsafe)
        capture.start()
        self._capture = capture
        self._released = False
        self.recorder.start()
        logger.info(f"Capturing from {capture.source_name}")

        try:
            await self.client.connect(self.language)
        except TransportError:
            self._release()
            raise
        return True

    async def stop(self) -> SessionState:
        """
        Two-phase stop; returns Completed or Failed.

        Local resources are released whether or not the backend answers.
        """
        state = await self.client.stop(release=self._release)
        self._attach_audio()
        return state

    async def dispose(self) -> None:
        """Abandon the session: close the connection and release the device."""
        await self.client.close()
        self._release()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.dispose()

    # ── Exports ────────────────────────────────────────────────────

    def export(self, fmt: str, **options) -> ExportArtifact:
        """Render the current transcript; partial results export too."""
        return render(self.export_text, fmt, **options)

    def bundle(self) -> bytes:
        """Zip of the transcript and the recorded audio."""
        if self.audio is None:
            raise ExportError("zip", "No audio recorded for this session")
        return render_bundle(self.export_text, self.audio)

    # ── Audio thread ───────────────────────────────────────────────

    def _microphone(self, callback: Callable[[bytes], None]) -> AudioCapture:
        return MicrophoneCapture(
            callback,
            device_index=self.device_index,
            frame_ms=self.settings.frame_ms,
            target_rate=self.settings.sample_rate,
            encoder=self.encoder,
        )

    def _on_frame_threadsafe(self, frame: bytes):
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._on_frame, frame)
        except RuntimeError:
            # Loop closed between the check and the call
            logger.debug("Event loop closed, dropping frame")

    def _on_frame(self, frame: bytes):
        if self._released:
            return
        self.recorder.add_chunk(frame)
        self.client.send(frame)

    # ── Client callbacks ───────────────────────────────────────────

    def _on_event(self, event: TranscriptEvent):
        self.assembler.feed(event)

    def _on_session_id(self, session_id: str):
        self._open_record(session_id)

    def _on_state_change(self, old: SessionState, new: SessionState):
        if new.is_terminal:
            self._release()
            if self._record_id is None and old is not SessionState.CONNECTING:
                # Backend never identified the session; keep its results anyway
                self._open_record(local_session_id())
            self._attach_audio()

        if self._record_id is not None:
            self.store.set_state(self._record_id, new)

    def _on_transcript_change(self, state: TranscriptState):
        if self._record_id is not None:
            self._sync_record(state)
        if self.on_update:
            self.on_update(state)

    # ── Helpers ────────────────────────────────────────────────────

    def _open_record(self, session_id: str):
        record = self.store.add(
            Session(id=session_id, language=self.language, state=self.client.state)
        )
        self._record_id = record.id
        self.store.set_current(record.id)
        self._sync_record(self.assembler.state)

    def _sync_record(self, state: TranscriptState):
        if state.completed:
            self.store.finalize(
                self._record_id,
                state.committed,
                state.summary,
                state.sentiment,
                segments=state.segments,
                translation=state.translation,
            )
        else:
            self.store.update_live(
                self._record_id,
                state.committed,
                state.sentiment,
                segments=state.segments,
                translation=state.translation,
            )

    def _release(self):
        """Stop the microphone and recorder. Safe to call repeatedly."""
        if self._released:
            return
        self._released = True

        capture, self._capture = self._capture, None
        if capture is not None:
            capture.stop()

        audio = self.recorder.stop()
        if audio is not None:
            self.audio = audio

        if self._record_id is not None and self.client.state is SessionState.STOP_REQUESTED:
            self.store.set_state(self._record_id, SessionState.FINALIZING)

    def _attach_audio(self):
        if self._record_id is not None and self.audio is not None:
            self.store.set_audio(self._record_id, self.audio)

    def __repr__(self) -> str:
        return f"LiveSession(state={self.state.value}, session_id={self._record_id})"
