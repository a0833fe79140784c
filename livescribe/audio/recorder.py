"""In-memory recorder keeping a session's audio for the export bundle.

Frames arrive from the capture thread while the session reads the
finished recording from the event loop, so access is lock-guarded.
"""

import io
import logging
import threading
import wave

from .encoder import SAMPLE_WIDTH
from .utils import TARGET_SAMPLE_RATE

logger = logging.getLogger(__name__)

CHANNELS = 1


class AudioRecorder:
    """Accumulates PCM16 frames and renders them as a WAV file.

    Usage:
        recorder = AudioRecorder()
        recorder.start()

        # In audio callback:
        recorder.add_chunk(frame)

        # When done:
        wav_bytes = recorder.stop()
    """

    def __init__(self, sample_rate: int = TARGET_SAMPLE_RATE):
        self.sample_rate = sample_rate
        self._chunks: list[bytes] = []
        self._total_bytes = 0
        self._recording = False
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def duration(self) -> float:
        """Recorded duration in seconds."""
        return self._total_bytes / (self.sample_rate * SAMPLE_WIDTH * CHANNELS)

    def start(self) -> None:
        with self._lock:
            self._chunks = []
            self._total_bytes = 0
            self._recording = True

    def add_chunk(self, frame: bytes) -> None:
        """Append a frame; ignored when not recording."""
        with self._lock:
            if not self._recording:
                return
            self._chunks.append(frame)
            self._total_bytes += len(frame)

    def stop(self) -> bytes | None:
        """Stop recording and return the WAV bytes, or None if nothing was captured."""
        with self._lock:
            self._recording = False
            if not self._chunks:
                return None
            pcm = b"".join(self._chunks)

        logger.info(f"Recording finished: {self.duration:.1f}s")
        return self.to_wav(pcm, self.sample_rate)

    @staticmethod
    def to_wav(pcm: bytes, sample_rate: int = TARGET_SAMPLE_RATE) -> bytes:
        """Wrap raw PCM16 mono audio in a WAV container."""
        wav_buffer = io.BytesIO()
        with wave.open(wav_buffer, "wb") as wav:
            wav.setnchannels(CHANNELS)
            wav.setsampwidth(SAMPLE_WIDTH)
            wav.setframerate(sample_rate)
            wav.writeframes(pcm)
        return wav_buffer.getvalue()
