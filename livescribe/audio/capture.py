"""Microphone capture producing PCM16 frames for the streaming client."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np

from livescribe.core.errors import DeviceError

from .encoder import AudioEncoder
from .utils import CHUNK_DURATION_MS, TARGET_SAMPLE_RATE, calculate_chunk_size, resample, to_mono

logger = logging.getLogger(__name__)


class AudioCapture(ABC):
    """Abstract base class for audio capture."""

    def __init__(self, callback: Callable[[bytes], None]):
        """
        Initialize audio capture.

        Args:
            callback: Called with each PCM16 frame (mono, 16kHz). Runs on the
                audio driver's thread.
        """
        self.callback = callback
        self.running = False

    @abstractmethod
    def start(self) -> None:
        """Start capturing audio. Raises DeviceError on failure."""

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing and release the device. Safe to call twice."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return human-readable source name."""


class MicrophoneCapture(AudioCapture):
    """Capture float audio from a microphone using PyAudio and encode it."""

    def __init__(
        self,
        callback: Callable[[bytes], None],
        device_index: int | None = None,
        frame_ms: int = CHUNK_DURATION_MS,
        target_rate: int = TARGET_SAMPLE_RATE,
        encoder: AudioEncoder | None = None,
    ):
        """
        Args:
            callback: Receives encoded PCM16 frames
            device_index: Specific input device index, or None for default
            frame_ms: Frame duration in milliseconds
            target_rate: Sample rate sent to the backend
            encoder: Frame encoder (defaults to one sized for frame_ms)
        """
        super().__init__(callback)
        self.device_index = device_index
        self.frame_ms = frame_ms
        self.target_rate = target_rate
        self.encoder = encoder or AudioEncoder(calculate_chunk_size(target_rate, frame_ms))
        self.pyaudio_instance = None
        self.stream = None
        self.capture_rate = target_rate
        self.capture_channels = 1
        self._device_name = "Microphone"

    @property
    def source_name(self) -> str:
        return self._device_name

    def start(self) -> None:
        try:
            import pyaudio
        except ImportError:
            raise DeviceError(
                "PyAudio not installed",
                "Install with: pip install 'livescribe[capture]'",
            ) from None

        try:
            self.pyaudio_instance = pyaudio.PyAudio()

            if self.device_index is not None:
                device_info = self.pyaudio_instance.get_device_info_by_index(self.device_index)
            else:
                device_info = self.pyaudio_instance.get_default_input_device_info()

            self._device_name = device_info["name"]
            self.capture_rate = int(device_info["defaultSampleRate"])
            self.capture_channels = 1

            chunk_size = calculate_chunk_size(self.capture_rate, self.frame_ms)

            logger.info(f"Microphone: {self._device_name}")
            logger.info(f"Rate: {self.capture_rate}Hz → {self.target_rate}Hz")

            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=self.capture_channels,
                rate=self.capture_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=chunk_size,
                stream_callback=self._audio_callback,
            )

            self.stream.start_stream()
            self.running = True
            logger.info("Microphone capture started")

        except (OSError, IOError) as e:
            self.stop()
            raise DeviceError("Microphone unavailable", str(e)) from e

    def process(self, in_data: bytes | None) -> bytes:
        """Convert one raw float32 driver buffer into a PCM16 frame."""
        if not in_data:
            return self.encoder.encode(None)
        samples = np.frombuffer(in_data, dtype=np.float32)
        samples = to_mono(samples, self.capture_channels)
        samples = resample(samples, self.capture_rate, self.target_rate)
        return self.encoder.encode(samples)

    def _audio_callback(self, in_data, frame_count, time_info, status):
        import pyaudio

        if not self.running:
            return (None, pyaudio.paComplete)

        if status:
            logger.debug(f"Mic status: {status}")

        try:
            self.callback(self.process(in_data))
        except Exception as e:
            logger.error(f"Mic callback error: {e}")

        return (None, pyaudio.paContinue)

    def stop(self) -> None:
        was_running = self.running
        self.running = False

        if self.stream:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.debug(f"Stream close error: {e}")
            self.stream = None

        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

        if was_running:
            logger.info("Microphone capture stopped")


def list_input_devices() -> list[tuple[int, str, int]]:
    """
    List available microphone input devices.

    Returns:
        (index, name, default_rate) tuples

    Raises:
        DeviceError: If PyAudio is missing or the host API fails
    """
    try:
        import pyaudio
    except ImportError:
        raise DeviceError("PyAudio not installed") from None

    p = pyaudio.PyAudio()
    try:
        devices = []
        for i in range(p.get_device_count()):
            info = p.get_device_info_by_index(i)
            if info["maxInputChannels"] > 0:
                devices.append((i, info["name"], int(info["defaultSampleRate"])))
        return devices
    except OSError as e:
        raise DeviceError("Could not enumerate devices", str(e)) from e
    finally:
        p.terminate()
