"""Audio capture and PCM16 encoding."""

from .capture import AudioCapture, MicrophoneCapture, list_input_devices
from .encoder import AudioEncoder, decode_pcm16, encode_pcm16
from .recorder import AudioRecorder
from .utils import (
    CHUNK_DURATION_MS,
    TARGET_SAMPLE_RATE,
    calculate_chunk_size,
    resample,
    to_mono,
)

__all__ = [
    "CHUNK_DURATION_MS",
    "TARGET_SAMPLE_RATE",
    "AudioCapture",
    "AudioEncoder",
    "AudioRecorder",
    "MicrophoneCapture",
    "calculate_chunk_size",
    "decode_pcm16",
    "encode_pcm16",
    "list_input_devices",
    "resample",
    "to_mono",
]
