"""
PCM16 Audio Encoder

Converts float audio in [-1, 1] into signed 16-bit little-endian PCM,
the wire format expected by the streaming backend (mono, 16 kHz).

Scaling is asymmetric: negative samples scale by 32768 and non-negative
samples by 32767, so -1.0 maps to -32768 and 1.0 to 32767 without
overflowing int16.
"""

import logging
from collections.abc import Sequence

import numpy as np

logger = logging.getLogger(__name__)

NEGATIVE_SCALE = 32768
POSITIVE_SCALE = 32767
SAMPLE_WIDTH = 2  # bytes per sample

PCM16_DTYPE = np.dtype("<i2")


def encode_pcm16(samples: Sequence[float] | np.ndarray) -> bytes:
    """
    Encode float samples as PCM16 bytes.

    Args:
        samples: Float samples, nominally in [-1, 1]

    Returns:
        2 * len(samples) bytes of little-endian int16

    Example:
        >>> encode_pcm16([0.5, -0.5, 1.0, -1.0]).hex()
        '004000c0ff7f0080'
    """
    audio = np.asarray(samples, dtype=np.float64).reshape(-1)
    if audio.size == 0:
        return b""

    audio = np.nan_to_num(audio, nan=0.0, posinf=1.0, neginf=-1.0)
    audio = np.clip(audio, -1.0, 1.0)
    scaled = np.where(audio < 0, audio * NEGATIVE_SCALE, audio * POSITIVE_SCALE)
    return np.rint(scaled).astype(PCM16_DTYPE).tobytes()


def decode_pcm16(data: bytes) -> np.ndarray:
    """
    Decode PCM16 bytes back to float32 samples using the inverse scaling.

    A trailing odd byte is ignored.
    """
    usable = len(data) - len(data) % SAMPLE_WIDTH
    ints = np.frombuffer(data[:usable], dtype=PCM16_DTYPE).astype(np.float32)
    return np.where(ints < 0, ints / NEGATIVE_SCALE, ints / POSITIVE_SCALE).astype(np.float32)


class AudioEncoder:
    """
    Stateless frame encoder for the capture pipeline.

    Never raises: a missing or unreadable buffer (device silent or
    unavailable) yields a frame of zeros of the configured size.

    Usage:
        encoder = AudioEncoder(frame_samples=1600)
        frame = encoder.encode(float_samples)
    """

    def __init__(self, frame_samples: int = 1600):
        """
        Args:
            frame_samples: Samples in a silence frame (100 ms at 16 kHz)
        """
        self.frame_samples = max(0, int(frame_samples))

    def silence(self) -> bytes:
        """A frame of zero samples."""
        return bytes(self.frame_samples * SAMPLE_WIDTH)

    def encode(self, samples: Sequence[float] | np.ndarray | None = None) -> bytes:
        if samples is None:
            return self.silence()
        try:
            frame = encode_pcm16(samples)
        except (TypeError, ValueError) as e:
            logger.warning(f"Unreadable audio buffer, emitting silence: {e}")
            return self.silence()
        return frame or self.silence()
