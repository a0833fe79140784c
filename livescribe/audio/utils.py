"""Audio utility functions for resampling and channel mixing."""

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Audio settings
TARGET_SAMPLE_RATE = 16000
CHUNK_DURATION_MS = 100


def resample(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """
    Resample float audio using linear interpolation.

    Args:
        samples: Mono float samples
        from_rate: Source sample rate in Hz
        to_rate: Target sample rate in Hz

    Returns:
        Resampled float32 samples
    """
    samples = np.asarray(samples, dtype=np.float32)
    if from_rate == to_rate or samples.size == 0:
        return samples

    ratio = to_rate / from_rate
    new_length = max(1, int(len(samples) * ratio))
    indices = np.linspace(0, len(samples) - 1, new_length)
    return np.interp(indices, np.arange(len(samples)), samples).astype(np.float32)


def to_mono(samples: np.ndarray, channels: int) -> np.ndarray:
    """
    Mix interleaved multi-channel float samples down to mono.

    Args:
        samples: Interleaved float samples (L/R/L/R... for stereo)
        channels: Number of interleaved channels

    Returns:
        Mono float32 samples
    """
    samples = np.asarray(samples, dtype=np.float32)
    if channels <= 1:
        return samples
    usable = len(samples) - len(samples) % channels
    return samples[:usable].reshape(-1, channels).mean(axis=1).astype(np.float32)


def calculate_chunk_size(sample_rate: int, duration_ms: int = CHUNK_DURATION_MS) -> int:
    """Calculate chunk size in samples for given duration."""
    return int(sample_rate * duration_ms / 1000)
