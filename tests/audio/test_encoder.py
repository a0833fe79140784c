"""
Unit tests for livescribe.audio.encoder and livescribe.audio.utils

Tests PCM16 scaling, silence fallback and the resampling helpers.
"""

import numpy as np
import pytest

from livescribe.audio import (
    AudioEncoder,
    calculate_chunk_size,
    decode_pcm16,
    encode_pcm16,
    resample,
    to_mono,
)


class TestEncodePcm16:
    """Tests for encode_pcm16."""

    def test_reference_vector(self):
        """Asymmetric scaling gives the exact little-endian bytes."""
        assert encode_pcm16([0.5, -0.5, 1.0, -1.0]) == bytes(
            [0x00, 0x40, 0x00, 0xC0, 0xFF, 0x7F, 0x00, 0x80]
        )

    def test_reference_vector_as_int16(self):
        data = encode_pcm16(np.array([0.5, -0.5, 1.0, -1.0], dtype=np.float32))
        assert np.frombuffer(data, dtype="<i2").tolist() == [16384, -16384, 32767, -32768]

    def test_out_of_range_is_clipped(self):
        """Values beyond [-1, 1] clip instead of wrapping."""
        values = np.frombuffer(encode_pcm16([2.0, -3.0]), dtype="<i2").tolist()
        assert values == [32767, -32768]

    def test_nan_becomes_zero(self):
        values = np.frombuffer(encode_pcm16([np.nan, 0.0]), dtype="<i2").tolist()
        assert values == [0, 0]

    def test_empty_input(self):
        assert encode_pcm16([]) == b""

    def test_length_is_two_bytes_per_sample(self):
        assert len(encode_pcm16(np.zeros(1600))) == 3200

    def test_decode_inverts_scaling(self):
        """Decoding recovers the extremes exactly."""
        decoded = decode_pcm16(encode_pcm16([1.0, -1.0, 0.0]))
        assert decoded.tolist() == [1.0, -1.0, 0.0]

    def test_decode_ignores_trailing_byte(self):
        assert len(decode_pcm16(b"\x00\x00\x01")) == 1


class TestAudioEncoder:
    """Tests for the never-raising frame encoder."""

    def test_encode_samples(self):
        encoder = AudioEncoder(frame_samples=4)
        assert encoder.encode([0.5, -0.5, 1.0, -1.0]) == encode_pcm16([0.5, -0.5, 1.0, -1.0])

    def test_missing_buffer_is_silence(self):
        """No buffer yields a zero frame of the configured size."""
        encoder = AudioEncoder(frame_samples=1600)
        assert encoder.encode(None) == bytes(3200)

    def test_empty_buffer_is_silence(self):
        assert AudioEncoder(frame_samples=8).encode([]) == bytes(16)

    def test_unreadable_buffer_is_silence(self):
        """Non-numeric input is logged and replaced by silence."""
        assert AudioEncoder(frame_samples=2).encode(["not", "audio"]) == bytes(4)


class TestAudioUtils:
    """Tests for resampling and channel mixing."""

    def test_resample_48k_to_16k(self):
        samples = np.linspace(-1, 1, 4800, dtype=np.float32)
        out = resample(samples, 48000, 16000)
        assert len(out) == 1600
        assert out.dtype == np.float32
        assert out[0] == pytest.approx(-1.0)
        assert out[-1] == pytest.approx(1.0)

    def test_resample_same_rate_is_identity(self):
        samples = np.array([0.1, 0.2], dtype=np.float32)
        np.testing.assert_array_equal(resample(samples, 16000, 16000), samples)

    def test_to_mono_averages_channels(self):
        stereo = np.array([1.0, 0.0, 0.5, 0.5], dtype=np.float32)
        np.testing.assert_allclose(to_mono(stereo, 2), [0.5, 0.5])

    def test_to_mono_drops_partial_frame(self):
        assert len(to_mono(np.zeros(5, dtype=np.float32), 2)) == 2

    def test_calculate_chunk_size(self):
        assert calculate_chunk_size(16000) == 1600
        assert calculate_chunk_size(44100, 100) == 4410
