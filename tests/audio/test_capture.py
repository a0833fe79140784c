"""
Unit tests for livescribe.audio.capture and livescribe.audio.recorder

PyAudio is replaced by a mock module so no audio hardware is needed.
"""

import io
import wave
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from livescribe.audio import AudioRecorder, MicrophoneCapture
from livescribe.core.errors import DeviceError

# ==============================================================================
# Mock Dependencies
# ==============================================================================


def make_pyaudio(rate=48000, open_error=None):
    """Build a mock pyaudio module with one default input device."""
    mock_pyaudio = MagicMock()
    mock_pyaudio.paFloat32 = 1
    mock_pyaudio.paContinue = 0
    mock_pyaudio.paComplete = 1

    instance = MagicMock()
    instance.get_default_input_device_info.return_value = {
        "name": "Test Mic",
        "defaultSampleRate": float(rate),
    }
    if open_error:
        instance.open.side_effect = open_error
    mock_pyaudio.PyAudio.return_value = instance
    return mock_pyaudio


# ==============================================================================
# Microphone capture
# ==============================================================================


class TestMicrophoneCapture:
    """Tests for MicrophoneCapture."""

    def test_start_opens_float_stream_at_device_rate(self):
        """The stream is opened at the device's native rate."""
        mock_pyaudio = make_pyaudio(rate=48000)
        capture = MicrophoneCapture(MagicMock())

        with patch.dict("sys.modules", {"pyaudio": mock_pyaudio}):
            capture.start()

        kwargs = mock_pyaudio.PyAudio.return_value.open.call_args.kwargs
        assert kwargs["rate"] == 48000
        assert kwargs["format"] == mock_pyaudio.paFloat32
        assert kwargs["frames_per_buffer"] == 4800
        assert capture.running
        assert capture.source_name == "Test Mic"

    def test_open_failure_raises_device_error(self):
        """A driver error becomes DeviceError and the device is released."""
        mock_pyaudio = make_pyaudio(open_error=OSError("Device unavailable"))
        capture = MicrophoneCapture(MagicMock())

        with patch.dict("sys.modules", {"pyaudio": mock_pyaudio}):
            with pytest.raises(DeviceError):
                capture.start()

        assert not capture.running
        mock_pyaudio.PyAudio.return_value.terminate.assert_called_once()

    def test_missing_pyaudio_raises_device_error(self):
        """Without PyAudio installed, start fails with an install hint."""
        capture = MicrophoneCapture(MagicMock())

        with patch.dict("sys.modules", {"pyaudio": None}):
            with pytest.raises(DeviceError) as exc_info:
                capture.start()

        assert "capture" in str(exc_info.value)

    def test_stop_is_idempotent(self):
        mock_pyaudio = make_pyaudio()
        capture = MicrophoneCapture(MagicMock())

        with patch.dict("sys.modules", {"pyaudio": mock_pyaudio}):
            capture.start()
            capture.stop()
            capture.stop()

        assert not capture.running
        assert capture.stream is None

    def test_process_resamples_to_target_rate(self):
        """A 100ms buffer at 48kHz becomes a 100ms frame at 16kHz."""
        capture = MicrophoneCapture(MagicMock())
        capture.capture_rate = 48000

        frame = capture.process(np.zeros(4800, dtype=np.float32).tobytes())

        assert len(frame) == 1600 * 2

    def test_process_empty_buffer_is_silence(self):
        capture = MicrophoneCapture(MagicMock())
        assert capture.process(None) == bytes(3200)

    def test_audio_callback_forwards_frames(self):
        """The driver callback passes encoded frames on and keeps running."""
        mock_pyaudio = make_pyaudio(rate=16000)
        callback = MagicMock()
        capture = MicrophoneCapture(callback)

        with patch.dict("sys.modules", {"pyaudio": mock_pyaudio}):
            capture.start()
            buffer = np.full(1600, 0.5, dtype=np.float32).tobytes()
            result = capture._audio_callback(buffer, 1600, {}, 0)

        assert result == (None, mock_pyaudio.paContinue)
        frame = callback.call_args.args[0]
        assert np.frombuffer(frame, dtype="<i2")[0] == 16384


# ==============================================================================
# Recorder
# ==============================================================================


class TestAudioRecorder:
    """Tests for AudioRecorder."""

    def test_records_frames_as_wav(self):
        recorder = AudioRecorder(sample_rate=16000)
        recorder.start()
        recorder.add_chunk(bytes(3200))
        recorder.add_chunk(bytes(3200))

        data = recorder.stop()

        with wave.open(io.BytesIO(data), "rb") as wav:
            assert wav.getnchannels() == 1
            assert wav.getsampwidth() == 2
            assert wav.getframerate() == 16000
            assert wav.getnframes() == 3200
        assert recorder.duration == pytest.approx(0.2)

    def test_chunks_ignored_when_not_recording(self):
        recorder = AudioRecorder()
        recorder.add_chunk(bytes(100))
        assert recorder.duration == 0

    def test_stop_without_audio_returns_none(self):
        recorder = AudioRecorder()
        recorder.start()
        assert recorder.stop() is None
        assert not recorder.is_recording
