"""
Live Transcription Client Module

Provides the WebSocket SessionClient and the TranscriptAssembler that
folds its events into a transcript.

Protocol:
  Client sends: binary PCM16 frames, then {"text": "stop"}
  Server sends: {"type": "partial" | "final" | "session_end", ...}

Usage:
    from livescribe.client import SessionClient, TranscriptAssembler

    assembler = TranscriptAssembler()
    client = SessionClient(on_event=assembler.feed)

    await client.connect("English")
    client.send(frame)
    await client.stop()
    print(assembler.text)
"""

from .assembler import (
    INITIAL_STATE,
    TranscriptAssembler,
    TranscriptState,
    apply,
    normalize_whitespace,
    replay,
)
from .events import decode_message, info_message, parse_event, parse_message, stop_message
from .protocol import SessionClient

__all__ = [
    "INITIAL_STATE",
    "SessionClient",
    "TranscriptAssembler",
    "TranscriptState",
    "apply",
    "decode_message",
    "info_message",
    "normalize_whitespace",
    "parse_event",
    "parse_message",
    "replay",
    "stop_message",
]
