"""
livescribe - live transcription session client

Streams microphone audio to a transcription backend, assembles the
returned partial/final results into one transcript and exports it as
txt, srt, docx or pdf.

Usage:
    from livescribe import LiveSession, SessionStore

    store = SessionStore()
    async with LiveSession(store=store) as live:
        await live.start("English")
        ...
        await live.stop()
        Path("out.srt").write_bytes(live.export("srt").data)
"""

__version__ = "1.0.0"

from livescribe.api import TranscriptionAPI
from livescribe.client import SessionClient, TranscriptAssembler
from livescribe.config import Settings, get_settings
from livescribe.core import (
    DeviceError,
    ExportError,
    LiveScribeError,
    ProtocolError,
    SessionState,
    TransportError,
    UploadError,
)
from livescribe.export import ExportArtifact, ExportFormat, render
from livescribe.session import LiveSession
from livescribe.store import Session, SessionStore

__all__ = [
    "DeviceError",
    "ExportArtifact",
    "ExportError",
    "ExportFormat",
    "LiveScribeError",
    "LiveSession",
    "ProtocolError",
    "Session",
    "SessionClient",
    "SessionState",
    "SessionStore",
    "Settings",
    "TranscriptAssembler",
    "TranscriptionAPI",
    "TransportError",
    "UploadError",
    "__version__",
    "get_settings",
    "render",
]
