"""Core models and errors shared by all livescribe modules."""

from livescribe.core.errors import (
    DeviceError,
    ExportError,
    LiveScribeError,
    ProtocolError,
    TransportError,
    UploadError,
)
from livescribe.core.models import (
    ErrorEvent,
    FileTranscription,
    FinalEvent,
    PartialEvent,
    SentimentDistribution,
    SentimentLabel,
    SentimentSummary,
    SessionEndEvent,
    SessionState,
    TranscriptEvent,
    TranslationEvent,
)

__all__ = [
    "DeviceError",
    "ErrorEvent",
    "ExportError",
    "FileTranscription",
    "FinalEvent",
    "LiveScribeError",
    "PartialEvent",
    "ProtocolError",
    "SentimentDistribution",
    "SentimentLabel",
    "SentimentSummary",
    "SessionEndEvent",
    "SessionState",
    "TranscriptEvent",
    "TranslationEvent",
    "TransportError",
    "UploadError",
]
