"""
Shared Models for Live Transcription

Defines the data structures exchanged between the protocol client,
the transcript assembler and the session store.

Protocol (backend -> client, JSON, each optionally carrying session_id):
- {"type": "partial", "text": "..."}
- {"type": "final", "text": "...", "sentiment": {...}}
- {"type": "session_end", "final_text": "...", "summary": "...", "overall_sentiment": {...}}
- {"type": "error", "detail": "..."}

Events are immutable and consumed exactly once by the assembler.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionState(str, Enum):
    """Lifecycle states of a live session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    STOP_REQUESTED = "stop_requested"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.FAILED)

    @property
    def is_active(self) -> bool:
        """Connection is open or opening (connect() is a no-op)."""
        return self in (
            SessionState.CONNECTING,
            SessionState.STREAMING,
            SessionState.STOP_REQUESTED,
            SessionState.FINALIZING,
        )


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class SentimentDistribution(BaseModel):
    """Percentage split across sentiment labels."""

    model_config = ConfigDict(frozen=True)

    positive: float = 0.0
    neutral: float = 0.0
    negative: float = 0.0


class SentimentSummary(BaseModel):
    """Sentiment annotation, always replaced wholesale (never merged)."""

    model_config = ConfigDict(frozen=True)

    label: SentimentLabel
    score: float = 0.0
    distribution: SentimentDistribution = Field(default_factory=SentimentDistribution)

    @field_validator("label", mode="before")
    @classmethod
    def normalize_label(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @classmethod
    def from_wire(cls, value: Any) -> "SentimentSummary | None":
        """
        Build a summary from a wire value.

        Accepts a full object, an object using "sentiment" for the label,
        or a bare label string. Returns None when the value is absent.
        """
        if value is None:
            return None
        if isinstance(value, str):
            return cls(label=value)
        if isinstance(value, dict):
            data = dict(value)
            if "label" not in data and "sentiment" in data:
                data["label"] = data.pop("sentiment")
            return cls.model_validate(data)
        raise ValueError(f"Unsupported sentiment value: {type(value).__name__}")


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str | None = None


class PartialEvent(_Event):
    """Interim text for in-progress speech; superseded by the next event."""

    kind: Literal["partial"] = "partial"
    text: str


class FinalEvent(_Event):
    """Settled segment that will not be revised during the session."""

    kind: Literal["final"] = "final"
    text: str
    sentiment: SentimentSummary | None = None


class SessionEndEvent(_Event):
    """Terminal event; final_text is authoritative over local text."""

    kind: Literal["session_end"] = "session_end"
    final_text: str | None = None
    summary: str | None = None
    sentiment: SentimentSummary | None = None


class ErrorEvent(_Event):
    """Error reported by the backend inside the stream."""

    kind: Literal["error"] = "error"
    detail: str


class TranslationEvent(_Event):
    """Translated rendering of the transcript so far; replaces the previous one."""

    kind: Literal["translation"] = "translation"
    text: str


TranscriptEvent = Annotated[
    Union[PartialEvent, FinalEvent, SessionEndEvent, ErrorEvent, TranslationEvent],

    Field(discriminator="kind"),
]


class FileTranscription(BaseModel):
    """Response from the file transcription endpoint."""

    model_config = ConfigDict(frozen=True)

    text: str
    file_id: str | None = None
    summary: str | None = None
    sentiment: SentimentSummary | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "FileTranscription":
        """
        Parse {transcription: str | {text}, file_id?, overall_sentiment?, summary?}.
        """
        raw = data.get("transcription", "")
        if isinstance(raw, dict):
            raw = raw.get("text", "")
        file_id = data.get("file_id")
        return cls(
            text=raw or "",
            file_id=str(file_id) if file_id is not None else None,
            summary=data.get("summary"),
            sentiment=SentimentSummary.from_wire(data.get("overall_sentiment")),
        )


__all__ = [
    "ErrorEvent",
    "FileTranscription",
    "FinalEvent",
    "PartialEvent",
    "SentimentDistribution",
    "SentimentLabel",
    "SentimentSummary",
    "SessionEndEvent",
    "SessionState",
    "TranscriptEvent",
    "TranslationEvent",
]
