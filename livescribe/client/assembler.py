"""
Transcript Assembler

Folds the inbound event stream of one session into a single transcript.
Decoupled from transport and UI - handles all transcript state.

Rules:
  partial      → interim text replaced (never appended, never committed)
  final        → text appended to the committed transcript, interim cleared
  session_end  → committed transcript replaced by the backend's final text
  error        → recorded, transcript untouched
  translation  → translated text replaced, transcript untouched

Sentiment and summary are replaced wholesale whenever an event carries
them. Once the session has ended, later events are ignored.

The committed transcript is space-joined for display. Each final is also
kept as a segment, and `export_text` puts one segment per line for the
line-oriented exports (srt cues, docx paragraphs, pdf lines).

The reducer `apply` is pure; TranscriptAssembler is a thin stateful
wrapper with a change callback for UIs.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from livescribe.core.models import (
    ErrorEvent,
    FinalEvent,
    PartialEvent,
    SentimentSummary,
    SessionEndEvent,
    TranscriptEvent,
    TranslationEvent,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim the ends."""
    return _WHITESPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class TranscriptState:
    """Immutable snapshot of an assembled transcript."""

    committed: str = ""
    interim: str = ""
    segments: tuple[str, ...] = ()
    summary: str | None = None
    sentiment: SentimentSummary | None = None
    translation: str | None = None
    completed: bool = False
    error: str | None = None

    @property
    def display_text(self) -> str:
        """Committed text followed by the in-progress interim tail."""
        if not self.interim:
            return self.committed
        if not self.committed:
            return self.interim
        return f"{self.committed.rstrip()} {self.interim}"

    @property
    def export_text(self) -> str:
        """One settled segment per line."""
        if not self.segments:
            return self.committed
        return "\n".join(self.segments)

    @property
    def is_empty(self) -> bool:
        return not self.committed and not self.interim


INITIAL_STATE = TranscriptState()


def apply(state: TranscriptState, event: TranscriptEvent) -> TranscriptState:
    """
    Reduce one event into the transcript state.

    Args:
        state: Current snapshot
        event: Next inbound event, in arrival order

    Returns:
        New snapshot (the input is never modified)
    """
    if state.completed:
        return state

    if isinstance(event, PartialEvent):
        return replace(state, interim=event.text)

    if isinstance(event, FinalEvent):
        changes = {"interim": ""}
        text = normalize_whitespace(event.text)
        if text:
            changes["committed"] = normalize_whitespace(f"{state.committed} {text}")
            changes["segments"] = state.segments + (text,)
        if event.sentiment is not None:
            changes["sentiment"] = event.sentiment
        return replace(state, **changes)

    if isinstance(event, SessionEndEvent):
        changes = {"interim": "", "completed": True}
        # Absent final_text keeps what was accumulated locally
        if event.final_text is not None:
            changes["committed"] = event.final_text
            changes["segments"] = tuple(
                line.strip() for line in event.final_text.splitlines() if line.strip()
            )
        if event.summary is not None:
            changes["summary"] = event.summary
        if event.sentiment is not None:
            changes["sentiment"] = event.sentiment
        return replace(state, **changes)

    if isinstance(event, ErrorEvent):
        return replace(state, error=event.detail)

    if isinstance(event, TranslationEvent):
        return replace(state, translation=event.text)

    raise TypeError(f"Unsupported event: {type(event).__name__}")


def replay(events: Iterable[TranscriptEvent], state: TranscriptState = INITIAL_STATE) -> TranscriptState:
    """Fold an ordered event sequence from the given (default: initial) state."""
    for event in events:
        state = apply(state, event)
    return state


class TranscriptAssembler:
    """
    Stateful wrapper around the reducer.

    Simple API:
        assembler = TranscriptAssembler()
        assembler.feed(PartialEvent(text="hel"))
        assembler.feed(FinalEvent(text="hello"))
        print(assembler.text)  # "hello"

    Callbacks:
        assembler.on_change = lambda state: update_ui(state.display_text)
    """

    def __init__(self, state: TranscriptState = INITIAL_STATE):
        self._state = state
        self.on_change: Callable[[TranscriptState], None] | None = None

    @property
    def state(self) -> TranscriptState:
        return self._state

    @property
    def text(self) -> str:
        """Committed transcript."""
        return self._state.committed

    @property
    def display_text(self) -> str:
        return self._state.display_text

    @property
    def completed(self) -> bool:
        return self._state.completed

    def feed(self, event: TranscriptEvent) -> TranscriptState:
        """Apply one event and notify on change."""
        previous = self._state
        self._state = apply(previous, event)

        if self._state is previous:
            logger.debug(f"Ignored {event.kind} event after session end")
            return self._state

        logger.debug(f"[{event.kind.upper()}] committed={len(self._state.committed)} chars")

        if self.on_change:
            self.on_change(self._state)

        return self._state

    def reset(self) -> None:
        """Start over for a new session."""
        self._state = INITIAL_STATE

    def __repr__(self) -> str:
        return (
            f"TranscriptAssembler(committed={len(self._state.committed)} chars, "
            f"completed={self._state.completed})"
        )
