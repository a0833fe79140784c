"""
Session Store

In-memory registry of transcription session records, most recent first,
bounded to a configurable history size. A store instance is passed into
the live session handle; there is no module-level singleton.
"""

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from livescribe.core.models import FileTranscription, SentimentSummary, SessionState
from livescribe.export import ExportArtifact, render, render_bundle

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50

SessionSource = Literal["live", "file"]


def local_session_id() -> str:
    """Id for a session the backend never identified."""
    return f"local-{uuid.uuid4().hex[:12]}"


@dataclass
class Session:
    """One transcription session (live stream or uploaded file)."""

    id: str
    language: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    state: SessionState = SessionState.STREAMING
    live_transcript: str = ""
    final_transcript: str | None = None
    segments: tuple[str, ...] = ()
    translation: str | None = None
    sentiment: SentimentSummary | None = None
    summary: str | None = None
    audio_artifact: bytes | None = None
    source: SessionSource = "live"

    @property
    def transcript(self) -> str:
        """Final transcript if the backend confirmed one, else the live text."""
        if self.final_transcript is not None:
            return self.final_transcript
        return self.live_transcript

    @property
    def export_text(self) -> str:
        """Transcript with one segment per line, for srt, docx and pdf."""
        if self.segments:
            return "\n".join(self.segments)
        return self.transcript

    @property
    def is_final(self) -> bool:
        return self.final_transcript is not None

    def export(self, fmt: str, **options) -> ExportArtifact:
        return render(self.export_text, fmt, **options)

    def bundle(self) -> bytes:
        return render_bundle(self.export_text, self.audio_artifact)


class SessionStore:
    """
    Registry of session records keyed by session id.

    Records are read-only once finalized: the first final transcript wins
    and later live updates are ignored.
    """

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {history_limit}")
        self.history_limit = history_limit
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._current_id: str | None = None

    # ── Write ──────────────────────────────────────────────────────

    def add(self, session: Session) -> Session:
        """Register a session; an id already present keeps its existing record."""
        existing = self._sessions.get(session.id)
        if existing is not None:
            logger.debug(f"Session {session.id} already registered")
            return existing

        self._sessions[session.id] = session
        self._trim()
        return session

    def add_file_result(self, result: FileTranscription, language: str) -> Session:
        """Register a finished file transcription as a completed session."""
        session = Session(
            id=result.file_id or local_session_id(),
            language=language,
            state=SessionState.COMPLETED,
            live_transcript=result.text,
            final_transcript=result.text,
            sentiment=result.sentiment,
            summary=result.summary,
            source="file",
        )
        return self.add(session)

    def update_live(
        self,
        session_id: str,
        text: str,
        sentiment: SentimentSummary | None = None,
        segments: tuple[str, ...] | None = None,
        translation: str | None = None,
    ) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        if session.is_final:
            logger.debug(f"Session {session_id} is final, live update ignored")
            return False

        session.live_transcript = text
        if segments is not None:
            session.segments = tuple(segments)
        if sentiment is not None:
            session.sentiment = sentiment
        if translation is not None:
            session.translation = translation
        return True

    def finalize(
        self,
        session_id: str,
        final_text: str,
        summary: str | None = None,
        sentiment: SentimentSummary | None = None,
        segments: tuple[str, ...] | None = None,
        translation: str | None = None,
    ) -> bool:
        """Set the final transcript. Only the first call per session takes effect."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        if session.is_final:
            logger.warning(f"Session {session_id} already finalized, ignoring")
            return False

        session.final_transcript = final_text
        # Live segments no longer describe an authoritative final text
        session.segments = tuple(segments) if segments is not None else ()
        if summary is not None:
            session.summary = summary
        if sentiment is not None:
            session.sentiment = sentiment
        if translation is not None:
            session.translation = translation
        return True

    def set_state(self, session_id: str, state: SessionState) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.state = state
        return True

    def set_audio(self, session_id: str, audio: bytes) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.audio_artifact = audio
        return True

    def set_current(self, session_id: str | None) -> None:
        if session_id is not None and session_id not in self._sessions:
            raise KeyError(session_id)
        self._current_id = session_id

    def evict(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        if self._current_id == session_id:
            self._current_id = None
        return True

    def clear(self) -> None:
        self._sessions.clear()
        self._current_id = None

    # ── Read ───────────────────────────────────────────────────────

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    @property
    def current(self) -> Session | None:
        if self._current_id is None:
            return None
        return self._sessions.get(self._current_id)

    def list(self) -> list[Session]:
        """All sessions, most recent first."""
        return list(reversed(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _trim(self) -> None:
        while len(self._sessions) > self.history_limit:
            oldest_id, _ = self._sessions.popitem(last=False)
            if self._current_id == oldest_id:
                self._current_id = None
            logger.debug(f"Evicted session {oldest_id} from history")
