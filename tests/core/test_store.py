"""
Unit tests for livescribe.store

Tests the session registry contract: bounded history, first-write-wins
finalization and export of stored transcripts.
"""

import pytest

from livescribe.core.models import FileTranscription, SentimentSummary, SessionState
from livescribe.store import Session, SessionStore, local_session_id


@pytest.fixture
def store():
    return SessionStore(history_limit=3)


class TestSessionStore:
    """Tests for SessionStore."""

    def test_add_and_get(self, store):
        session = store.add(Session(id="a", language="English"))
        assert store.get("a") is session
        assert "a" in store
        assert len(store) == 1

    def test_add_existing_id_keeps_record(self, store):
        first = store.add(Session(id="a", language="English"))
        second = store.add(Session(id="a", language="French"))
        assert second is first
        assert store.get("a").language == "English"

    def test_list_most_recent_first(self, store):
        for sid in ("a", "b", "c"):
            store.add(Session(id=sid, language="English"))
        assert [s.id for s in store.list()] == ["c", "b", "a"]

    def test_history_is_bounded(self, store):
        """The oldest session is evicted beyond the history limit."""
        for sid in ("a", "b", "c", "d"):
            store.add(Session(id=sid, language="English"))
        assert [s.id for s in store.list()] == ["d", "c", "b"]
        assert store.get("a") is None

    def test_eviction_clears_current(self, store):
        store.add(Session(id="a", language="English"))
        store.set_current("a")
        for sid in ("b", "c", "d"):
            store.add(Session(id=sid, language="English"))
        assert store.current is None

    def test_update_live(self, store):
        store.add(Session(id="a", language="English"))
        sentiment = SentimentSummary(label="positive")
        assert store.update_live("a", "hello", sentiment) is True
        assert store.get("a").live_transcript == "hello"
        assert store.get("a").sentiment == sentiment

    def test_finalize_first_write_wins(self, store):
        """Once final, the transcript cannot change."""
        store.add(Session(id="a", language="English"))
        assert store.finalize("a", "final one", summary="sum") is True
        assert store.finalize("a", "final two") is False
        assert store.update_live("a", "late live text") is False

        session = store.get("a")
        assert session.final_transcript == "final one"
        assert session.summary == "sum"
        assert session.live_transcript == ""

    def test_live_segments_export_as_lines(self, store):
        """Segments and translation ride along with live updates."""
        store.add(Session(id="a", language="English"))
        store.update_live("a", "one two", segments=("one", "two"), translation="uno dos")

        session = store.get("a")
        assert session.translation == "uno dos"
        assert session.export("txt").data == b"one\ntwo"
        assert session.export("srt").data.decode("utf-8").count("-->") == 2

    def test_finalize_without_segments_drops_live_lines(self, store):
        """An authoritative final text is not shadowed by stale live segments."""
        store.add(Session(id="a", language="English"))
        store.update_live("a", "one two", segments=("one", "two"))
        store.finalize("a", "Final text.")

        assert store.get("a").export("txt").data == b"Final text."

    def test_unknown_ids_are_ignored(self, store):
        assert store.update_live("missing", "x") is False
        assert store.finalize("missing", "x") is False
        assert store.set_state("missing", SessionState.FAILED) is False
        assert store.set_audio("missing", b"x") is False
        assert store.evict("missing") is False

    def test_set_current_requires_known_id(self, store):
        with pytest.raises(KeyError):
            store.set_current("nope")

    def test_evict(self, store):
        store.add(Session(id="a", language="English"))
        store.set_current("a")
        assert store.evict("a") is True
        assert store.current is None
        assert len(store) == 0

    def test_add_file_result(self, store):
        """File transcriptions become completed file sessions."""
        result = FileTranscription(text="file text", file_id="f1", summary="s")
        session = store.add_file_result(result, "German")

        assert session.id == "f1"
        assert session.source == "file"
        assert session.state is SessionState.COMPLETED
        assert session.transcript == "file text"

    def test_invalid_history_limit(self):
        with pytest.raises(ValueError):
            SessionStore(history_limit=0)


class TestSession:
    """Tests for the Session record."""

    def test_transcript_prefers_final(self):
        session = Session(id="a", language="English", live_transcript="live")
        assert session.transcript == "live"
        session.final_transcript = "final"
        assert session.transcript == "final"

    def test_export_uses_transcript(self):
        session = Session(id="a", language="English", live_transcript="partial only")
        assert session.export("txt").data == b"partial only"

    def test_bundle(self):
        session = Session(id="a", language="English", final_transcript="x", audio_artifact=b"wav")
        assert session.bundle().startswith(b"PK")

    def test_local_session_id(self):
        sid = local_session_id()
        assert sid.startswith("local-")
        assert sid != local_session_id()
