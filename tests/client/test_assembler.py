"""
Unit tests for livescribe.client.assembler

Covers the partial/final/session_end folding rules, sentiment handling
and the replay guarantees of the pure reducer.
"""

from unittest.mock import MagicMock

import pytest

from livescribe.client import INITIAL_STATE, TranscriptAssembler, apply, normalize_whitespace, replay
from livescribe.core.models import (
    ErrorEvent,
    FinalEvent,
    PartialEvent,
    SentimentSummary,
    SessionEndEvent,
    TranslationEvent,
)


def final(text, **kwargs):
    return FinalEvent(text=text, **kwargs)


def partial(text):
    return PartialEvent(text=text)


# ==============================================================================
# Reducer rules
# ==============================================================================


class TestApply:
    """Tests for the pure reducer."""

    def test_partial_replaces_interim(self):
        """Each partial replaces the previous interim text."""
        state = replay([partial("hel"), partial("hello wor")])
        assert state.interim == "hello wor"
        assert state.committed == ""

    def test_final_appends_and_clears_interim(self):
        """Finals are joined with a single space; interim is cleared."""
        state = replay([final("Hello"), partial("wor"), final("world")])
        assert state.committed == "Hello world"
        assert state.interim == ""
        assert state.segments == ("Hello", "world")

    def test_final_normalizes_whitespace(self):
        """Whitespace inside a final collapses to single spaces."""
        state = replay([final("  hello \n  there ")])
        assert state.committed == "hello there"

    def test_empty_final_clears_interim_only(self):
        """An empty final commits nothing."""
        state = replay([final("one"), partial("tw"), final("   ")])
        assert state.committed == "one"
        assert state.interim == ""
        assert state.segments == ("one",)

    def test_error_recorded_without_touching_text(self):
        """Error events are recorded; the transcript is untouched."""
        state = replay([final("kept"), ErrorEvent(detail="model overloaded")])
        assert state.error == "model overloaded"
        assert state.committed == "kept"
        assert not state.completed

    def test_display_text_includes_interim(self):
        """display_text shows the committed text then the interim tail."""
        state = replay([final("Hello"), partial("wor")])
        assert state.display_text == "Hello wor"
        assert replay([partial("only")]).display_text == "only"

    def test_export_text_puts_finals_on_lines(self):
        """export_text keeps one line per final while committed stays space-joined."""
        state = replay([final("Hello there"), final("general"), partial("ken")])
        assert state.committed == "Hello there general"
        assert state.export_text == "Hello there\ngeneral"

    def test_translation_replaced(self):
        """Translation events replace the translation and leave the transcript alone."""
        state = replay(
            [final("hola"), TranslationEvent(text="hi"), TranslationEvent(text="hello")]
        )
        assert state.translation == "hello"
        assert state.committed == "hola"


    def test_unknown_event_type_raises(self):
        """Unsupported objects are rejected."""
        with pytest.raises(TypeError):
            apply(INITIAL_STATE, object())


# ==============================================================================
# Session end
# ==============================================================================


class TestSessionEnd:
    """Tests for the authoritative final text."""

    def test_session_end_overrides_committed(self):
        """Final text replaces what was accumulated, it is not appended."""
        state = replay([final("A"), final("B"), SessionEndEvent(final_text="C")])
        assert state.committed == "C"
        assert state.completed

    def test_session_end_clears_interim(self):
        """Pending interim text is discarded at session end."""
        state = replay([final("A"), partial("dangling"), SessionEndEvent(final_text="A.")])
        assert state.interim == ""
        assert state.display_text == "A."

    def test_session_end_without_text_keeps_local(self):
        """A missing final_text keeps the locally committed text."""
        state = replay([final("A"), final("B"), SessionEndEvent()])
        assert state.committed == "A B"
        assert state.export_text == "A\nB"
        assert state.completed

    def test_session_end_empty_text_is_authoritative(self):
        """An empty final_text still overrides local text."""
        state = replay([final("A"), SessionEndEvent(final_text="")])
        assert state.committed == ""

    def test_session_end_sets_summary_and_sentiment(self):
        """Summary and sentiment from session_end are stored."""
        sentiment = SentimentSummary(label="positive", score=0.9)
        state = replay([SessionEndEvent(final_text="x", summary="short", sentiment=sentiment)])
        assert state.summary == "short"
        assert state.sentiment == sentiment

    def test_events_after_session_end_ignored(self):
        """Completed state is final."""
        ended = replay([final("A"), SessionEndEvent(final_text="done")])
        assert apply(ended, final("late")) is ended
        assert apply(ended, partial("late")) is ended


# ==============================================================================
# Sentiment
# ==============================================================================


class TestSentiment:
    """Tests for sentiment replacement."""

    def test_sentiment_replaced_wholesale(self):
        """The newest sentiment replaces the previous one entirely."""
        first = SentimentSummary.from_wire({"label": "negative", "score": 0.2})
        second = SentimentSummary.from_wire("Positive")
        state = replay([final("a", sentiment=first), final("b", sentiment=second)])
        assert state.sentiment == second
        assert state.sentiment.score == 0.0

    def test_final_without_sentiment_keeps_previous(self):
        """A final without sentiment leaves the last one in place."""
        first = SentimentSummary(label="neutral", score=0.5)
        state = replay([final("a", sentiment=first), final("b")])
        assert state.sentiment == first


# ==============================================================================
# Replay guarantees
# ==============================================================================


class TestReplay:
    """Tests for determinism of the reducer."""

    EVENTS = [
        partial("the"),
        final("the quick"),
        partial("brown"),
        final("brown fox"),
        ErrorEvent(detail="blip"),
        partial("jumps"),
    ]

    def test_replay_twice_is_identical(self):
        """The same ordered events always produce the same state."""
        assert replay(self.EVENTS) == replay(self.EVENTS)

    def test_trailing_partial_never_committed(self):
        """A trailing partial does not change committed text."""
        without = replay(self.EVENTS[:-1])
        with_partial = replay(self.EVENTS)
        assert with_partial.committed == without.committed == "the quick brown fox"
        assert "jumps" not in with_partial.committed

    def test_replay_is_incremental(self):
        """Replaying in two halves equals replaying all at once."""
        mid = replay(self.EVENTS[:3])
        assert replay(self.EVENTS[3:], mid) == replay(self.EVENTS)


# ==============================================================================
# Stateful wrapper
# ==============================================================================


class TestTranscriptAssembler:
    """Tests for TranscriptAssembler."""

    def test_feed_notifies_on_change(self):
        """on_change receives every new state."""
        assembler = TranscriptAssembler()
        assembler.on_change = MagicMock()

        assembler.feed(final("hello"))

        assembler.on_change.assert_called_once_with(assembler.state)
        assert assembler.text == "hello"

    def test_feed_after_completion_does_not_notify(self):
        """Ignored events produce no change notification."""
        assembler = TranscriptAssembler()
        assembler.feed(SessionEndEvent(final_text="done"))
        assembler.on_change = MagicMock()

        assembler.feed(final("late"))

        assembler.on_change.assert_not_called()
        assert assembler.completed

    def test_reset(self):
        """reset starts over from the initial state."""
        assembler = TranscriptAssembler()
        assembler.feed(final("hello"))
        assembler.reset()
        assert assembler.state == INITIAL_STATE


def test_normalize_whitespace():
    """Runs of whitespace collapse and ends are trimmed."""
    assert normalize_whitespace("  a\t\tb \n c ") == "a b c"
