"""
Wire codec for the live transcription channel.

Inbound (backend -> client) JSON is parsed into typed TranscriptEvents.
Outbound control messages are built here so the protocol client never
hand-assembles JSON.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from livescribe.core.errors import ProtocolError
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

# Message types that carry no transcript content
IGNORED_TYPES = frozenset({"info", "ack", "ping"})

STOP_COMMAND = "stop"


def extract_session_id(data: dict[str, Any]) -> str | None:
    """Session id from either the snake_case or camelCase key."""
    value = data.get("session_id", data.get("sessionId"))
    if value is None or value == "":
        return None
    return str(value)


def _sentiment(data: dict[str, Any], *keys: str) -> SentimentSummary | None:
    """Optional sentiment annotation; a malformed one is dropped, not fatal."""
    for key in keys:
        if data.get(key) is None:
            continue
        try:
            return SentimentSummary.from_wire(data[key])
        except (ValidationError, ValueError) as e:
            logger.warning(f"Ignoring malformed {key!r} on {data.get('type')!r} message: {e}")
            return None
    return None


def decode_message(message: str | bytes) -> dict[str, Any]:
    """
    Decode one inbound frame into a JSON object.

    Raises:
        ProtocolError: The frame is not UTF-8 JSON or not an object.
    """
    if isinstance(message, (bytes, bytearray)):
        try:
            message = bytes(message).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError("not UTF-8", bytes(message)) from e

    try:
        data = json.loads(message)
    except json.JSONDecodeError as e:
        raise ProtocolError("invalid JSON", message) from e

    if not isinstance(data, dict):
        raise ProtocolError("expected a JSON object", message)
    return data


def parse_event(data: dict[str, Any]) -> TranscriptEvent | None:
    """
    Build a typed event from a decoded message.

    Returns:
        The event, or None for message types that carry no transcript
        content (info, ack, unknown types).

    Raises:
        ProtocolError: Fields have the wrong shape.
    """
    kind = data.get("type")
    session_id = extract_session_id(data)

    try:
        if kind == "partial":
            return PartialEvent(text=data.get("text") or "", session_id=session_id)

        if kind == "final":
            return FinalEvent(
                text=data.get("text") or "",
                sentiment=_sentiment(data, "sentiment"),
                session_id=session_id,
            )

        if kind == "session_end":
            return SessionEndEvent(
                final_text=data.get("final_text"),
                summary=data.get("summary"),
                sentiment=_sentiment(data, "overall_sentiment", "sentiment"),
                session_id=session_id,
            )

        if kind == "error":
            detail = data.get("detail") or data.get("message") or data.get("text")
            return ErrorEvent(detail=str(detail or "unknown error"), session_id=session_id)

        if kind == "translation":
            return TranslationEvent(text=data.get("text") or "", session_id=session_id)

    except (ValidationError, ValueError) as e:
        raise ProtocolError(f"bad '{kind}' fields", json.dumps(data)) from e

    if kind not in IGNORED_TYPES:
        logger.debug(f"Ignoring unknown message type: {kind!r}")
    return None


def parse_message(message: str | bytes) -> TranscriptEvent | None:
    """Decode and parse one inbound frame (see decode_message, parse_event)."""
    return parse_event(decode_message(message))


def stop_message() -> str:
    """End-of-input control message."""
    return json.dumps({"text": STOP_COMMAND})


def info_message(language: str) -> str:
    """Session info sent once the connection opens."""
    return json.dumps({"type": "info", "language": language})
