"""Shared fixtures for livescribe tests."""

import asyncio
import json

import pytest

from livescribe.config import Settings

STOP = json.dumps({"text": "stop"})


class FakeConnection:
    """
    In-memory stand-in for a websockets client connection.

    Inbound messages are pushed with push(); None ends the stream and an
    exception instance is raised from the iterator. Outbound messages are
    recorded in `sent`.
    """

    def __init__(self, reply_to_stop: dict | None = None):
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent: list = []
        self.closed = False
        self.reply_to_stop = reply_to_stop
        self.send_error: Exception | None = None

    def push(self, message):
        if isinstance(message, dict):
            message = json.dumps(message)
        self.inbox.put_nowait(message)

    async def send(self, message):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)
        if message == STOP and self.reply_to_stop is not None:
            self.push(self.reply_to_stop)

    async def close(self):
        self.closed = True
        self.inbox.put_nowait(None)

    @property
    def frames(self) -> list[bytes]:
        return [m for m in self.sent if isinstance(m, bytes)]

    @property
    def control(self) -> list[dict]:
        return [json.loads(m) for m in self.sent if isinstance(m, str)]

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self.inbox.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeConnector:
    """Connector returning a prepared FakeConnection and recording URIs."""

    def __init__(self, connection: FakeConnection | None = None, error: Exception | None = None):
        self.connection = connection
        self.error = error
        self.uris: list[str] = []

    async def __call__(self, uri: str):
        self.uris.append(uri)
        if self.error is not None:
            raise self.error
        return self.connection


async def settle(rounds: int = 20):
    """Let background send/receive tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settings():
    """Settings with short timeouts for tests."""
    return Settings(
        api_url="http://test.local",
        ws_url="ws://test.local",
        api_token="secret",
        language="English",
        stop_timeout=0.5,
        connect_timeout=1.0,
        http_timeout=5.0,
        history_limit=5,
    )


@pytest.fixture
def fake_connection():
    """Connection that answers the stop message with a session_end."""
    return FakeConnection(reply_to_stop={"type": "session_end", "session_id": "sess-1"})


@pytest.fixture
def connector(fake_connection):
    return FakeConnector(fake_connection)


@pytest.fixture
def fake():
    """Access to the fake transport classes and the settle helper."""

    class Fakes:
        Connection = FakeConnection
        Connector = FakeConnector

    Fakes.settle = staticmethod(settle)
    return Fakes
