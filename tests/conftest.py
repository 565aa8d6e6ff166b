"""Pytest configuration and streaming fakes for the SDK tests."""

import asyncio
import json
import sys
from pathlib import Path

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hollaex_sdk.config.models import ClientConfig, ConnectionSettings  # noqa: E402

_CLOSE = object()
_DROP = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, url, send_delay=0):
        self.url = url
        self.send_delay = send_delay
        self.sent = []
        self.closed = False
        self._incoming = asyncio.Queue()

    async def send(self, data):
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(json.loads(data))

    async def close(self, code=1000, reason=""):
        if not self.closed:
            self.closed = True
            self._incoming.put_nowait(_CLOSE)

    def feed(self, message):
        """Deliver a server frame."""
        self._incoming.put_nowait(message if isinstance(message, str) else json.dumps(message))

    def drop(self):
        """Simulate an abrupt connection loss."""
        self.closed = True
        self._incoming.put_nowait(_DROP)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if item is _DROP:
            raise ConnectionClosedError(None, None)
        return item

    def frames(self, op=None):
        return [f for f in self.sent if op is None or f.get("op") == op]

    def args(self, op):
        return [arg for frame in self.frames(op) for arg in frame["args"]]


class FakeConnector:
    """Records connection attempts and hands out FakeWebSockets."""

    def __init__(self):
        self.sockets = []
        self.urls = []
        self.kwargs = []
        self.fail_next = 0
        self.send_delay = 0

    async def __call__(self, url, **kwargs):
        self.urls.append(url)
        self.kwargs.append(kwargs)
        if self.fail_next:
            self.fail_next -= 1
            raise ConnectionRefusedError("connection refused")
        ws = FakeWebSocket(url, send_delay=self.send_delay)
        self.sockets.append(ws)
        return ws

    @property
    def latest(self):
        return self.sockets[-1]


async def wait_for_condition(predicate, timeout=1.0, interval=0.005):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def wait_until():
    return wait_for_condition


@pytest.fixture
def make_config():
    def _make(**overrides):
        connection = {
            "reconnect_interval_seconds": 0.01,
            "ping_interval_seconds": 5,
            "ping_timeout_seconds": 10,
            "rate_limit_per_second": 100,
        }
        connection.update(overrides.pop("connection", {}))
        return ClientConfig(connection=ConnectionSettings(**connection), **overrides)

    return _make
