"""Shared test fixtures for the Shelly RPC client tests."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from shelly_rpc.client import RpcClient
from shelly_rpc.testing import MockTransport
from shelly_rpc.transport.websocket import WebSocketTransport


class FakeWebSocket:
    """Stand-in for aiohttp.ClientWebSocketResponse.

    Frames written by the transport are kept in ``sent``; frames queued with
    ``feed`` are yielded to the transport's reader loop.
    """

    def __init__(self) -> None:
        self.closed = False
        self.sent: list[dict] = []
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send_str(self, data: str) -> None:
        if self.closed:
            raise aiohttp.ClientConnectionError("Cannot write to closing transport")
        self.sent.append(json.loads(data))

    def feed(self, frame: dict | str) -> None:
        data = frame if isinstance(frame, str) else json.dumps(frame)
        self._incoming.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=data))

    def drop(self) -> None:
        """Simulate the device closing the connection."""
        self.closed = True
        self._incoming.put_nowait(None)

    async def close(self) -> None:
        if not self.closed:
            self.drop()

    def exception(self) -> None:
        return None

    async def wait_sent(self, count: int) -> None:
        """Let pending tasks run until count frames have been written."""
        for _ in range(100):
            if len(self.sent) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"Expected {count} frames, got {len(self.sent)}")

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> SimpleNamespace:
        msg = await self._incoming.get()
        if msg is None:
            raise StopAsyncIteration
        return msg


@pytest.fixture
def mock_transport():
    """Create an in-process transport with no handlers."""
    return MockTransport()


@pytest.fixture
def client(mock_transport):
    """Create an RPC client on the mock transport."""
    return RpcClient(mock_transport, timeout=1)


@pytest.fixture
def fake_ws():
    """Create a fake WebSocket connection."""
    return FakeWebSocket()


@pytest.fixture
def ws_transport(fake_ws):
    """Create a WebSocket transport already attached to a fake connection."""
    transport = WebSocketTransport(
        "ws://192.168.1.100/rpc",
        session=MagicMock(),
        timeout=1,
        reconnect=False,
    )
    transport._ws = fake_ws
    return transport


@pytest.fixture
def ws_session(fake_ws):
    """Create a mock aiohttp session whose ws_connect returns the fake connection."""
    session = MagicMock()
    session.ws_connect = AsyncMock(return_value=fake_ws)
    return session


@pytest.fixture
def replacement_ws():
    """Create a second fake connection, handed out on reconnect."""
    return FakeWebSocket()
