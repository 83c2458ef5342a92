"""Pytest configuration and fixtures for pterolink tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from pterolink.client.requests import ClientRequestManager, WebSocketAuth


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    text_data: str | None = None,
    read_data: bytes | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call
        text_data: Data to return from text() call
        read_data: Data to return from read() call

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        response.json.return_value = json_data
    if text_data is not None:
        response.text.return_value = text_data
    if read_data is not None:
        response.read.return_value = read_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


class FakeSocket:
    """Stand-in for a websockets client connection.

    Frames pushed with ``feed`` are yielded by ``async for``; ``close`` (or
    ``drop``) ends the iteration.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed_with: int | None = None
        self._frames: asyncio.Queue[str | BaseException | None] = asyncio.Queue()

    async def send(self, frame: str) -> None:
        self.sent.append(json.loads(frame))

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code
        self._frames.put_nowait(None)

    def feed(self, event: str, *args: str) -> None:
        self._frames.put_nowait(json.dumps({"event": event, "args": list(args)}))

    def feed_raw(self, frame: str) -> None:
        self._frames.put_nowait(frame)

    def drop(self) -> None:
        """End the stream as if the peer closed the connection."""
        self._frames.put_nowait(None)

    def fail(self, exc: BaseException) -> None:
        """Raise ``exc`` from the reader, e.g. an abnormal close."""
        self._frames.put_nowait(exc)

    def __aiter__(self) -> FakeSocket:
        return self

    async def __anext__(self) -> str:
        frame = await self._frames.get()
        if frame is None:
            raise StopAsyncIteration
        if isinstance(frame, BaseException):
            raise frame
        return frame


@pytest.fixture
def client_requests() -> MagicMock:
    """ClientRequestManager mock handing out fresh socket credentials."""
    requests = MagicMock(spec=ClientRequestManager)
    requests.domain = "https://panel.example.com"
    requests.request_connection_auth = AsyncMock(
        return_value=WebSocketAuth(socket_url="wss://node.example.com/ws", token="abc")
    )
    return requests


async def settle() -> None:
    """Let scheduled shard tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)
