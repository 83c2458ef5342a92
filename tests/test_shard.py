"""Tests for the console socket shard state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from websockets.exceptions import ConnectionClosedError

from pterolink.client.ws.packets import ShardEvent, ShardStatus
from pterolink.client.ws.shard import Shard
from pterolink.errors import (
    PteroConnectionError,
    RequestError,
    ShardNotConnectedError,
    SocketUnavailableError,
    WebSocketError,
)

from .conftest import FakeSocket, settle

CONNECT = "pterolink.client.ws.shard.connect_websocket"


@pytest.fixture
def sock() -> FakeSocket:
    return FakeSocket()


async def open_shard(shard: Shard, sock: FakeSocket) -> AsyncMock:
    with patch(CONNECT, AsyncMock(return_value=sock)) as mock_connect:
        await shard.connect()
        await settle()
    return mock_connect


class TestConnect:
    """Tests for Shard.connect()."""

    @pytest.mark.asyncio
    async def test_connect_authenticates_and_emits(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        connected = MagicMock()
        shard.on("serverConnect", connected)

        mock_connect = await open_shard(shard, sock)

        mock_connect.assert_called_once_with("wss://node.example.com/ws", origin=None)
        assert sock.sent == [{"event": "auth", "args": ["abc"]}]
        assert shard.status is ShardStatus.CONNECTED
        assert shard.token == "abc"
        assert shard.ready_at > 0
        connected.assert_called_once_with("abc")

    @pytest.mark.asyncio
    async def test_origin_uses_panel_domain(self, client_requests, sock):
        shard = Shard(client_requests, "abc", origin=True)
        mock_connect = await open_shard(shard, sock)
        assert mock_connect.call_args.kwargs["origin"] == "https://panel.example.com"

    @pytest.mark.asyncio
    async def test_connect_twice_opens_one_socket(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        with patch(CONNECT, AsyncMock(return_value=sock)) as mock_connect:
            await asyncio.gather(shard.connect(), shard.connect())
            await settle()
            await shard.connect()
            await settle()

        mock_connect.assert_called_once()
        client_requests.request_connection_auth.assert_awaited_once_with("abc")

    @pytest.mark.asyncio
    async def test_credential_failure_propagates(self, client_requests):
        client_requests.request_connection_auth.side_effect = RequestError("nope")
        shard = Shard(client_requests, "abc")
        with pytest.raises(RequestError):
            await shard.connect()
        assert shard.status is ShardStatus.CLOSED

    @pytest.mark.asyncio
    async def test_socket_failure_is_reported(self, client_requests):
        shard = Shard(client_requests, "abc")
        debug, disconnected = MagicMock(), MagicMock()
        shard.on("debug", debug)
        shard.on("serverDisconnect", disconnected)

        with patch(CONNECT, AsyncMock(side_effect=PteroConnectionError("refused"))):
            await shard.connect()
            await settle()

        assert shard.status is ShardStatus.CLOSED
        disconnected.assert_called_once_with()
        assert any("refused" in c.args[0] for c in debug.call_args_list)


class TestMessages:
    """Tests for inbound frame handling."""

    @pytest.mark.asyncio
    async def test_stats_update(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        stats, raw = MagicMock(), MagicMock()
        shard.on("statsUpdate", stats)
        shard.on("rawPayload", raw)
        await open_shard(shard, sock)

        sock.feed("stats", '{"cpu_absolute":12.5}')
        await settle()

        stats.assert_called_once_with({"cpuAbsolute": 12.5})
        raw.assert_called_once_with({"event": "stats", "args": ['{"cpu_absolute":12.5}']})

    @pytest.mark.asyncio
    async def test_auth_success_measures_ping(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        auth = MagicMock()
        shard.on("authSuccess", auth)
        await open_shard(shard, sock)

        sock.feed("auth success")
        await settle()

        auth.assert_called_once_with()
        assert shard.ping >= 0
        assert shard.last_ping > 0

    @pytest.mark.asyncio
    async def test_malformed_frame_is_only_debug(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        error, raw, debug = MagicMock(), MagicMock(), MagicMock()
        shard.on("error", error)
        shard.on("rawPayload", raw)
        shard.on("debug", debug)
        await open_shard(shard, sock)

        sock.feed_raw("not json")
        sock.feed_raw('{"args": []}')
        await settle()

        error.assert_not_called()
        raw.assert_not_called()
        assert sum("malformed" in c.args[0] for c in debug.call_args_list) == 2
        assert shard.status is ShardStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_token_expiring_refreshes(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        await open_shard(shard, sock)

        sock.feed("token expiring")
        await settle()

        assert client_requests.request_connection_auth.await_count == 2
        assert sock.sent[-1] == {"event": "auth", "args": ["abc"]}
        assert len(sock.sent) == 2

    @pytest.mark.asyncio
    async def test_token_expired_disconnects(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        disconnected = MagicMock()
        shard.on("serverDisconnect", disconnected)
        await open_shard(shard, sock)
        sock.feed("auth success")
        await settle()

        sock.feed("token expired")
        await settle()

        assert shard.status is ShardStatus.CLOSED
        assert shard.ready_at == 0
        assert shard.ping == -1
        assert shard.last_ping == 0
        assert sock.closed_with == 1000
        disconnected.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_peer_close(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        disconnected = MagicMock()
        shard.on("serverDisconnect", disconnected)
        await open_shard(shard, sock)
        sock.feed("auth success")
        await settle()
        assert shard.ping >= 0

        sock.drop()
        await settle()

        assert shard.status is ShardStatus.CLOSED
        assert shard.ready_at == 0
        assert shard.ping == -1
        disconnected.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_abnormal_close(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        debug, disconnected = MagicMock(), MagicMock()
        shard.on("debug", debug)
        shard.on("serverDisconnect", disconnected)
        await open_shard(shard, sock)

        sock.fail(ConnectionClosedError(None, None))
        await settle()

        assert shard.status is ShardStatus.CLOSED
        disconnected.assert_called_once_with()
        messages = [c.args[0] for c in debug.call_args_list]
        assert any("received an error" in m for m in messages)
        assert messages[-1] == "[Shard abc] connection closed"

    @pytest.mark.asyncio
    async def test_reader_failure_closes_cleanly(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        disconnected = MagicMock()
        shard.on("serverDisconnect", disconnected)
        await open_shard(shard, sock)
        task = shard._listen_task

        sock.fail(RuntimeError("reader blew up"))
        await settle()

        assert task.done() and task.exception() is None
        assert shard.status is ShardStatus.CLOSED
        disconnected.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_deeply_nested_frame_is_skipped(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        output, disconnected = MagicMock(), MagicMock()
        shard.on("serverOutput", output)
        shard.on("serverDisconnect", disconnected)
        await open_shard(shard, sock)

        sock.feed_raw("[" * 100000)
        sock.feed("console output", "hello")
        await settle()

        output.assert_called_once_with("hello")
        assert shard.status is ShardStatus.CONNECTED
        disconnected.assert_not_called()

    @pytest.mark.asyncio
    async def test_frame_handling_error_keeps_listening(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        output = MagicMock()
        shard.on("serverOutput", output)
        await open_shard(shard, sock)

        with patch(
            "pterolink.client.ws.shard.decode_packet",
            side_effect=[
                UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
                (ShardEvent.SERVER_OUTPUT, ("hello",)),
            ],
        ):
            sock.feed("console output", "\xff")
            sock.feed("console output", "hello")
            await settle()

        output.assert_called_once_with("hello")
        assert shard.status is ShardStatus.CONNECTED
        assert not shard._listen_task.done()

    @pytest.mark.asyncio
    async def test_refresh_does_not_hold_frames(self, client_requests, sock):
        gate = asyncio.Event()
        auth = client_requests.request_connection_auth.return_value
        calls = 0

        async def gated_auth(server_id):
            nonlocal calls
            calls += 1
            if calls > 1:
                await gate.wait()
            return auth

        client_requests.request_connection_auth.side_effect = gated_auth
        shard = Shard(client_requests, "abc")
        output = MagicMock()
        shard.on("serverOutput", output)
        await open_shard(shard, sock)

        sock.feed("token expiring")
        sock.feed("console output", "hello")
        await settle()

        output.assert_called_once_with("hello")
        assert len(sock.sent) == 1

        gate.set()
        await settle()
        assert sock.sent[-1] == {"event": "auth", "args": ["abc"]}
        assert len(sock.sent) == 2

    @pytest.mark.asyncio
    async def test_refresh_failure_emits_error(self, client_requests, sock):
        auth = client_requests.request_connection_auth.return_value
        client_requests.request_connection_auth.side_effect = [auth, RequestError("panel down")]
        shard = Shard(client_requests, "abc")
        error = MagicMock()
        shard.on("error", error)
        await open_shard(shard, sock)

        sock.feed("token expiring")
        await settle()

        error.assert_called_once_with("failed to refresh token: panel down")
        assert shard.status is ShardStatus.CONNECTED
        assert not shard._tasks

    @pytest.mark.asyncio
    async def test_close_cancels_pending_refresh(self, client_requests, sock):
        gate = asyncio.Event()
        auth = client_requests.request_connection_auth.return_value
        calls = 0

        async def gated_auth(server_id):
            nonlocal calls
            calls += 1
            if calls > 1:
                await gate.wait()
            return auth

        client_requests.request_connection_auth.side_effect = gated_auth
        shard = Shard(client_requests, "abc")
        error = MagicMock()
        shard.on("error", error)
        await open_shard(shard, sock)

        sock.feed("token expiring")
        await settle()
        (pending,) = shard._tasks

        sock.drop()
        await settle()

        assert pending.cancelled()
        assert not shard._tasks
        error.assert_not_called()


class TestSending:
    """Tests for send/request/refresh/disconnect."""

    @pytest.mark.asyncio
    async def test_send_without_socket(self, client_requests):
        shard = Shard(client_requests, "abc")
        with pytest.raises(SocketUnavailableError, match="Socket for this shard is unavailable."):
            await shard.send("send logs")

    @pytest.mark.asyncio
    async def test_refresh_requires_connection(self, client_requests):
        shard = Shard(client_requests, "abc")
        with pytest.raises(ShardNotConnectedError, match="Shard is not connected."):
            await shard.refresh()

    @pytest.mark.asyncio
    async def test_request_unknown_event(self, client_requests):
        shard = Shard(client_requests, "abc")
        with pytest.raises(WebSocketError, match="Invalid sendable websocket event"):
            await shard.request("sendFiles")

    @pytest.mark.asyncio
    async def test_request_send_command_has_no_response(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        await open_shard(shard, sock)

        assert await shard.request("sendCommand", "say hi") is None
        assert sock.sent[-1] == {"event": "send command", "args": ["say hi"]}

    @pytest.mark.asyncio
    async def test_request_waits_for_response_event(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        await open_shard(shard, sock)

        pending = asyncio.ensure_future(shard.request("setState", "start"))
        await settle()
        assert sock.sent[-1] == {"event": "set state", "args": ["start"]}

        sock.feed("status", "starting")
        assert await asyncio.wait_for(pending, 1) == "starting"

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, client_requests, sock):
        shard = Shard(client_requests, "abc")
        disconnected = MagicMock()
        shard.on("serverDisconnect", disconnected)
        await open_shard(shard, sock)

        await shard.disconnect()
        await shard.disconnect()
        await settle()

        assert shard.status is ShardStatus.CLOSED
        assert sock.closed_with == 1000
        disconnected.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_disconnect_while_fetching_credentials(self, client_requests, sock):
        gate = asyncio.Event()
        auth = client_requests.request_connection_auth.return_value

        async def slow_auth(server_id):
            await gate.wait()
            return auth

        client_requests.request_connection_auth.side_effect = slow_auth
        shard = Shard(client_requests, "abc")
        disconnected = MagicMock()
        shard.on(ShardEvent.SERVER_DISCONNECT, disconnected)

        with patch(CONNECT, AsyncMock(return_value=sock)) as mock_connect:
            pending = asyncio.ensure_future(shard.connect())
            await settle()
            assert shard.status is ShardStatus.CONNECTING
            await shard.disconnect()
            gate.set()
            await pending
            await settle()

        mock_connect.assert_not_called()
        assert shard.status is ShardStatus.CLOSED
        disconnected.assert_called_once_with()
