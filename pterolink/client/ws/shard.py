"""Console socket connection for a single server.

State machine::

    CLOSED --connect()--> CONNECTING --open--> CONNECTED
       ^                      |                    |
       +------ close / error / token expired / disconnect()

A shard never reconnects by itself. Callers watching ``serverDisconnect``
decide whether to call ``connect()`` again.

Usage:
    shard = client.add_socket_server("411d2eb9")[0]
    shard.on("serverOutput", print)
    shard.on("authSuccess", lambda: asyncio.create_task(shard.send("send logs")))
    await shard.connect()
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from websockets.exceptions import ConnectionClosed

from ...envelopes import EventPayload
from ...errors import (
    PteroClientError,
    ShardNotConnectedError,
    SocketUnavailableError,
    WebSocketError,
)
from ...events import EventChannel, Handler
from ...transport.ws import NORMAL_CLOSURE, connect_websocket
from .packets import ShardEvent, ShardStatus, decode_packet

if TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection

    from ..requests import ClientRequestManager, WebSocketAuth

_LOGGER = logging.getLogger(__name__)

# request name -> (wire event, response event or None)
_REQUESTS: dict[str, tuple[str, ShardEvent | None]] = {
    "auth": ("auth", ShardEvent.AUTH_SUCCESS),
    "sendCommand": ("send command", None),
    "sendLogs": ("send logs", ShardEvent.SERVER_OUTPUT),
    "sendStats": ("send stats", ShardEvent.STATS_UPDATE),
    "setState": ("set state", ShardEvent.STATUS_UPDATE),
}


def _now_ms() -> int:
    return int(time.time() * 1000)


class Shard:
    """One console socket bound to one server identifier."""

    def __init__(
        self,
        requests: ClientRequestManager,
        server_id: str,
        *,
        origin: bool = False,
    ) -> None:
        self.id = server_id
        self.origin = origin
        self.events: EventChannel[ShardEvent] = EventChannel(
            ShardEvent, name=f"Shard {server_id}"
        )

        self._requests = requests
        self._ws: ClientConnection | None = None
        self._listen_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._status = ShardStatus.CLOSED

        self.token: str | None = None
        self.ready_at = 0
        self.ping = -1
        self.last_ping = 0

    def __repr__(self) -> str:
        return f"<Shard id={self.id!r} status={self._status.name}>"

    @property
    def status(self) -> ShardStatus:
        return self._status

    # -------------------------------------------------------------------------
    # Public API: Listeners
    # -------------------------------------------------------------------------

    def on(self, event: ShardEvent | str, handler: Handler | None = None) -> Any:
        return self.events.on(event, handler)

    def once(self, event: ShardEvent | str, handler: Handler) -> Handler:
        return self.events.once(event, handler)

    def off(self, event: ShardEvent | str, handler: Handler) -> bool:
        return self.events.off(event, handler)

    def wait_for(self, event: ShardEvent | str) -> asyncio.Future[Any]:
        return self.events.wait_for(event)

    def _emit(self, event: ShardEvent, *args: Any) -> None:
        self.events.emit(event, *args)

    def _debug(self, message: str) -> None:
        _LOGGER.debug("[Shard %s] %s", self.id, message)
        self._emit(ShardEvent.DEBUG, f"[Shard {self.id}] {message}")

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Fetch credentials and start opening the socket.

        Returns immediately when already connecting or connected. Credential
        failures propagate; socket failures are reported through ``debug``
        and ``serverDisconnect`` events.
        """
        if self._status is not ShardStatus.CLOSED:
            return

        self._status = ShardStatus.CONNECTING
        try:
            auth = await self._requests.request_connection_auth(self.id)
        except Exception:
            self._status = ShardStatus.CLOSED
            raise

        if self._status is not ShardStatus.CONNECTING:
            # disconnect() ran while the credentials were in flight
            return

        self.token = auth.token
        self._listen_task = asyncio.create_task(self._run(auth))

    async def refresh(self) -> None:
        """Send a fresh token over the open socket.

        Raises:
            ShardNotConnectedError: If the shard is not connected.
        """
        if self._status is not ShardStatus.CONNECTED:
            raise ShardNotConnectedError("Shard is not connected.")

        auth = await self._requests.request_connection_auth(self.id)
        self.token = auth.token
        await self._authenticate(auth.token)

    async def send(self, event: str, args: Sequence[str] | None = None) -> None:
        """Write one event frame to the socket.

        Raises:
            SocketUnavailableError: If no socket is open.
        """
        if self._ws is None:
            raise SocketUnavailableError("Socket for this shard is unavailable.")

        self._debug(f"sending event '{event}'")
        frame = EventPayload(event=event, args=tuple(args or ())).to_wire()
        await self._ws.send(json.dumps(frame, separators=(",", ":")))

    async def request(self, event: str, arg: str = "") -> Any:
        """Send a request-style event and wait for its response event.

        ``sendCommand`` has no response and returns ``None``.

        Raises:
            WebSocketError: If ``event`` is not a sendable request.
        """
        if event not in _REQUESTS:
            raise WebSocketError("Invalid sendable websocket event")

        wire_event, response = _REQUESTS[event]
        waiter = self.wait_for(response) if response is not None else None
        try:
            if event == "auth":
                await self._authenticate(arg)
            else:
                await self.send(wire_event, [arg] if arg else [])
        except Exception:
            if waiter is not None:
                waiter.cancel()
            raise

        if waiter is None:
            return None
        return await waiter

    async def disconnect(self) -> None:
        """Close the socket and reset the connection state. Idempotent."""
        ws, self._ws = self._ws, None
        task, self._listen_task = self._listen_task, None
        was_active = ws is not None or self._status is not ShardStatus.CLOSED

        if task is not None and task is not asyncio.current_task():
            task.cancel()

        self._reset()
        if ws is not None:
            await ws.close(code=NORMAL_CLOSURE)

        if was_active:
            self._debug("disconnected")
            self._emit(ShardEvent.SERVER_DISCONNECT)

    def _release(self) -> None:
        """Drop the socket without awaiting its close (interpreter shutdown)."""
        self._ws = None
        if self._listen_task is not None and not self._listen_task.done():
            self._listen_task.cancel()
        self._listen_task = None
        self._reset()

    def _reset(self) -> None:
        self._status = ShardStatus.CLOSED
        self.ready_at = 0
        self.ping = -1
        self.last_ping = 0

        for task in self._tasks:
            if not task.done():
                task.cancel()
        self._tasks.clear()

    # -------------------------------------------------------------------------
    # Internal: Socket Reactions
    # -------------------------------------------------------------------------

    async def _run(self, auth: WebSocketAuth) -> None:
        origin = self._requests.domain if self.origin else None
        try:
            ws = await connect_websocket(auth.socket_url, origin=origin)
        except PteroClientError as err:
            self._on_error(err)
            self._on_close()
            return

        self._ws = ws
        try:
            await self._on_open(auth.token)
            async for frame in ws:
                try:
                    await self._on_message(frame)
                except ConnectionClosed:
                    raise
                except Exception:
                    _LOGGER.exception("[Shard %s] Error handling frame", self.id)
                    self._debug("dropped a frame that failed to process")
        except (ConnectionClosed, PteroClientError) as err:
            if self._ws is ws:
                self._on_error(err)
        except Exception as err:
            _LOGGER.exception("[Shard %s] Listener failed", self.id)
            if self._ws is ws:
                self._on_error(err)
        finally:
            if self._ws is ws:
                self._ws = None
                self._listen_task = None
                self._on_close()

    async def _on_open(self, token: str) -> None:
        await self._authenticate(token)
        self._status = ShardStatus.CONNECTED
        self.ready_at = _now_ms()
        self._debug("connection opened")
        self._emit(ShardEvent.SERVER_CONNECT, self.id)

    async def _on_message(self, frame: str | bytes) -> None:
        if isinstance(frame, bytes):
            frame = frame.decode("utf-8", errors="replace")
        if not frame:
            self._debug("received a malformed packet")
            return

        try:
            data = json.loads(frame)
            payload = EventPayload.from_wire(data)
        except (ValueError, RecursionError) as err:
            self._debug(f"received a malformed packet: {err}")
            return

        self._emit(ShardEvent.RAW_PAYLOAD, data)

        if payload.event == "auth success":
            now = _now_ms()
            self.ping = now - self.last_ping
            self.last_ping = now
            self._emit(ShardEvent.AUTH_SUCCESS)
        elif payload.event == "token expiring":
            self._debug("refreshing token")
            # runs beside the reader so frames keep flowing during the REST call
            task = asyncio.create_task(self.refresh())
            self._tasks.add(task)
            task.add_done_callback(self._on_refreshed)
        elif payload.event == "token expired":
            self._debug("token expired")
            await self.disconnect()
        else:
            event, args = decode_packet(payload)
            self._emit(event, *args)

    def _on_error(self, err: BaseException) -> None:
        self._debug(f"received an error: {err}")

    def _on_refreshed(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            self._emit(ShardEvent.ERROR, f"failed to refresh token: {err}")

    def _on_close(self) -> None:
        self._reset()
        self._debug("connection closed")
        self._emit(ShardEvent.SERVER_DISCONNECT)

    async def _authenticate(self, token: str) -> None:
        self.last_ping = _now_ms()
        await self.send("auth", [token])
