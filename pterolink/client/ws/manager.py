"""Registry of console shards for one client session."""

from __future__ import annotations

import atexit
import logging
import weakref
from typing import TYPE_CHECKING, Any

from ...dictionary import Dict
from .shard import Shard

if TYPE_CHECKING:
    from ..requests import ClientRequestManager

_LOGGER = logging.getLogger(__name__)


def _release_at_exit(ref: weakref.ReferenceType[WebSocketManager]) -> None:
    manager = ref()
    if manager is not None:
        manager._release()


class WebSocketManager:
    """Creates, tracks and tears down shards, at most one per server.

    One interpreter-exit hook is registered per manager. By then no event
    loop is left to await socket closes on, so the hook drops every shard's
    socket and resets its state synchronously. Inside a running loop, use
    ``destroy()``.
    """

    def __init__(self, requests: ClientRequestManager) -> None:
        self._requests = requests
        self.shards: Dict[str, Shard] = Dict()
        self.active = False
        atexit.register(_release_at_exit, weakref.ref(self))

    @property
    def ping(self) -> float:
        """Mean ping over all shards, -1 without shards."""
        if not self.shards:
            return -1
        return sum(s.ping for s in self.shards.values()) / len(self.shards)

    def create_shard(self, server_id: str, *, origin: bool = False) -> Shard:
        """Return the shard for ``server_id``, creating it if needed.

        The shard is not connected: attach listeners first, then call
        ``connect()``.
        """
        shard = self.shards.get(server_id)
        if shard is not None:
            return shard

        shard = Shard(self._requests, server_id, origin=origin)
        self.shards[server_id] = shard
        self.active = True
        _LOGGER.debug("[WS] created shard %s", server_id)
        return shard

    async def delete_shard(self, server_id: str) -> bool:
        """Disconnect and remove a shard; returns False when absent."""
        shard = self.shards.get(server_id)
        if shard is None:
            return False

        await shard.disconnect()
        self.shards.delete(server_id)
        self.active = bool(self.shards)
        _LOGGER.debug("[WS] deleted shard %s", server_id)
        return True

    async def broadcast(self, event: str, arg: str = "") -> list[Any]:
        """Send a request-style event to every shard, one after another.

        Results are in shard insertion order.
        """
        results: list[Any] = []
        for shard in list(self.shards.values()):
            results.append(await shard.request(event, arg))
        return results

    async def destroy(self) -> None:
        """Disconnect and remove every shard."""
        for shard in list(self.shards.values()):
            await shard.disconnect()
        self.shards.clear()
        self.active = False

    def _release(self) -> None:
        for shard in self.shards.values():
            shard._release()
        self.shards.clear()
        self.active = False
