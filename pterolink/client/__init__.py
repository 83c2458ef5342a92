"""Client API entry point.

Usage:
    client = PteroClient("https://panel.example.com", "ptlc_...")
    await client.connect()
    shard = client.add_socket_server("411d2eb9")[0]
    shard.on("serverOutput", print)
    await shard.connect()
    ...
    await client.close()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..config import client_config
from ..transport.http import validate_domain
from .backups import BackupManager
from .databases import DatabaseManager
from .files import FileManager
from .network import NetworkManager
from .requests import ClientRequestManager, WebSocketAuth
from .schedules import ScheduleManager
from .servers import ClientServerManager
from .subusers import SubUserManager
from .ws import Shard, WebSocketManager

_LOGGER = logging.getLogger(__name__)


class PteroClient:
    """Client API session: REST managers plus console socket shards."""

    def __init__(
        self,
        domain: str,
        auth: str,
        options: Mapping[str, Any] | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.domain = validate_domain(domain)
        self.options = client_config(options)

        self.requests = ClientRequestManager(self.domain, auth, session=session)
        self.servers = ClientServerManager(self.requests, self.options["servers"])
        self.schedules = ScheduleManager(self.requests, self.options["schedules"])
        self.ws = WebSocketManager(self.requests)

        self._backups: dict[str, BackupManager] = {}
        self._network: dict[str, NetworkManager] = {}
        self._databases: dict[str, DatabaseManager] = {}
        self._subusers: dict[str, SubUserManager] = {}
        self._files: dict[str, FileManager] = {}

    @property
    def ping(self) -> int:
        """Latency of the last REST request in milliseconds, -1 before any."""
        return self.requests.ping

    def backups(self, server_id: str) -> BackupManager:
        manager = self._backups.get(server_id)
        if manager is None:
            manager = BackupManager(self.requests, server_id, self.options["backups"])
            self._backups[server_id] = manager
        return manager

    def network(self, server_id: str) -> NetworkManager:
        manager = self._network.get(server_id)
        if manager is None:
            manager = NetworkManager(self.requests, server_id, self.options["network"])
            self._network[server_id] = manager
        return manager

    def databases(self, server_id: str) -> DatabaseManager:
        manager = self._databases.get(server_id)
        if manager is None:
            manager = DatabaseManager(self.requests, server_id, self.options["databases"])
            self._databases[server_id] = manager
        return manager

    def subusers(self, server_id: str) -> SubUserManager:
        manager = self._subusers.get(server_id)
        if manager is None:
            manager = SubUserManager(self.requests, server_id, self.options["subusers"])
            self._subusers[server_id] = manager
        return manager

    def files(self, server_id: str) -> FileManager:
        manager = self._files.get(server_id)
        if manager is None:
            manager = FileManager(self.requests, server_id, self.options["files"])
            self._files[server_id] = manager
        return manager

    async def connect(self) -> None:
        """Preload the managers whose options set ``fetch``.

        Schedules are preloaded for every cached server, so they need the
        servers cache populated first.
        """
        if self.options["servers"].fetch:
            await self.servers.fetch_all()
        if self.options["schedules"].fetch:
            for server_id in list(self.servers.cache):
                await self.schedules.fetch(server_id)
        _LOGGER.debug("[Client] connected to %s", self.domain)

    def add_socket_server(self, *ids: str, origin: bool = False) -> list[Shard]:
        """Create (or reuse) a shard per server id. Shards are not connected."""
        return [self.ws.create_shard(i, origin=origin) for i in ids]

    async def remove_socket_server(self, server_id: str) -> bool:
        return await self.ws.delete_shard(server_id)

    async def disconnect(self) -> None:
        """Disconnect and remove every shard."""
        if self.ws.active:
            await self.ws.destroy()

    async def close(self) -> None:
        await self.disconnect()
        await self.requests.close()


__all__ = [
    "BackupManager",
    "ClientRequestManager",
    "ClientServerManager",
    "DatabaseManager",
    "FileManager",
    "NetworkManager",
    "PteroClient",
    "ScheduleManager",
    "SubUserManager",
    "WebSocketAuth",
]
