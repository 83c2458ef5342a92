"""Application (admin) API entry point.

Usage:
    app = PteroApp("https://panel.example.com", "ptla_...")
    await app.connect()
    users = await app.users.query("admin@example.com", filter="email")
    await app.close()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..config import app_config
from ..transport.http import RequestManager, validate_domain
from .allocations import NodeAllocationManager
from .databases import ApplicationDatabaseManager
from .locations import NodeLocationManager
from .nests import NestEggsManager, NestManager
from .nodes import NodeManager
from .servers import ApplicationServerManager
from .users import UserManager

_LOGGER = logging.getLogger(__name__)


class PteroApp:
    """Application API session."""

    def __init__(
        self,
        domain: str,
        auth: str,
        options: Mapping[str, Any] | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.domain = validate_domain(domain)
        self.options = app_config(options)

        self.requests = RequestManager("application", self.domain, auth, session=session)
        self.users = UserManager(self.requests, self.options["users"])
        self.nodes = NodeManager(self.requests, self.options["nodes"])
        self.locations = NodeLocationManager(self.requests, self.options["locations"])
        self.servers = ApplicationServerManager(self.requests, self.options["servers"])
        self.allocations = NodeAllocationManager(self.requests, self.options["allocations"])
        self.nests = NestManager(self.requests, self.options["nests"])

        self._databases: dict[int, ApplicationDatabaseManager] = {}

    def databases(self, server_id: int) -> ApplicationDatabaseManager:
        manager = self._databases.get(server_id)
        if manager is None:
            manager = ApplicationDatabaseManager(
                self.requests, server_id, self.options["databases"]
            )
            self._databases[server_id] = manager
        return manager

    @property
    def ping(self) -> int:
        return self.requests.ping

    async def connect(self) -> None:
        """Preload the managers whose options set ``fetch``.

        Allocations are preloaded for every cached node.
        """
        for name, manager in (
            ("users", self.users),
            ("nodes", self.nodes),
            ("locations", self.locations),
            ("servers", self.servers),
            ("nests", self.nests),
        ):
            if self.options[name].fetch:
                await manager.fetch_all()
        if self.options["allocations"].fetch:
            for node in list(self.nodes.cache):
                await self.allocations.fetch_all(node)
        _LOGGER.debug("[App] connected to %s", self.domain)

    async def close(self) -> None:
        await self.requests.close()


__all__ = [
    "ApplicationDatabaseManager",
    "ApplicationServerManager",
    "NestEggsManager",
    "NestManager",
    "NodeAllocationManager",
    "NodeLocationManager",
    "NodeManager",
    "PteroApp",
    "UserManager",
]
