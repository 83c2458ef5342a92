"""Databases of one server, as seen by administrators (read only)."""

from __future__ import annotations

from ..config import OptionSpec
from ..transport.http import RequestManager
from . import endpoints
from .base import ApplicationManager


class ApplicationDatabaseManager(ApplicationManager):
    """Databases of server ``server_id`` keyed by database id."""

    INCLUDES = ("host", "password")

    def __init__(
        self,
        requests: RequestManager,
        server_id: int,
        options: OptionSpec | None = None,
    ) -> None:
        super().__init__(requests, options)
        self.server_id = server_id
        self.ROOT = endpoints.server_databases(server_id)  # type: ignore[misc]
