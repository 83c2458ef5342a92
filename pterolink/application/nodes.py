"""Daemon nodes."""

from __future__ import annotations

from typing import Any

from ..caseconv import to_camel_case, to_snake_case
from ..errors import ValidationError
from ..managers import Resource
from . import endpoints
from .base import ApplicationManager

# Fields the panel requires on every node update
_REQUIRED = (
    "name",
    "location_id",
    "fqdn",
    "scheme",
    "memory",
    "memory_overallocate",
    "disk",
    "disk_overallocate",
    "daemon_base",
    "daemon_sftp",
    "daemon_listen",
)


class NodeManager(ApplicationManager):
    ROOT = endpoints.NODES
    FILTERS = ("uuid", "name", "fqdn", "daemon_token_id")
    INCLUDES = ("allocations", "location", "servers")
    SORTS = ("id", "uuid", "memory", "disk")
    FILTER_ALIASES = {"daemonTokenId": "daemon_token_id"}

    def admin_url_for(self, id: int) -> str:  # noqa: A002
        return f"{self.requests.domain}/admin/nodes/view/{id}"

    async def get_configuration(self, id: int) -> dict[str, Any]:  # noqa: A002
        """Fetch the daemon configuration the panel generates for a node."""
        data = await self.requests.get(endpoints.node_configuration(id))
        return to_camel_case(data)

    async def create(self, **options: Any) -> Resource:
        data = await self.requests.post(endpoints.NODES, to_snake_case(options))
        return self._patch(data)

    async def update(self, id: int, **options: Any) -> Resource:  # noqa: A002
        """Update a node; fields not given are filled from the current node.

        Raises:
            ValidationError: If no fields are given.
        """
        if not options:
            raise ValidationError("Too few options to update the node.")

        current = to_snake_case(await self.fetch(id))
        payload = {k: current[k] for k in _REQUIRED if k in current}
        payload.update(to_snake_case(options))

        data = await self.requests.patch(endpoints.node(id), payload)
        return self._patch(data)
