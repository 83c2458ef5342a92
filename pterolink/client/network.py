"""Network allocations of one server."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..config import OptionSpec
from ..dictionary import Dict
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints


class NetworkManager(BaseManager[int]):
    """Allocations assigned to a server, keyed by allocation id."""

    def __init__(
        self,
        requests: RequestManager,
        server_id: str,
        options: OptionSpec | None = None,
    ) -> None:
        super().__init__(requests, options)
        self.server_id = server_id

    def _normalize(self, attributes: Mapping[str, Any]) -> Resource:
        item = super()._normalize(attributes)
        item["notes"] = item.get("notes") or None
        return item

    async def fetch(self, id: int | None = None, *, force: bool = False) -> Any:  # noqa: A002
        """Fetch the server's allocations, or one of them by id.

        The panel has no single-allocation route, so a cache miss on ``id``
        refetches the whole list.
        """
        if id is not None and not force:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        res: Dict[int, Resource] = self._patch(
            await self.requests.get(endpoints.allocations(self.server_id))
        )
        if id is not None:
            return res.get(id)
        return res

    async def assign(self) -> Resource:
        """Assign a new allocation to the server."""
        data = await self.requests.post(endpoints.allocations(self.server_id))
        return self._patch(data)

    async def set_note(self, id: int, notes: str) -> Resource:  # noqa: A002
        data = await self.requests.post(
            endpoints.allocation(self.server_id, id), {"notes": notes}
        )
        return self._patch(data)

    async def set_primary(self, id: int) -> Resource:  # noqa: A002
        data = await self.requests.post(endpoints.allocation_primary(self.server_id, id))
        return self._patch(data)

    async def unassign(self, id: int) -> None:  # noqa: A002
        await self.requests.delete(endpoints.allocation(self.server_id, id))
        self.cache.delete(id)
