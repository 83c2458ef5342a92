"""Allocations of daemon nodes, cached per node."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..config import OptionSpec
from ..dictionary import Dict
from ..envelopes import CollectionEnvelope, parse_envelope
from ..errors import CapacityExceededError
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints

_LOGGER = logging.getLogger(__name__)


class NodeAllocationManager(BaseManager[int]):
    """Allocations grouped by node id, then by allocation id.

    As with schedules, a configured ``max`` caps each node's ``Dict``.
    """

    INCLUDES = ("node", "server")

    def __init__(self, requests: RequestManager, options: OptionSpec | None = None) -> None:
        super().__init__(requests, options)
        self.cache: Dict[int, Dict[int, Resource]] = Dict()

    def admin_url_for(self, node: int) -> str:
        return f"{self.requests.domain}/admin/nodes/view/{node}/allocation"

    def _node_cache(self, node: int) -> Dict[int, Resource]:
        cache = self.cache.get(node)
        if cache is None:
            cache = Dict()
            if self.options.max:
                cache.set_limit(self.options.max)
            self.cache[node] = cache
        return cache

    def _patch_node(self, node: int, raw: Any) -> Dict[int, Resource]:
        envelope = parse_envelope(raw)
        items = envelope.items if isinstance(envelope, CollectionEnvelope) else [envelope.attributes]
        if isinstance(envelope, CollectionEnvelope):
            self.meta = envelope.pagination

        res: Dict[int, Resource] = Dict()
        for attributes in items:
            item = self._normalize(attributes)
            res[item["id"]] = item
        if self.options.cache:
            cache = self._node_cache(node)
            for key, item in res.items():
                try:
                    cache[key] = item
                except CapacityExceededError:
                    _LOGGER.debug("[%s] Allocation cache for node %s is full", type(self).__name__, node)
                    break
        return res

    async def fetch(  # type: ignore[override]
        self,
        node: int,
        *,
        force: bool = False,
        page: int | None = None,
        include: Sequence[str] | None = None,
    ) -> Dict[int, Resource]:
        """Fetch a node's allocations; the cached ones unless ``force``."""
        if not force and page is None:
            cached = self.cache.get(node)
            if cached:
                return cached

        data = await self.requests.get(
            endpoints.node_allocations(node),
            params=self._query(page=page, include=include),
        )
        return self._patch_node(node, data)

    async def fetch_all(self, node: int) -> Dict[int, Resource]:  # type: ignore[override]
        """Fetch every page of a node's allocations."""
        data = await self.fetch(node, page=1)
        page = 2
        while self.meta is not None and page <= self.meta.total_pages:
            data = data.join(await self.fetch(node, page=page))
            page += 1
        return data

    async def fetch_available(self, node: int, *, single: bool = False) -> Any:
        """Return the node's unassigned allocations, or only the first with ``single``."""
        available = (await self.fetch_all(node)).filter(lambda a, _: not a.get("assigned"))
        if single:
            return available.first()
        return available

    async def create(self, node: int, ip: str, ports: Sequence[str]) -> None:
        """Create allocations on ``ip`` for each port or ``"start-end"`` range.

        The panel does not return the created allocations; fetch them again
        with ``force`` to see them.
        """
        await self.requests.post(
            endpoints.node_allocations(node), {"ip": ip, "ports": list(ports)}
        )

    async def delete(self, node: int, id: int) -> None:  # noqa: A002
        await self.requests.delete(endpoints.node_allocation(node, id))
        cache = self.cache.get(node)
        if cache is not None:
            cache.delete(id)
