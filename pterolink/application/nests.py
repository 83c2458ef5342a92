"""Nests and the eggs inside them (read only)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..caseconv import parse_date
from ..config import OptionSpec
from ..managers import BaseManager
from ..transport.http import RequestManager
from . import endpoints
from .base import ApplicationManager


class NestEggsManager(BaseManager[int]):
    """Eggs keyed by egg id across all nests."""

    INCLUDES = ("nest", "servers", "config", "script", "variables")
    CASTS = {"created_at": parse_date, "updated_at": parse_date}

    def admin_url_for(self, id: int) -> str:  # noqa: A002
        return f"{self.requests.domain}/admin/nests/egg/{id}"

    async def fetch(  # type: ignore[override]
        self,
        nest: int,
        id: int | None = None,  # noqa: A002
        *,
        force: bool = False,
        include: Sequence[str] | None = None,
    ) -> Any:
        """Fetch one egg of ``nest`` (cache first unless ``force``) or all of them."""
        if id is not None and not force:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        data = await self.requests.get(
            endpoints.nest_egg(nest, id) if id is not None else endpoints.nest_eggs(nest),
            params=self._query(include=include),
        )
        return self._patch(data)

    async def fetch_all(self, nest: int) -> Any:  # type: ignore[override]
        return await self.fetch(nest, force=True)


class NestManager(ApplicationManager):
    ROOT = endpoints.NESTS
    INCLUDES = ("eggs", "servers")

    def __init__(self, requests: RequestManager, options: OptionSpec | None = None) -> None:
        super().__init__(requests, options)
        self.eggs = NestEggsManager(requests, options)

    def admin_url_for(self, id: int) -> str:  # noqa: A002
        return f"{self.requests.domain}/admin/nests/view/{id}"
