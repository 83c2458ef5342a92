"""Shared fetch/query/delete flow for application API managers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from ..caseconv import parse_date
from ..dictionary import Dict
from ..errors import ValidationError
from ..managers import BaseManager, Resource

_TIMESTAMPS = {"created_at": parse_date, "updated_at": parse_date}


class ApplicationManager(BaseManager[int]):
    """Manager for one application collection rooted at ``ROOT``."""

    ROOT: ClassVar[str] = ""
    CASTS = _TIMESTAMPS

    # camelCase filter names accepted by ``query`` and their wire names
    FILTER_ALIASES: ClassVar[Mapping[str, str]] = {}

    def _path(self, id: int) -> str:  # noqa: A002
        return f"{self.ROOT}/{id}"

    async def fetch(
        self,
        id: int | None = None,  # noqa: A002
        *,
        force: bool = False,
        page: int | None = None,
        per_page: int | None = None,
        include: Sequence[str] | None = None,
    ) -> Any:
        """Fetch one resource (cache first unless ``force``) or a page of them."""
        if id is not None and not force:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        data = await self.requests.get(
            self._path(id) if id is not None else self.ROOT,
            params=self._query(page=page, per_page=per_page, include=include),
        )
        return self._patch(data)

    async def query(
        self,
        entity: str,
        *,
        filter: str | None = None,  # noqa: A002
        sort: str | None = None,
    ) -> Dict[int, Resource]:
        """List resources matching ``filter=entity`` and/or ordered by ``sort``.

        Raises:
            ValidationError: If neither ``filter`` nor ``sort`` is given, or
                either is not accepted by this manager.
        """
        if not filter and not sort:
            raise ValidationError("Sort or filter is required.")
        if filter:
            filter = self.FILTER_ALIASES.get(filter, filter)

        data = await self.requests.get(
            self.ROOT,
            params=self._query(filter=(filter, entity) if filter else None, sort=sort),
        )
        return self._patch(data)

    async def delete(self, id: int) -> None:  # noqa: A002
        await self.requests.delete(self._path(id))
        self.cache.delete(id)
