"""Databases of one server."""

from __future__ import annotations

from typing import Any

from ..caseconv import parse_date
from ..config import OptionSpec
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints


class DatabaseManager(BaseManager[str]):
    INCLUDES = ("password",)
    CASTS = {"created_at": parse_date}

    def __init__(
        self,
        requests: RequestManager,
        server_id: str,
        options: OptionSpec | None = None,
    ) -> None:
        super().__init__(requests, options)
        self.server_id = server_id

    async def fetch(
        self,
        id: str | None = None,  # noqa: A002
        *,
        with_password: bool = False,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Any:
        """Fetch the server's databases, or one of them from the cache by id."""
        if id is not None and not with_password:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        res = self._patch(
            await self.requests.get(
                endpoints.databases(self.server_id),
                params=self._query(
                    page=page,
                    per_page=per_page,
                    include=["password"] if with_password else None,
                ),
            )
        )
        if id is not None:
            return res.get(id)
        return res

    async def create(self, database: str, remote: str) -> Resource:
        data = await self.requests.post(
            endpoints.databases(self.server_id),
            {"database": database, "remote": remote},
        )
        return self._patch(data)

    async def rotate(self, id: str) -> Resource:  # noqa: A002
        """Rotate a database password; the result carries the new password."""
        data = await self.requests.post(endpoints.database_rotate(self.server_id, id))
        return self._patch(data)

    async def delete(self, id: str) -> None:  # noqa: A002
        await self.requests.delete(endpoints.database(self.server_id, id))
        self.cache.delete(id)
