"""Backups of one server."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from ..caseconv import parse_date, to_snake_case
from ..config import OptionSpec
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints


class BackupManager(BaseManager[str]):
    """Backups keyed by UUID."""

    INCLUDES = ()
    KEY = "uuid"
    RENAMES = {"is_successful": "successful", "is_locked": "locked"}
    CASTS = {"created_at": parse_date, "completed_at": parse_date}

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
        force: bool = False,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Any:
        """Fetch one backup (cache first unless ``force``) or a page of backups."""
        if id is not None and not force:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        data = await self.requests.get(
            endpoints.backup(self.server_id, id)
            if id is not None
            else endpoints.backups(self.server_id),
            params=self._query(page=page, per_page=per_page),
        )
        return self._patch(data)

    async def create(
        self,
        *,
        name: str | None = None,
        is_locked: bool | None = None,
        ignored: str | None = None,
    ) -> Resource:
        payload = {
            k: v
            for k, v in {"name": name, "isLocked": is_locked, "ignored": ignored}.items()
            if v is not None
        }
        data = await self.requests.post(
            endpoints.backups(self.server_id), to_snake_case(payload)
        )
        return self._patch(data)

    async def toggle_lock(self, id: str) -> Resource:  # noqa: A002
        data = await self.requests.post(endpoints.backup_lock(self.server_id, id))
        return self._patch(data)

    async def get_download_url(self, id: str) -> str:  # noqa: A002
        data = await self.requests.get(endpoints.backup_download(self.server_id, id))
        return data["attributes"]["url"]

    async def download(self, id: str, dest: Path) -> None:  # noqa: A002
        """Download a backup archive to ``dest``.

        Raises:
            FileExistsError: If something already exists at ``dest``.
        """
        dest = Path(dest)
        if dest.exists():
            raise FileExistsError(f"A file or directory exists at {dest}")

        url = await self.get_download_url(id)
        data = await self.requests.raw("GET", url)
        await asyncio.to_thread(dest.write_bytes, data or b"")

    async def restore(self, id: str) -> None:  # noqa: A002
        await self.requests.post(endpoints.backup_restore(self.server_id, id))

    async def delete(self, id: str) -> None:  # noqa: A002
        await self.requests.delete(endpoints.backup(self.server_id, id))
        self.cache.delete(id)
