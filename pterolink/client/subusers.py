"""Subusers of one server."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..caseconv import parse_date
from ..config import OptionSpec
from ..errors import ValidationError
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints


class SubUserManager(BaseManager[str]):
    """Subusers keyed by user uuid.

    Permissions are passed through as the panel's strings
    (``control.console``, ``file.read``...).
    """

    KEY = "uuid"
    RENAMES = {"2fa_enabled": "two_factor_enabled"}
    CASTS = {"created_at": parse_date}

    def __init__(
        self,
        requests: RequestManager,
        server_id: str,
        options: OptionSpec | None = None,
    ) -> None:
        super().__init__(requests, options)
        self.server_id = server_id

    @property
    def panel_url(self) -> str:
        return f"{self.requests.domain}/server/{self.server_id}/users"

    async def fetch(
        self,
        id: str | None = None,  # noqa: A002
        *,
        force: bool = False,
        page: int | None = None,
    ) -> Any:
        if id is not None and not force:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        if id is not None:
            data = await self.requests.get(endpoints.subuser(self.server_id, id))
        else:
            data = await self.requests.get(
                endpoints.subusers(self.server_id), params=self._query(page=page)
            )
        return self._patch(data)

    async def add(self, email: str, permissions: Sequence[str]) -> Resource:
        """Invite ``email`` as a subuser.

        Raises:
            ValidationError: If no permissions are given.
        """
        if not permissions:
            raise ValidationError("Need at least 1 permission for the subuser.")
        data = await self.requests.post(
            endpoints.subusers(self.server_id),
            {"email": email, "permissions": list(permissions)},
        )
        return self._patch(data)

    async def set_permissions(self, id: str, permissions: Sequence[str]) -> Resource:  # noqa: A002
        """Replace a subuser's permissions.

        Raises:
            ValidationError: If no permissions are given.
        """
        if not permissions:
            raise ValidationError("No permissions specified for the subuser.")
        data = await self.requests.post(
            endpoints.subuser(self.server_id, id), {"permissions": list(permissions)}
        )
        return self._patch(data)

    async def remove(self, id: str) -> None:  # noqa: A002
        await self.requests.delete(endpoints.subuser(self.server_id, id))
        self.cache.delete(id)
