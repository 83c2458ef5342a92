"""Panel user accounts."""

from __future__ import annotations

from typing import Any

from ..caseconv import to_snake_case
from ..managers import Resource
from . import endpoints
from .base import ApplicationManager

_OUTGOING = {"firstname": "first_name", "lastname": "last_name", "isAdmin": "root_admin"}


class UserManager(ApplicationManager):
    """Users keyed by numeric id.

    Resources use ``firstname``, ``lastname`` and ``isAdmin`` for the panel's
    ``first_name``, ``last_name`` and ``root_admin``.
    """

    ROOT = endpoints.USERS
    FILTERS = ("email", "uuid", "username", "external_id")
    INCLUDES = ("servers",)
    SORTS = ("id", "-id", "uuid", "-uuid")
    RENAMES = {"first_name": "firstname", "last_name": "lastname", "root_admin": "is_admin"}
    FILTER_ALIASES = {"externalId": "external_id"}

    def admin_url_for(self, id: int) -> str:  # noqa: A002
        return f"{self.requests.domain}/admin/users/view/{id}"

    async def fetch_external(self, external_id: str, *, force: bool = False) -> Resource:
        """Fetch a user by the external id set by a third-party integration."""
        if not force:
            cached = self.cache.find(lambda u, _: u.get("externalId") == external_id)
            if cached is not None:
                return cached

        data = await self.requests.get(endpoints.user_external(external_id))
        return self._patch(data)

    async def create(self, **options: Any) -> Resource:
        """Create a user from camelCase or snake_case fields."""
        data = await self.requests.post(
            endpoints.USERS, to_snake_case(options, map=_OUTGOING)
        )
        return self._patch(data)

    async def update(self, id: int, **options: Any) -> Resource:  # noqa: A002
        data = await self.requests.patch(
            endpoints.user(id), to_snake_case(options, map=_OUTGOING)
        )
        return self._patch(data)
