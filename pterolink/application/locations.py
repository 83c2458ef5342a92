"""Node locations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import ValidationError
from ..managers import Resource
from . import endpoints
from .base import ApplicationManager


class NodeLocationManager(ApplicationManager):
    ROOT = endpoints.LOCATIONS
    FILTERS = ("short", "long")
    INCLUDES = ("nodes", "servers")

    def admin_url_for(self, id: int) -> str:  # noqa: A002
        return f"{self.requests.domain}/admin/locations/view/{id}"

    def resolve(self, obj: Any) -> Resource | None:
        """Find a location from an id, a short/long code, or a resource.

        A resource carrying a ``location`` relationship is patched into the
        cache and returned.
        """
        if isinstance(obj, int):
            return self.cache.get(obj)
        if isinstance(obj, str):
            return self.cache.find(lambda loc, _: obj in (loc.get("short"), loc.get("long")))
        if isinstance(obj, Mapping):
            location = (obj.get("relationships") or {}).get("location")
            if isinstance(location, Mapping) and location.get("attributes"):
                return self._patch(location)
        return None

    async def create(self, short: str, long: str) -> Resource:
        data = await self.requests.post(endpoints.LOCATIONS, {"short": short, "long": long})
        return self._patch(data)

    async def update(
        self,
        id: int,  # noqa: A002
        *,
        short: str | None = None,
        long: str | None = None,
    ) -> Resource:
        """Change a location's codes.

        Raises:
            ValidationError: If neither ``short`` nor ``long`` is given.
        """
        if not short and not long:
            raise ValidationError("Either short or long is required to update the location")

        payload = {k: v for k, v in (("short", short), ("long", long)) if v}
        data = await self.requests.patch(endpoints.location(id), payload)
        return self._patch(data)
