"""Servers as seen by panel administrators."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..caseconv import to_snake_case
from ..errors import ValidationError
from ..managers import Resource
from . import endpoints
from .base import ApplicationManager

_LOGGER = logging.getLogger(__name__)

DEFAULT_LIMITS: dict[str, int | None] = {
    "memory": 128,
    "swap": 0,
    "disk": 512,
    "io": 500,
    "cpu": 100,
    "threads": None,
}

DEFAULT_FEATURE_LIMITS: dict[str, int] = {
    "allocations": 1,
    "databases": 5,
    "backups": 1,
}


class ApplicationServerManager(ApplicationManager):
    """Servers keyed by numeric id.

    ``container.environment`` keeps the egg's variable names untouched
    (``SERVER_JARFILE`` stays ``SERVER_JARFILE``).
    """

    ROOT = endpoints.SERVERS
    FILTERS = ("name", "uuid", "uuidShort", "external_id", "image")
    INCLUDES = (
        "allocations",
        "user",
        "subusers",
        "nest",
        "egg",
        "variables",
        "location",
        "node",
        "databases",
    )
    SORTS = ("id", "-id", "uuid", "-uuid")
    FILTER_ALIASES = {"identifier": "uuidShort", "externalId": "external_id"}

    def _normalize(self, attributes: Mapping[str, Any]) -> Resource:
        container = attributes.get("container") or {}
        environment = container.get("environment")
        item = super()._normalize(attributes)
        if environment is not None:
            item["container"]["environment"] = dict(environment)
        return item

    def admin_url_for(self, id: int) -> str:  # noqa: A002
        return f"{self.requests.domain}/admin/servers/view/{id}"

    def panel_url_for(self, identifier: str) -> str:
        return f"{self.requests.domain}/server/{identifier}"

    async def fetch_external(self, external_id: str, *, force: bool = False) -> Resource:
        if not force:
            cached = self.cache.find(lambda s, _: s.get("externalId") == external_id)
            if cached is not None:
                return cached

        data = await self.requests.get(endpoints.server_external(external_id))
        return self._patch(data)

    async def create(
        self,
        *,
        user: int,
        name: str,
        egg: int,
        image: str,
        startup: str,
        environment: Mapping[str, Any],
        allocation: int,
        limits: Mapping[str, Any] | None = None,
        feature_limits: Mapping[str, Any] | None = None,
        description: str | None = None,
        external_id: str | None = None,
        start_on_completion: bool = False,
    ) -> Resource:
        """Create a server on the default allocation ``allocation``.

        Limits not given fall back to ``DEFAULT_LIMITS`` and
        ``DEFAULT_FEATURE_LIMITS``.

        Raises:
            ValidationError: If a required field is empty.
        """
        for field, value in (("name", name), ("image", image), ("startup", startup)):
            if not value:
                raise ValidationError(f"Missing required field '{field}'.")

        payload: dict[str, Any] = {
            "user": user,
            "name": name,
            "egg": egg,
            "docker_image": image,
            "startup": startup,
            "environment": dict(environment),
            "allocation": {"default": allocation},
            "limits": {**DEFAULT_LIMITS, **to_snake_case(dict(limits or {}))},
            "feature_limits": {
                **DEFAULT_FEATURE_LIMITS,
                **to_snake_case(dict(feature_limits or {})),
            },
            "start_on_completion": start_on_completion,
        }
        if description is not None:
            payload["description"] = description
        if external_id is not None:
            payload["external_id"] = external_id

        data = await self.requests.post(endpoints.SERVERS, payload)
        server = self._patch(data)
        _LOGGER.debug("[App] created server %s (%s)", server.get("id"), name)
        return server

    async def update_details(self, id: int, **options: Any) -> Resource:  # noqa: A002
        """Update name, owner, external id or description.

        Raises:
            ValidationError: If no fields are given.
        """
        if not options:
            raise ValidationError("Too few options to update the server.")

        current = await self.fetch(id)
        payload = {
            "name": current.get("name"),
            "user": current.get("user"),
            "external_id": current.get("externalId"),
            "description": current.get("description"),
        }
        payload.update(to_snake_case(options))

        data = await self.requests.patch(endpoints.server_details(id), payload)
        return self._patch(data)

    async def update_build(
        self,
        id: int,  # noqa: A002
        *,
        feature_limits: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Resource:
        """Update allocations and resource limits.

        ``options`` are flat limit fields (``memory``, ``cpu``...) plus
        ``allocation``, ``add_allocations`` and ``remove_allocations``.

        Raises:
            ValidationError: If no fields are given.
        """
        if not options and not feature_limits:
            raise ValidationError("Too few options to update the server.")

        current = await self.fetch(id)
        payload: dict[str, Any] = {
            "allocation": current.get("allocation"),
            **to_snake_case(current.get("limits") or {}),
            "feature_limits": {
                **to_snake_case(current.get("featureLimits") or {}),
                **to_snake_case(dict(feature_limits or {})),
            },
        }
        payload.update(to_snake_case(options))

        data = await self.requests.patch(endpoints.server_build(id), payload)
        return self._patch(data)

    async def update_startup(
        self,
        id: int,  # noqa: A002
        *,
        startup: str | None = None,
        environment: Mapping[str, Any] | None = None,
        egg: int | None = None,
        image: str | None = None,
        skip_scripts: bool = False,
    ) -> Resource:
        """Update the startup command, variables, egg or image.

        ``environment`` is merged over the current variables.
        """
        current = await self.fetch(id)
        container = current.get("container") or {}
        payload = {
            "startup": startup if startup is not None else container.get("startupCommand"),
            "environment": {**(container.get("environment") or {}), **(environment or {})},
            "egg": egg if egg is not None else current.get("egg"),
            "image": image if image is not None else container.get("image"),
            "skip_scripts": skip_scripts,
        }

        data = await self.requests.patch(endpoints.server_startup(id), payload)
        return self._patch(data)

    async def suspend(self, id: int) -> None:  # noqa: A002
        await self.requests.post(endpoints.server_suspend(id))
        self._set_flag(id, "suspended", True)

    async def unsuspend(self, id: int) -> None:  # noqa: A002
        await self.requests.post(endpoints.server_unsuspend(id))
        self._set_flag(id, "suspended", False)

    async def reinstall(self, id: int) -> None:  # noqa: A002
        await self.requests.post(endpoints.server_reinstall(id))

    async def delete(self, id: int, *, force: bool = False) -> None:  # noqa: A002
        """Delete a server; ``force`` skips the daemon-side cleanup checks."""
        path = endpoints.server(id)
        if force:
            path += "/force"
        await self.requests.delete(path)
        self.cache.delete(id)

    def _set_flag(self, id: int, key: str, value: Any) -> None:  # noqa: A002
        cached = self.cache.get(id)
        if cached is not None:
            cached[key] = value
