"""Servers visible to the client API key."""

from __future__ import annotations

from typing import Any, Final

from ..caseconv import to_camel_case
from ..errors import ValidationError
from ..managers import BaseManager, Resource
from . import endpoints

POWER_STATES: Final = ("start", "stop", "restart", "kill")


class ClientServerManager(BaseManager[str]):
    """Servers keyed by their short identifier."""

    INCLUDES = ("egg", "subusers")
    KEY = "identifier"

    def panel_url_for(self, server_id: str) -> str:
        return f"{self.requests.domain}/server/{server_id}"

    async def fetch(
        self,
        id: str | None = None,  # noqa: A002
        *,
        force: bool = False,
        page: int | None = None,
        per_page: int | None = None,
        include: list[str] | None = None,
    ) -> Any:
        """Fetch one server (cache first unless ``force``) or a page of servers."""
        if id is not None and not force:
            cached = self.cache.get(id)
            if cached is not None:
                return cached

        data = await self.requests.get(
            endpoints.server(id) if id is not None else endpoints.SERVERS,
            params=self._query(page=page, per_page=per_page, include=include),
        )
        return self._patch(data)

    async def fetch_resources(self, server_id: str) -> Resource:
        """Fetch the live resource usage of a server."""
        data = await self.requests.get(endpoints.resources(server_id))
        return to_camel_case(data["attributes"])

    async def send_command(self, server_id: str, command: str) -> None:
        await self.requests.post(endpoints.command(server_id), {"command": command})

    async def set_power_state(self, server_id: str, state: str) -> None:
        """Send a power signal.

        Raises:
            ValidationError: If ``state`` is not start, stop, restart or kill.
        """
        if state not in POWER_STATES:
            raise ValidationError(
                "Invalid power state, must be: start, stop, restart, or kill."
            )
        await self.requests.post(endpoints.power(server_id), {"signal": state})
