"""Client API transport with console socket credentials."""

from __future__ import annotations

from dataclasses import dataclass

import aiohttp

from ..errors import RequestError
from ..transport.http import RequestManager
from . import endpoints


@dataclass(frozen=True)
class WebSocketAuth:
    """Signed console socket URL and its bearer token."""

    socket_url: str
    token: str


class ClientRequestManager(RequestManager):
    """Request manager bound to ``/api/client``."""

    def __init__(
        self,
        domain: str,
        auth: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__("client", domain, auth, session=session, timeout=timeout)

    async def request_connection_auth(self, server_id: str) -> WebSocketAuth:
        """Fetch fresh console socket credentials for a server.

        Safe to call repeatedly; every call yields a new token.

        Raises:
            RequestError: If the panel answer has no socket URL or token.
        """
        data = await self.get(endpoints.websocket(server_id))
        try:
            return WebSocketAuth(
                socket_url=data["data"]["socket"], token=data["data"]["token"]
            )
        except (KeyError, TypeError) as err:
            raise RequestError("Malformed websocket credentials response") from err
