"""Opening daemon console sockets.

The panel hands out a signed socket URL per server; the daemon accepts the
upgrade only when the Origin header matches the panel domain it is
configured for, so a 403 on the handshake almost always means a missing or
wrong origin.
"""

from __future__ import annotations

import asyncio
import logging

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidStatus,
    InvalidURI,
    WebSocketException,
)

from .. import __version__
from ..errors import (
    PteroConnectionError,
    PteroHandshakeError,
    PteroTimeout,
)

_LOGGER = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000

USER_AGENT = f"pterolink socket v{__version__}"


def normalize_origin(origin: str | None) -> str | None:
    """Strip the trailing slash a panel domain may carry."""
    if not origin:
        return None
    return origin.rstrip("/")


async def connect_websocket(
    url: str,
    *,
    origin: str | None = None,
    ping_interval: int | None = 20,
    timeout: float = 15.0,
) -> ClientConnection:
    """Connect to a daemon console socket.

    Args:
        url: Signed socket URL handed out by the panel
        origin: Panel domain sent as the Origin header
        ping_interval: Interval for ping frames
        timeout: Connection timeout

    Raises:
        PteroTimeout: The upgrade did not finish within ``timeout``.
        PteroHandshakeError: The daemon refused the upgrade.
        PteroConnectionError: The daemon could not be reached.
    """
    origin = normalize_origin(origin)
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                origin=origin,  # type: ignore[arg-type]
                user_agent_header=USER_AGENT,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise PteroTimeout("WebSocket connection timed out") from err
    except InvalidStatus as err:
        status = err.response.status_code
        _LOGGER.debug("Daemon refused socket upgrade with HTTP %s (origin=%s)", status, origin)
        if status == 403:
            hint = "check the origin" if origin else "the daemon may require an origin"
            raise PteroHandshakeError(f"Daemon rejected the socket (403); {hint}") from err
        raise PteroHandshakeError(f"Daemon rejected the socket ({status})") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise PteroHandshakeError("WebSocket handshake failed") from err
    except (OSError, WebSocketException) as err:
        raise PteroConnectionError("WebSocket connection failed") from err
