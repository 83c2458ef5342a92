"""Transport layer: REST requests and console socket connections.

Components:
- http: aiohttp request manager for the panel REST API
- ws: websockets connection helper for daemon console sockets
"""

from .http import RequestManager, validate_domain
from .ws import connect_websocket

__all__ = [
    "RequestManager",
    "connect_websocket",
    "validate_domain",
]
