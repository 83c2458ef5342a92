"""Asynchronous client for the Pterodactyl panel REST API and console sockets."""

__version__ = "0.1.0"

from .application import PteroApp
from .caseconv import parse_date, to_camel_case, to_snake_case
from .client import PteroClient
from .client.ws import Shard, ShardEvent, ShardStatus, WebSocketManager
from .config import OptionSpec, app_config, client_config
from .dictionary import Dict
from .envelopes import (
    CollectionEnvelope,
    EventPayload,
    PaginationMeta,
    SingleEnvelope,
    parse_envelope,
)
from .errors import (
    CapacityExceededError,
    ConfigLoadError,
    DictError,
    LimitAlreadySetError,
    PteroAPIError,
    PteroClientError,
    PteroConnectionError,
    PteroHandshakeError,
    PteroResponseError,
    PteroTimeout,
    RequestError,
    ShardNotConnectedError,
    SocketUnavailableError,
    ValidationError,
    WebSocketError,
)
from .events import EventChannel
from .transport import RequestManager

__all__ = [
    "CapacityExceededError",
    "CollectionEnvelope",
    "ConfigLoadError",
    "Dict",
    "DictError",
    "EventChannel",
    "EventPayload",
    "LimitAlreadySetError",
    "OptionSpec",
    "PaginationMeta",
    "PteroAPIError",
    "PteroApp",
    "PteroClient",
    "PteroClientError",
    "PteroConnectionError",
    "PteroHandshakeError",
    "PteroResponseError",
    "PteroTimeout",
    "RequestError",
    "RequestManager",
    "Shard",
    "ShardEvent",
    "ShardNotConnectedError",
    "ShardStatus",
    "SingleEnvelope",
    "SocketUnavailableError",
    "ValidationError",
    "WebSocketError",
    "WebSocketManager",
    "app_config",
    "client_config",
    "parse_date",
    "parse_envelope",
    "to_camel_case",
    "to_snake_case",
]
