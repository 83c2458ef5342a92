"""Console socket shards."""

from .manager import WebSocketManager
from .packets import ShardEvent, ShardStatus, decode_packet
from .shard import Shard

__all__ = [
    "Shard",
    "ShardEvent",
    "ShardStatus",
    "WebSocketManager",
    "decode_packet",
]
