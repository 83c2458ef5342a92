"""Console socket event names and the inbound packet dispatch table."""

from __future__ import annotations

import json
from enum import Enum, IntEnum
from typing import Any

from ...caseconv import to_camel_case
from ...envelopes import EventPayload


class ShardStatus(IntEnum):
    """Connection state of a shard."""

    CLOSED = 0
    CONNECTING = 1
    CONNECTED = 2


class ShardEvent(Enum):
    """Events a shard emits; the only names listeners can subscribe to."""

    DEBUG = "debug"
    ERROR = "error"
    RAW_PAYLOAD = "rawPayload"
    AUTH_SUCCESS = "authSuccess"
    SERVER_CONNECT = "serverConnect"
    SERVER_OUTPUT = "serverOutput"
    DAEMON_MESSAGE = "daemonMessage"
    SERVER_DISCONNECT = "serverDisconnect"
    STATS_UPDATE = "statsUpdate"
    STATUS_UPDATE = "statusUpdate"
    TRANSFER_UPDATE = "transferUpdate"
    INSTALL_START = "installStart"
    INSTALL_OUTPUT = "installOutput"
    INSTALL_COMPLETE = "installComplete"
    BACKUP_COMPLETE = "backupComplete"


_PASSTHROUGH: dict[str, ShardEvent] = {
    "status": ShardEvent.STATUS_UPDATE,
    "console output": ShardEvent.SERVER_OUTPUT,
    "daemon message": ShardEvent.DAEMON_MESSAGE,
    "install output": ShardEvent.INSTALL_OUTPUT,
    "transfer logs": ShardEvent.TRANSFER_UPDATE,
    "transfer status": ShardEvent.TRANSFER_UPDATE,
    "daemon error": ShardEvent.ERROR,
    "jwt error": ShardEvent.ERROR,
}

_SIGNALS: dict[str, ShardEvent] = {
    "install started": ShardEvent.INSTALL_START,
    "install completed": ShardEvent.INSTALL_COMPLETE,
}

_JSON: dict[str, ShardEvent] = {
    "stats": ShardEvent.STATS_UPDATE,
    "backup completed": ShardEvent.BACKUP_COMPLETE,
}


def decode_packet(payload: EventPayload) -> tuple[ShardEvent, tuple[Any, ...]]:
    """Map a domain packet to the event and arguments a shard emits.

    Session events (``auth success``, ``token expiring``, ``token expired``)
    are handled by the shard itself and never reach this table.
    """
    args = ",".join(payload.args)
    event = payload.event

    if event in _PASSTHROUGH:
        return _PASSTHROUGH[event], (args,)

    if event in _SIGNALS:
        return _SIGNALS[event], ()

    if event in _JSON:
        try:
            data = to_camel_case(json.loads(args))
        except (ValueError, RecursionError):
            return ShardEvent.ERROR, (f"received malformed '{event}' payload",)
        return _JSON[event], (data,)

    return ShardEvent.ERROR, (f"received unknown event '{event}'",)
