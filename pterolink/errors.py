"""Client error types for panel API and console socket interactions."""

from __future__ import annotations

from typing import Any


class PteroClientError(Exception):
    """Base error for panel client failures."""


class PteroTimeout(PteroClientError):
    """Timeout while communicating with the panel or daemon."""


class PteroConnectionError(PteroClientError):
    """Network connection to the panel or daemon failed."""


class PteroHandshakeError(PteroClientError):
    """WebSocket handshake failed."""


class RequestError(PteroClientError):
    """A request failed without a usable API error body."""


class PteroResponseError(PteroClientError):
    """HTTP response error from the panel."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class PteroAPIError(PteroResponseError):
    """The panel answered with a structured error document (usually 4xx).

    Each entry of ``errors`` is an object with ``code``, ``status``,
    ``detail`` and an optional ``meta`` field.
    """

    def __init__(self, status: int, errors: list[dict[str, Any]]) -> None:
        lines = [
            f"- {e.get('status', status)}: {e.get('detail') or 'No details provided'}"
            for e in errors
        ]
        super().__init__(status, "\n" + "\n".join(lines))
        self.errors = errors
        self.codes: list[str] = [e.get("code", "") for e in errors]
        self.details: list[str] = [e.get("detail", "") for e in errors]
        self.meta: list[Any] = [e["meta"] for e in errors if e.get("meta")]

    @classmethod
    def from_response(cls, status: int, data: Any) -> PteroAPIError:
        """Build the error from a decoded response body of any shape."""
        errors = data.get("errors") if isinstance(data, dict) else None
        if not isinstance(errors, list) or not errors:
            errors = [{"code": "", "status": str(status), "detail": str(data)}]
        return cls(status, errors)


class ValidationError(PteroClientError):
    """An argument or payload failed validation before being sent."""


class WebSocketError(PteroClientError):
    """Base error for console socket usage problems."""


class ShardNotConnectedError(WebSocketError):
    """The shard must be connected for this operation."""


class SocketUnavailableError(WebSocketError):
    """The shard has no open socket to write to."""


class DictError(PteroClientError):
    """Base error for container misuse."""


class CapacityExceededError(DictError):
    """A limited dict is full and cannot take a new key."""


class LimitAlreadySetError(DictError):
    """The limit of a dict can only be configured once."""


class ConfigLoadError(PteroClientError):
    """The configuration file could not be read or parsed."""
