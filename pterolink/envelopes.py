"""Tagged wire envelopes.

REST responses are classified once, here, into a single resource or a
collection; console socket frames become ``EventPayload``. Code past this
boundary branches on the envelope type instead of probing raw JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationError


@dataclass(frozen=True)
class PaginationMeta:
    """Pagination block of a collection response."""

    current: int
    total: int
    count: int
    per_page: int
    total_pages: int
    links: dict[str, Any] = field(default_factory=lambda: {})

    @classmethod
    def from_wire(cls, raw: Mapping[str, Any]) -> PaginationMeta:
        return cls(
            current=int(raw.get("current_page", raw.get("current", 1))),
            total=int(raw.get("total", 0)),
            count=int(raw.get("count", 0)),
            per_page=int(raw.get("per_page", 0)),
            total_pages=int(raw.get("total_pages", 1)),
            links=dict(raw.get("links") or {}),
        )


@dataclass(frozen=True)
class SingleEnvelope:
    """``{"attributes": {...}}``"""

    attributes: dict[str, Any]


@dataclass(frozen=True)
class CollectionEnvelope:
    """``{"data": [{"attributes": {...}}, ...], "meta": {...}}``

    ``items`` holds the ``attributes`` of each element in response order.
    """

    items: list[dict[str, Any]]
    pagination: PaginationMeta | None = None
    meta: dict[str, Any] = field(default_factory=lambda: {})


@dataclass(frozen=True)
class EventPayload:
    """A console socket frame: ``{"event": str, "args": [str, ...]}``."""

    event: str
    args: tuple[str, ...] = ()

    @classmethod
    def from_wire(cls, raw: Any) -> EventPayload:
        """Validate a decoded frame.

        Raises:
            ValueError: If the frame has no string ``event`` or ``args`` is
                not a list.
        """
        if not isinstance(raw, Mapping):
            raise ValueError("Frame is not a JSON object")
        event = raw.get("event")
        if not isinstance(event, str) or not event:
            raise ValueError("Frame has no event name")
        args = raw.get("args") or []
        if not isinstance(args, list):
            raise ValueError("Frame args must be a list")
        return cls(event=event, args=tuple(str(a) for a in args))

    def to_wire(self) -> dict[str, Any]:
        return {"event": self.event, "args": list(self.args)}


Envelope = SingleEnvelope | CollectionEnvelope


def parse_envelope(raw: Any) -> Envelope:
    """Classify a decoded REST response.

    A bare object without ``attributes`` (some panel endpoints answer that
    way) is treated as the attributes themselves.

    Raises:
        ValidationError: If ``raw`` is not a JSON object or a collection
            element lacks ``attributes``.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Expected a JSON object, got {type(raw).__name__}")

    if isinstance(raw.get("data"), list):
        items: list[dict[str, Any]] = []
        for element in raw["data"]:
            if not isinstance(element, Mapping) or not isinstance(
                element.get("attributes"), Mapping
            ):
                raise ValidationError("Collection element has no attributes")
            items.append(dict(element["attributes"]))
        meta = dict(raw.get("meta") or {})
        pagination = None
        if isinstance(meta.get("pagination"), Mapping):
            pagination = PaginationMeta.from_wire(meta["pagination"])
        return CollectionEnvelope(items=items, pagination=pagination, meta=meta)

    if isinstance(raw.get("attributes"), Mapping):
        return SingleEnvelope(attributes=dict(raw["attributes"]))

    return SingleEnvelope(attributes=dict(raw))
