"""Key case conversion between the panel's wire JSON and internal objects.

The panel speaks snake_case; resources handed to callers use camelCase keys.
Both directions take the same options:

- ``ignore``: top-level keys to drop.
- ``map``: top-level key renames, applied before case conversion.
- ``cast``: per-key coercion, looked up by the (renamed) key. A failing
  coercion stores ``str(value)`` instead of raising.

Nested objects and lists are converted with default options.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from datetime import UTC, datetime
from typing import Any

Caster = Callable[[Any], Any]


def snake_to_camel(key: str) -> str:
    """Convert ``cpu_absolute`` to ``cpuAbsolute``."""
    out: list[str] = []
    upper_next = False
    for char in key:
        if upper_next:
            out.append(char.upper())
            upper_next = False
        elif char == "_":
            upper_next = True
        else:
            out.append(char)
    return "".join(out)


def camel_to_snake(key: str) -> str:
    """Convert ``cpuAbsolute`` to ``cpu_absolute``."""
    out: list[str] = []
    for char in key:
        if char.isupper():
            out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out)


def to_camel_case(
    raw: Any,
    *,
    ignore: Collection[str] | None = None,
    map: Mapping[str, str] | None = None,  # noqa: A002
    cast: Mapping[str, Caster] | None = None,
) -> Any:
    """Recursively convert wire (snake_case) keys to internal camelCase keys."""
    return _convert(raw, snake_to_camel, ignore, map, cast)


def to_snake_case(
    internal: Any,
    *,
    ignore: Collection[str] | None = None,
    map: Mapping[str, str] | None = None,  # noqa: A002
    cast: Mapping[str, Caster] | None = None,
) -> Any:
    """Recursively convert internal camelCase keys to wire snake_case keys."""
    return _convert(internal, camel_to_snake, ignore, map, cast)


def _convert(
    obj: Any,
    convert_key: Callable[[str], str],
    ignore: Collection[str] | None,
    renames: Mapping[str, str] | None,
    cast: Mapping[str, Caster] | None,
) -> Any:
    if isinstance(obj, list):
        return [_convert(i, convert_key, None, None, None) for i in obj]
    if not isinstance(obj, Mapping):
        return obj

    parsed: dict[str, Any] = {}
    for key, value in obj.items():
        if ignore and key in ignore:
            continue
        if renames and key in renames:
            key = renames[key]
        if cast and key in cast:
            try:
                value = cast[key](value)
            except Exception:
                value = str(value)
        if isinstance(value, (list, Mapping)):
            value = _convert(value, convert_key, None, None, None)
        parsed[convert_key(key)] = value
    return parsed


def parse_date(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the panel; ``None`` passes through.

    Naive timestamps are assumed to be UTC.
    """
    if value is None or isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
