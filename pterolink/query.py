"""Translate fetch options into panel query parameters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import ValidationError

MAX_PER_PAGE = 100


@dataclass(frozen=True)
class AllowedQueryOptions:
    """Filter, include and sort arguments a manager accepts."""

    filters: tuple[str, ...] = ()
    includes: tuple[str, ...] = ()
    sorts: tuple[str, ...] = ()


def build_query(
    *,
    page: int | None = None,
    per_page: int | None = None,
    filter: tuple[str, str] | None = None,  # noqa: A002
    include: Sequence[str] | None = None,
    sort: str | None = None,
    allowed: AllowedQueryOptions | None = None,
) -> dict[str, str]:
    """Build the ``params`` mapping for a list request.

    Args:
        page: Page number to fetch
        per_page: Results per page, capped at 100
        filter: ``(field, value)`` pair, sent as ``filter[field]=value``
        include: Relationships to include
        sort: Sort argument
        allowed: Arguments accepted by the calling manager

    Raises:
        ValidationError: If a filter, include or sort argument is not allowed.
    """
    allowed = allowed or AllowedQueryOptions()
    params: dict[str, str] = {}

    if page:
        params["page"] = str(page)

    if per_page is not None and per_page > 0:
        params["per_page"] = str(min(per_page, MAX_PER_PAGE))

    if filter:
        field, value = filter
        if field not in allowed.filters:
            raise ValidationError(f"Invalid filter argument '{field}'.")
        params[f"filter[{field}]"] = value

    if include:
        for arg in include:
            if arg not in allowed.includes:
                raise ValidationError(f"Invalid include argument '{arg}'.")
        params["include"] = ",".join(include)

    if sort:
        if sort not in allowed.sorts:
            raise ValidationError(f"Invalid sort argument '{sort}'.")
        params["sort"] = sort

    return params
