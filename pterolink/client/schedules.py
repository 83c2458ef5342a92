"""Schedules of client servers, cached per server."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..caseconv import parse_date, to_camel_case, to_snake_case
from ..config import OptionSpec
from ..dictionary import Dict
from ..envelopes import CollectionEnvelope, parse_envelope
from ..errors import CapacityExceededError
from ..managers import BaseManager, Resource
from ..transport.http import RequestManager
from . import endpoints

_LOGGER = logging.getLogger(__name__)

_DATES = ("created_at", "updated_at", "last_run_at", "next_run_at")

_TASK_RENAMES = {"time_offset": "offset", "is_queued": "queued"}
_TASK_CASTS = {"created_at": parse_date, "updated_at": parse_date}

_UPDATABLE = (
    "name",
    "minute",
    "hour",
    "day_of_week",
    "month",
    "day_of_month",
    "is_active",
    "only_when_online",
)


class ScheduleManager(BaseManager[str]):
    """Schedules grouped by server identifier, then by schedule id.

    ``cache`` maps each server to its own ``Dict`` of schedules. A configured
    ``max`` caps every per-server ``Dict``, not the number of servers.
    """

    RENAMES = {"is_active": "active", "is_processing": "processing"}
    CASTS = {key: parse_date for key in _DATES}

    def __init__(self, requests: RequestManager, options: OptionSpec | None = None) -> None:
        super().__init__(requests, options)
        self.cache: Dict[str, Dict[int, Resource]] = Dict()

    def _normalize(self, attributes: Mapping[str, Any]) -> Resource:
        attributes = dict(attributes)
        relationships = attributes.pop("relationships", None) or {}
        item = super()._normalize(attributes)
        tasks = (relationships.get("tasks") or {}).get("data") or []
        item["tasks"] = [
            to_camel_case(t.get("attributes", {}), map=_TASK_RENAMES, cast=_TASK_CASTS)
            for t in tasks
        ]
        return item

    def _server_cache(self, server_id: str) -> Dict[int, Resource]:
        cache = self.cache.get(server_id)
        if cache is None:
            cache = Dict()
            if self.options.max:
                cache.set_limit(self.options.max)
            self.cache[server_id] = cache
        return cache

    def _patch_server(self, server_id: str, raw: Any) -> Any:
        envelope = parse_envelope(raw)
        if isinstance(envelope, CollectionEnvelope):
            self.meta = envelope.pagination
            res: Dict[int, Resource] = Dict()
            for attributes in envelope.items:
                item = self._normalize(attributes)
                res[item["id"]] = item
            for key, item in res.items():
                if not self._store(server_id, key, item):
                    break
            return res

        item = self._normalize(envelope.attributes)
        self._store(server_id, item["id"], item)
        return item

    def _store(self, server_id: str, key: int, item: Resource) -> bool:
        if not self.options.cache:
            return False
        try:
            self._server_cache(server_id)[key] = item
        except CapacityExceededError:
            _LOGGER.debug("[%s] Schedule cache for %s is full", type(self).__name__, server_id)
            return False
        return True

    async def fetch(  # type: ignore[override]
        self,
        server_id: str,
        id: int | None = None,  # noqa: A002
        *,
        force: bool = False,
    ) -> Any:
        """Fetch one schedule (cache first unless ``force``) or all of a server's."""
        if id is not None and not force:
            cached = self.cache.get(server_id, {}).get(id)
            if cached is not None:
                return cached

        data = await self.requests.get(
            endpoints.schedule(server_id, id)
            if id is not None
            else endpoints.schedules(server_id)
        )
        return self._patch_server(server_id, data)

    async def fetch_all(self, server_id: str) -> Dict[int, Resource]:  # type: ignore[override]
        """Schedules are not paginated; this is a forced list fetch."""
        return await self.fetch(server_id, force=True)

    async def create(
        self,
        server_id: str,
        *,
        name: str,
        minute: str,
        hour: str,
        day_of_week: str,
        month: str = "*",
        day_of_month: str = "*",
        is_active: bool = True,
        only_when_online: bool = False,
    ) -> Resource:
        body = {
            "name": name,
            "minute": minute,
            "hour": hour,
            "day_of_week": day_of_week,
            "month": month,
            "day_of_month": day_of_month,
            "is_active": is_active,
            "only_when_online": only_when_online,
        }
        data = await self.requests.post(endpoints.schedules(server_id), body)
        return self._patch_server(server_id, data)

    async def update(self, server_id: str, id: int, **options: Any) -> Resource:  # noqa: A002
        """Update a schedule.

        The panel expects the full schedule, so unspecified fields are taken
        from the current one. Options may be given in snake_case or camelCase.
        """
        current = await self.fetch(server_id, id)
        cron = current.get("cron") or {}
        body = {
            "name": current.get("name"),
            "minute": cron.get("minute"),
            "hour": cron.get("hour"),
            "day_of_week": cron.get("dayOfWeek"),
            "month": cron.get("month"),
            "day_of_month": cron.get("dayOfMonth"),
            "is_active": current.get("active"),
            "only_when_online": current.get("onlyWhenOnline"),
        }
        for key, value in to_snake_case(options).items():
            if key in _UPDATABLE:
                body[key] = value

        data = await self.requests.post(endpoints.schedule(server_id, id), body)
        return self._patch_server(server_id, data)

    async def delete(self, server_id: str, id: int) -> None:  # noqa: A002
        await self.requests.delete(endpoints.schedule(server_id, id))
        cache = self.cache.get(server_id)
        if cache is not None:
            cache.delete(id)
