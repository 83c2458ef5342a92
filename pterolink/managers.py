"""Shared cache-merge contract for resource managers.

Every manager folds REST responses into its ``Dict`` cache through
``_patch``:

- a collection is normalized element by element into a new ``Dict`` which is
  merged into the cache with ``join``; pagination lands in ``meta``
- a single resource is normalized and ``set``

Fetching never removes cache entries; only explicit deletes do.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from .caseconv import Caster, to_camel_case
from .config import OptionSpec
from .dictionary import Dict
from .envelopes import CollectionEnvelope, PaginationMeta, parse_envelope
from .errors import CapacityExceededError
from .query import AllowedQueryOptions, build_query
from .transport.http import RequestManager

_LOGGER = logging.getLogger(__name__)

K = TypeVar("K")

Resource = dict[str, Any]


class BaseManager(ABC, Generic[K]):
    """Base class for managers caching camelCase resource dicts by ``KEY``."""

    FILTERS: ClassVar[tuple[str, ...]] = ()
    INCLUDES: ClassVar[tuple[str, ...]] = ()
    SORTS: ClassVar[tuple[str, ...]] = ()

    KEY: ClassVar[str] = "id"
    RENAMES: ClassVar[Mapping[str, str]] = {}
    CASTS: ClassVar[Mapping[str, Caster]] = {}

    def __init__(self, requests: RequestManager, options: OptionSpec | None = None) -> None:
        self.requests = requests
        self.options = options or OptionSpec()
        self.cache: Dict[K, Resource] = Dict()
        if self.options.max:
            self.cache.set_limit(self.options.max)
        self.meta: PaginationMeta | None = None

    def get_query_options(self) -> AllowedQueryOptions:
        return AllowedQueryOptions(
            filters=self.FILTERS, includes=self.INCLUDES, sorts=self.SORTS
        )

    def _query(self, **options: Any) -> dict[str, str]:
        return build_query(allowed=self.get_query_options(), **options)

    def _normalize(self, attributes: Mapping[str, Any]) -> Resource:
        """Turn wire attributes into the cached resource."""
        return to_camel_case(attributes, map=self.RENAMES, cast=self.CASTS)

    def _key(self, item: Resource) -> K:
        return item[self.KEY]

    def _patch(self, raw: Any) -> Any:
        """Normalize and cache a response; returns a ``Dict`` or one resource."""
        envelope = parse_envelope(raw)
        if isinstance(envelope, CollectionEnvelope):
            self.meta = envelope.pagination
            res: Dict[K, Resource] = Dict()
            for attributes in envelope.items:
                item = self._normalize(attributes)
                res[self._key(item)] = item
            self._cache_many(res)
            return res

        item = self._normalize(envelope.attributes)
        self._cache_one(self._key(item), item)
        return item

    def _cache_many(self, res: Dict[K, Resource]) -> None:
        if not self.options.cache:
            return
        if not self.cache.limit:
            self.cache = self.cache.join(res)
            return
        for key, item in res.items():
            if not self._cache_one(key, item):
                break

    def _cache_one(self, key: K, item: Resource) -> bool:
        if not self.options.cache:
            return False
        try:
            self.cache[key] = item
        except CapacityExceededError:
            _LOGGER.debug(
                "[%s] Cache full (%d), not caching %s",
                type(self).__name__,
                self.cache.limit,
                key,
            )
            return False
        return True

    @abstractmethod
    async def fetch(self, id: Any = None, **options: Any) -> Any:  # noqa: A002
        """Fetch one resource by id, or a page of resources."""

    async def fetch_all(self, **options: Any) -> Dict[K, Resource]:
        """Fetch every page and fold them into one ``Dict``."""
        options["page"] = 1
        data: Dict[K, Resource] = await self.fetch(**options)
        page = 2
        while self.meta is not None and page <= self.meta.total_pages:
            options["page"] = page
            data = data.join(await self.fetch(**options))
            page += 1
        return data
