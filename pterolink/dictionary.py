"""Insertion-ordered dict with query and set helpers used by every cache.

Manager caches, per-server caches and the shard registry are all ``Dict``
instances. Each one has a single owner that mutates it; everyone else reads.

The capacity limit is a one-shot setting: ``set_limit`` can be called once
per instance and the limit never changes afterwards. It is a safety rail for
caches, not a throttle.
"""

from __future__ import annotations

import random as _random
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar, overload

from .errors import CapacityExceededError, LimitAlreadySetError

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


class Dict(dict[K, V], Generic[K, V]):
    """A ``dict`` with a write-once size limit and collection helpers.

    Callbacks receive ``(value, key)``; the fold in ``reduce`` receives
    ``(acc, value, key)``.
    """

    def __init__(
        self, entries: Mapping[K, V] | Iterable[tuple[K, V]] | None = None
    ) -> None:
        super().__init__(entries or ())
        self._limit = 0
        self._limit_set = False

    def __repr__(self) -> str:
        return f"Dict({dict.__repr__(self)})"

    # ------------------------------------------------------------------
    # Limit
    # ------------------------------------------------------------------

    @property
    def limit(self) -> int:
        """Maximum number of entries, 0 when unlimited."""
        return self._limit

    @property
    def size(self) -> int:
        return len(self)

    def set_limit(self, amount: int) -> None:
        """Set the maximum number of entries.

        Raises:
            LimitAlreadySetError: If a limit was configured before, whatever
                its value.
        """
        if self._limit_set:
            raise LimitAlreadySetError("Cannot override a set limit.")
        self._limit_set = True
        self._limit = max(amount, 0)

    def is_limited(self) -> bool:
        """Return True when the dict has a limit and is full."""
        return bool(self._limit) and len(self) >= self._limit

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def __setitem__(self, key: K, value: V) -> None:
        if key not in self and self.is_limited():
            raise CapacityExceededError(f"Dict has reached its limit ({self._limit})")
        super().__setitem__(key, value)

    def set(self, key: K, value: V) -> Dict[K, V]:
        self[key] = value
        return self

    def update(self, *args: Any, **kwargs: V) -> None:  # type: ignore[override]
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def setdefault(self, key: K, default: V = None) -> V:  # type: ignore[assignment]
        if key not in self:
            self[key] = default
        return self[key]

    def has(self, key: K) -> bool:
        return key in self

    def delete(self, key: K) -> bool:
        """Remove ``key``; returns whether it was present."""
        if key not in self:
            return False
        del self[key]
        return True

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def some(self, fn: Callable[[V, K], bool]) -> bool:
        return any(fn(v, k) for k, v in self.items())

    def every(self, fn: Callable[[V, K], bool]) -> bool:
        return all(fn(v, k) for k, v in self.items())

    def has_any(self, *keys: K) -> bool:
        return any(k in self for k in keys)

    def has_all(self, *keys: K) -> bool:
        return all(k in self for k in keys)

    # ------------------------------------------------------------------
    # Positional access
    # ------------------------------------------------------------------

    @overload
    def first(self) -> V | None: ...
    @overload
    def first(self, amount: int) -> list[V]: ...
    def first(self, amount: int | None = None) -> V | list[V] | None:
        """Return the first value, or the first ``amount`` values as a list."""
        return _head(list(self.values()), amount)

    def first_key(self, amount: int | None = None) -> K | list[K] | None:
        return _head(list(self.keys()), amount)

    @overload
    def last(self) -> V | None: ...
    @overload
    def last(self, amount: int) -> list[V]: ...
    def last(self, amount: int | None = None) -> V | list[V] | None:
        """Return the last value, or the last ``amount`` values in order."""
        return _tail(list(self.values()), amount)

    def last_key(self, amount: int | None = None) -> K | list[K] | None:
        return _tail(list(self.keys()), amount)

    @overload
    def random(self) -> V | None: ...
    @overload
    def random(self, amount: int) -> list[V]: ...
    def random(self, amount: int | None = None) -> V | list[V] | None:
        """Return a random value, or up to ``amount`` distinct random values."""
        return _sample(list(self.values()), amount)

    def random_key(self, amount: int | None = None) -> K | list[K] | None:
        return _sample(list(self.keys()), amount)

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def map(self, fn: Callable[[V, K], T]) -> list[T]:
        return [fn(v, k) for k, v in self.items()]

    def filter(self, fn: Callable[[V, K], bool]) -> Dict[K, V]:
        return Dict((k, v) for k, v in self.items() if fn(v, k))

    def find(self, fn: Callable[[V, K], bool]) -> V | None:
        for k, v in self.items():
            if fn(v, k):
                return v
        return None

    def sweep(self, fn: Callable[[V, K], bool]) -> int:
        """Delete every entry passing ``fn`` in place; returns the count."""
        doomed = [k for k, v in self.items() if fn(v, k)]
        for k in doomed:
            del self[k]
        return len(doomed)

    def part(self, fn: Callable[[V, K], bool]) -> tuple[Dict[K, V], Dict[K, V]]:
        """Split into ``(passed, failed)`` without touching this dict."""
        passed: Dict[K, V] = Dict()
        failed: Dict[K, V] = Dict()
        for k, v in self.items():
            if fn(v, k):
                passed[k] = v
            else:
                failed[k] = v
        return passed, failed

    def reduce(self, fn: Callable[[T, V, K], T], seed: T) -> T:
        acc = seed
        for k, v in self.items():
            acc = fn(acc, v, k)
        return acc

    def join(self, *others: Mapping[K, V]) -> Dict[K, V]:
        """Return the union of this dict and ``others``; later keys win."""
        res = self.clone()
        for other in others:
            for k, v in other.items():
                res[k] = v
        return res

    def difference(self, other: Mapping[K, V]) -> Dict[K, V]:
        """Return entries whose key is in exactly one of the two dicts."""
        res: Dict[K, V] = Dict((k, v) for k, v in self.items() if k not in other)
        for k, v in other.items():
            if k not in self:
                res[k] = v
        return res

    def clone(self) -> Dict[K, V]:
        """Shallow copy in the same order, without the limit."""
        return Dict(self.items())

    copy = clone


def _head(items: list[T], amount: int | None) -> T | list[T] | None:
    if amount is None:
        return items[0] if items else None
    return items[: max(amount, 0)]


def _tail(items: list[T], amount: int | None) -> T | list[T] | None:
    if amount is None:
        return items[-1] if items else None
    if amount <= 0:
        return []
    return items[-amount:]


def _sample(items: list[T], amount: int | None) -> T | list[T] | None:
    if amount is None:
        return _random.choice(items) if items else None
    return _random.sample(items, min(max(amount, 0), len(items)))
