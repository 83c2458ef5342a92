"""Typed publish/subscribe channel composed into shards.

Event names are the values of an ``Enum``; subscribing to or emitting a name
outside it raises ``ValueError``. Handlers may be plain callables or
coroutine functions. Plain handlers run inline during ``emit``; coroutines
are scheduled on the running loop. A failing handler is logged and never
reaches the emitter.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

_LOGGER = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
Handler = Callable[..., Awaitable[None] | None]


class EventChannel(Generic[E]):
    """Listener registry for one emitter."""

    def __init__(self, events: type[E], *, name: str = "") -> None:
        self._events = events
        self._name = name or events.__name__
        self._handlers: dict[E, list[tuple[Handler, bool]]] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    def _resolve(self, event: E | str) -> E:
        return self._events(event.value if isinstance(event, Enum) else event)

    def on(self, event: E | str, handler: Handler | None = None) -> Any:
        """Register ``handler`` for ``event``; usable as a decorator."""
        key = self._resolve(event)
        if handler is None:

            def decorator(fn: Handler) -> Handler:
                self._add(key, fn, once=False)
                return fn

            return decorator
        self._add(key, handler, once=False)
        return handler

    def once(self, event: E | str, handler: Handler) -> Handler:
        """Register ``handler`` for the next ``event`` only."""
        self._add(self._resolve(event), handler, once=True)
        return handler

    def off(self, event: E | str, handler: Handler) -> bool:
        """Remove ``handler``; returns whether it was registered."""
        bucket = self._handlers.get(self._resolve(event), [])
        for entry in bucket:
            if entry[0] == handler:
                bucket.remove(entry)
                return True
        return False

    def listener_count(self, event: E | str) -> int:
        return len(self._handlers.get(self._resolve(event), []))

    def _add(self, event: E, handler: Handler, *, once: bool) -> None:
        if not callable(handler):
            raise TypeError("Event handler must be callable")
        self._handlers.setdefault(event, []).append((handler, once))

    def emit(self, event: E | str, *args: Any) -> bool:
        """Call every listener of ``event``; returns whether any existed."""
        key = self._resolve(event)
        bucket = self._handlers.get(key)
        if not bucket:
            return False

        for entry in list(bucket):
            handler, once = entry
            if once and entry in bucket:
                bucket.remove(entry)
            try:
                result = handler(*args)
            except Exception:
                _LOGGER.exception("[%s] Unhandled error in %s handler", self._name, key.value)
                continue
            if inspect.isawaitable(result):
                self._schedule(key, result)
        return True

    def wait_for(self, event: E | str) -> asyncio.Future[Any]:
        """Return a future resolved by the next ``event``.

        The result is ``None`` for events without arguments, the argument for
        single-argument events and a tuple otherwise. Must be called with a
        running loop.
        """
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        def _resolve_future(*args: Any) -> None:
            if future.done():
                return
            if not args:
                future.set_result(None)
            elif len(args) == 1:
                future.set_result(args[0])
            else:
                future.set_result(args)

        self.once(event, _resolve_future)
        return future

    def _schedule(self, event: E, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def _done(t: asyncio.Task[Any]) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                _LOGGER.error(
                    "[%s] Unhandled error in %s handler: %s",
                    self._name,
                    event.value,
                    t.exception(),
                )

        task.add_done_callback(_done)
