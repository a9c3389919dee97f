"""Synchronous event emitter with ordered, once-able listeners."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

__all__ = ["EventEmitter", "Listener"]

logger = logging.getLogger("crystal.events")

Listener = Callable[..., Any]


@dataclass(frozen=True, eq=False)
class _Subscription:
    listener: Listener
    once: bool = False


class EventEmitter:
    """
    Publish/subscribe primitive with deterministic delivery.

    Listeners run synchronously in registration order (prepended listeners
    first). A listener that raises is logged and does not stop delivery to
    the remaining listeners. A listener that returns an awaitable has it
    scheduled on the event loop.
    """

    def __init__(self, *, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._listeners: Dict[str, List[_Subscription]] = {}
        self._listener_loop = loop
        self._pending: Set["asyncio.Future[Any]"] = set()

    # -- registration -------------------------------------------------------

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        return self._add(event, listener, once=False, prepend=False)

    def add_listener(self, event: str, listener: Listener) -> "EventEmitter":
        return self.on(event, listener)

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        return self._add(event, listener, once=True, prepend=False)

    def prepend_listener(self, event: str, listener: Listener) -> "EventEmitter":
        return self._add(event, listener, once=False, prepend=True)

    def prepend_once_listener(self, event: str, listener: Listener) -> "EventEmitter":
        return self._add(event, listener, once=True, prepend=True)

    def _add(self, event: str, listener: Listener, *, once: bool, prepend: bool) -> "EventEmitter":
        if not callable(listener):
            raise TypeError(f"listener for {event!r} must be callable, got {type(listener).__name__}")
        subscriptions = self._listeners.setdefault(event, [])
        subscription = _Subscription(listener=listener, once=once)
        if prepend:
            subscriptions.insert(0, subscription)
        else:
            subscriptions.append(subscription)
        return self

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        """Remove the most recently added registration of ``listener``."""
        subscriptions = self._listeners.get(event)
        if not subscriptions:
            return self
        for index in range(len(subscriptions) - 1, -1, -1):
            if subscriptions[index].listener == listener:
                del subscriptions[index]
                break
        if not subscriptions:
            del self._listeners[event]
        return self

    def remove_listener(self, event: str, listener: Listener) -> "EventEmitter":
        return self.off(event, listener)

    def remove_all_listeners(self, event: Optional[str] = None) -> "EventEmitter":
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self

    # -- introspection ------------------------------------------------------

    def listeners(self, event: str) -> List[Listener]:
        return [subscription.listener for subscription in self._listeners.get(event, ())]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def event_names(self) -> Tuple[str, ...]:
        return tuple(self._listeners)

    # -- delivery -----------------------------------------------------------

    def emit(self, event: str, *args: Any) -> bool:
        """Deliver ``args`` to every listener of ``event``. Returns False if there were none."""
        subscriptions = list(self._listeners.get(event, ()))
        if not subscriptions:
            return False
        for subscription in subscriptions:
            if subscription.once:
                self._discard(event, subscription)
            self._invoke(event, subscription.listener, args)
        return True

    def _discard(self, event: str, subscription: _Subscription) -> None:
        subscriptions = self._listeners.get(event)
        if subscriptions and subscription in subscriptions:
            subscriptions.remove(subscription)
            if not subscriptions:
                del self._listeners[event]

    def _invoke(self, event: str, listener: Listener, args: Tuple[Any, ...]) -> None:
        try:
            result = listener(*args)
        except Exception:
            logger.exception(f"Listener for '{event}' raised")
            return
        if inspect.isawaitable(result):
            self._schedule(event, result)

    def _schedule(self, event: str, awaitable: Any) -> None:
        loop = self._listener_loop or asyncio.get_running_loop()
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(task)

        def _done(fut: "asyncio.Future[Any]") -> None:
            self._pending.discard(fut)
            if not fut.cancelled() and fut.exception() is not None:
                logger.error(f"Async listener for '{event}' failed: {fut.exception()!r}")

        task.add_done_callback(_done)
