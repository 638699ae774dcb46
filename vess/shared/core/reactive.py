"""Replay-latest reactive values.

``StateFlow`` holds the latest value of a piece of state and pushes every new
value to its observers in the order it was emitted. New observers receive the
current value first, so the UI can render immediately from a cached value.

Usage:
    screen = StateFlow(Screen.MENU, name="current_screen")
    sub = screen.listen(lambda s: print("now on", s))
    screen.value = Screen.HISTORY
    sub.dispose()

    async with flow.subscribe() as stream:
        async for value in stream:
            ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, List, Optional, Set, TypeVar

T = TypeVar("T")
Listener = Callable[[T], None]

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by ``StateFlow.listen``."""

    def __init__(self, flow: "StateFlow", callback: Callable) -> None:
        self._flow = flow
        self._callback = callback
        self.active = True

    def dispose(self) -> None:
        if self.active:
            self._flow._remove_listener(self._callback)
            self.active = False


class ValueStream(Generic[T]):
    """Async iterator over a ``StateFlow``.

    Registered eagerly on creation; the first item is the value current at
    subscription time, followed by every later emit without skipping.
    """

    def __init__(self, flow: "StateFlow[T]") -> None:
        self._flow = flow
        self._queue: asyncio.Queue = asyncio.Queue()
        self._queue.put_nowait(flow.value)
        self.closed = False
        flow._streams.add(self)

    def _push(self, value: T) -> None:
        self._queue.put_nowait(value)

    def pending(self) -> int:
        """Number of values delivered but not yet consumed."""
        return self._queue.qsize()

    async def next(self) -> T:
        return await self._queue.get()

    def close(self) -> None:
        if not self.closed:
            self._flow._streams.discard(self)
            self.closed = True

    def __aiter__(self) -> "ValueStream[T]":
        return self

    async def __anext__(self) -> T:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        return await self._queue.get()

    async def __aenter__(self) -> "ValueStream[T]":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class StateFlow(Generic[T]):
    """Observable value with replay-latest semantics."""

    def __init__(self, initial: T, name: Optional[str] = None) -> None:
        self._value = initial
        self.name = name or "state"
        self._listeners: List[Listener] = []
        self._streams: Set[ValueStream[T]] = set()

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self.emit(new_value)

    def emit(self, new_value: T) -> None:
        """Store ``new_value`` and deliver it to every observer."""
        self._value = new_value
        for listener in list(self._listeners):
            self._safe_notify(listener, new_value)
        for stream in list(self._streams):
            stream._push(new_value)

    def listen(self, callback: Listener, replay: bool = True) -> Subscription:
        """Register a synchronous callback for every emitted value.

        Args:
            callback: Called with each new value
            replay: Call ``callback`` immediately with the current value

        Returns:
            Subscription whose ``dispose()`` stops delivery
        """
        self._listeners.append(callback)
        if replay:
            self._safe_notify(callback, self._value)
        return Subscription(self, callback)

    def subscribe(self) -> ValueStream[T]:
        """Open an async stream starting with the current value."""
        return ValueStream(self)

    def __aiter__(self) -> ValueStream[T]:
        return self.subscribe()

    @property
    def observer_count(self) -> int:
        return len(self._listeners) + len(self._streams)

    def _remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _safe_notify(self, listener: Listener, value: T) -> None:
        # One failing observer must not stop delivery to the rest
        listener_name = getattr(listener, "__name__", str(listener))
        try:
            listener(value)
        except Exception as exc:
            logger.exception(
                f"Listener '{listener_name}' failed on '{self.name}'",
                exc_info=exc,
            )
