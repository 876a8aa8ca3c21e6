"""Listener registry: the set of callbacks a slot broadcasts to."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class CallbackGroup(Generic[T]):
    """A mutable set of single-argument callbacks."""

    __slots__ = ("_callbacks",)

    def __init__(self) -> None:
        # dict keeps registration order for broadcasts
        self._callbacks: dict[Callable[[T], None], None] = {}

    def add(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register a callback. Returns a function that removes it."""
        self._callbacks[callback] = None
        active = True

        def _unsubscribe() -> None:
            nonlocal active
            if not active:
                return
            active = False
            self._callbacks.pop(callback, None)

        return _unsubscribe

    def call(self, value: T) -> None:
        """Invoke every registered callback with value."""
        # Snapshot: callbacks may unsubscribe during the broadcast.
        for callback in list(self._callbacks):
            callback(value)

    def __len__(self) -> int:
        return len(self._callbacks)

    def __repr__(self) -> str:
        return f"CallbackGroup({len(self._callbacks)} callbacks)"
