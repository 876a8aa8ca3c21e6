"""Pending results and the fallback marker.

An update whose next value is still being computed is represented by a
Pending. Coroutines and asyncio futures are recognized and wrapped
automatically; anything else awaitable must be tagged explicitly with
Pending(...) so a plain value is never mistaken for async work.

FALLBACK is what listeners receive while a pending result is in flight.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Generic, TypeVar

T = TypeVar("T")


class _Fallback:
    __slots__ = ()

    _instance: _Fallback | None = None

    def __new__(cls) -> _Fallback:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "FALLBACK"

    def __reduce__(self) -> str:
        return "FALLBACK"


FALLBACK = _Fallback()


async def _await(awaitable: Awaitable[T]) -> T:
    return await awaitable


class Pending(Generic[T]):
    """An asynchronous result that has not been started on the loop yet."""

    __slots__ = ("_awaitable",)

    def __init__(self, awaitable: Awaitable[T]) -> None:
        if not inspect.isawaitable(awaitable):
            raise TypeError(f"Pending expects an awaitable, got {type(awaitable).__name__}")
        self._awaitable = awaitable

    def start(self) -> asyncio.Future[T]:
        """Schedule the result on the running loop.

        Raises RuntimeError when no loop is running; a coroutine is closed
        first so it is not reported as never awaited.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.discard()
            raise
        if asyncio.isfuture(self._awaitable):
            return self._awaitable
        if inspect.iscoroutine(self._awaitable):
            return loop.create_task(self._awaitable)
        return loop.create_task(_await(self._awaitable))

    def discard(self) -> None:
        """Drop a result that will never be started."""
        if inspect.iscoroutine(self._awaitable):
            self._awaitable.close()

    def __repr__(self) -> str:
        return f"Pending({self._awaitable!r})"


def as_pending(value: Any) -> Pending | None:
    """Return value as a Pending if it is one, else None."""
    if isinstance(value, Pending):
        return value
    if inspect.iscoroutine(value) or asyncio.isfuture(value):
        return Pending(value)
    return None
