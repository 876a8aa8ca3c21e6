"""Owned slots: a slot whose lifetime follows an owning component.

A component that re-renders calls sync() on every pass with its current
inputs. The owned slot keeps the same underlying Slot across passes,
re-applies the options, and re-raises any async failure that had no
handler, so it surfaces in the owner's render like any other error.

With auto_invalidate, a new initial value from the owner (by identity)
is pushed into the slot even if the slot has since moved on.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterator, TypeVar

from reslot._listeners import Unsubscribe
from reslot.slot import Slot, create_slot

T = TypeVar("T")

logger = logging.getLogger("reslot.owned")


class OwnedSlot(Generic[T]):
    """Binds a Slot to an owner's render passes and teardown."""

    def __init__(
        self,
        initial_value: T,
        *,
        auto_invalidate: bool = False,
        request_render: Callable[[], None] | None = None,
        on_async_error: Callable[[BaseException], None] | None = None,
        **options: Any,
    ) -> None:
        self._initial = initial_value
        self._auto_invalidate = auto_invalidate
        self._request_render = request_render
        self._handler = on_async_error
        self._error: BaseException | None = None
        self._disposers: list[Unsubscribe] = []
        self._slot: Slot[T] = create_slot(initial_value, on_async_error=self._capture, **options)

    @property
    def slot(self) -> Slot[T]:
        return self._slot

    def sync(
        self,
        initial_value: T,
        *,
        auto_invalidate: bool | None = None,
        on_async_error: Callable[[BaseException], None] | None = None,
        **options: Any,
    ) -> Slot[T]:
        """Call once per owner render pass. Returns the same slot every time.

        Raises the last unhandled async failure, once.
        """
        if auto_invalidate is not None:
            self._auto_invalidate = auto_invalidate
        self._handler = on_async_error
        if options:
            self._slot.change_options(**options)

        if self._error is not None:
            error, self._error = self._error, None
            raise error

        if self._auto_invalidate and initial_value is not self._initial:
            self._slot.update(initial_value)
        self._initial = initial_value
        return self._slot

    def subscribe(self, listener: Callable[[Any], None]) -> Unsubscribe:
        """Subscribe on the owner's behalf; released by dispose()."""
        unsubscribe = self._slot.subscribe(listener)

        def _release() -> None:
            unsubscribe()
            if _release in self._disposers:
                self._disposers.remove(_release)

        self._disposers.append(_release)
        return _release

    def dispose(self) -> None:
        for release in list(self._disposers):
            release()
        self._disposers.clear()

    def _capture(self, error: BaseException) -> None:
        if self._handler is not None:
            self._handler(error)
            return
        logger.debug("Holding async failure for the next render pass: %r", error)
        self._error = error
        if self._request_render is not None:
            self._request_render()

    def __iter__(self) -> Iterator[Callable[..., Any]]:
        return iter(self._slot)

    def __repr__(self) -> str:
        return f"OwnedSlot({self._slot!r})"


def use_slot(initial_value: T, **options: Any) -> OwnedSlot[T]:
    """Create an OwnedSlot.

    Usage:
        class Counter:
            def __init__(self, start):
                self.count = use_slot(start, auto_invalidate=True, request_render=self.refresh)

            def render(self, start):
                slot = self.count.sync(start)
                return f"count: {slot.get_value()}"

            def unmount(self):
                self.count.dispose()
    """
    return OwnedSlot(initial_value, **options)
