"""Slots: a value with an owner, an update handle, and any number of observers.

The owner creates a slot and hands out its render projection and its update
function. Observers subscribe and are called with the new value whenever it
changes, or with FALLBACK while an asynchronous update is in flight.

Change detection is by identity: update(value) with the object already held
is a no-op. Replace structured values instead of mutating them in place.

Slots are single-threaded. Asynchronous updates need a running asyncio loop;
see reslot.policy for how overlapping ones are resolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, TypeVar, Union

from reslot._listeners import CallbackGroup, Unsubscribe
from reslot.options import SlotOptions
from reslot.pending import Pending, as_pending
from reslot.policy import policy_for
from reslot.render import SlotView, make_view

T = TypeVar("T")

logger = logging.getLogger("reslot.slot")


@dataclass(frozen=True)
class UpdateContext(Generic[T]):
    """Passed to updater functions alongside the previous value.

    An async updater's `prev` may be outdated by the time it resumes;
    get_value() always returns the slot's value at the moment of the call.
    """

    get_value: Callable[[], T]
    shared: dict[str, Any]
    extra: Any


Updater = Callable[[T, UpdateContext[T]], Any]
UpdateParam = Union[T, Pending[T], Updater]


class Slot(Generic[T]):
    """A value cell with identity change detection and async update policies."""

    __slots__ = ("_value", "_shared", "_token", "_pending", "_listeners", "_options")

    def __init__(self, initial_value: T, options: SlotOptions | None = None) -> None:
        self._value = initial_value
        self._shared: dict[str, Any] = {}
        self._token = object()
        self._pending = None
        self._listeners: CallbackGroup[Any] = CallbackGroup()
        self._options = options if options is not None else SlotOptions()

    @property
    def options(self) -> SlotOptions:
        return self._options

    def get_value(self) -> T:
        return self._value

    def subscribe(self, listener: Callable[[Any], None]) -> Unsubscribe:
        """Register listener for new values and FALLBACK. Returns an unsubscribe function."""
        return self._listeners.add(listener)

    def update(self, param: UpdateParam) -> None:
        """Set a value, await a pending one, or compute one from the current value.

        Usage:
            slot.update(5)
            slot.update(lambda prev, ctx: prev + 1)
            slot.update(fetch_count())          # coroutine: FALLBACK, then the result

            async def reload(prev, ctx):
                ctx.shared["reloads"] = ctx.shared.get("reloads", 0) + 1
                return await fetch_count()

            slot.update(reload)

        Errors raised by a synchronous updater propagate to the caller.
        """
        next_value = param
        if callable(param):
            context = UpdateContext(self.get_value, self._shared, self._options.extra)
            next_value = param(self._value, context)

        pending = as_pending(next_value)
        if pending is not None:
            policy_for(self._options.async_mode).dispatch(self, pending)
            return

        self._commit(next_value)

    def _commit(self, value: T) -> None:
        if value is self._value:
            return
        self._token = object()
        self._value = value
        self._listeners.call(value)

    def change_options(self, **changes: Any) -> None:
        """Patch the live options. Also affects updates still in flight."""
        self._options.patch(**changes)
        logger.debug("Options changed on %r: %s", self, ", ".join(sorted(changes)))

    def render(self, *args: Any) -> SlotView[T]:
        """Project this slot for a view adapter.

        Usage:
            slot.render()                       # value as-is
            slot.render(lambda v: f"{v} items", "loading...")
            slot.render("loading...")
        """
        return make_view(self.get_value, self.subscribe, *args)

    def __iter__(self) -> Iterator[Callable[..., Any]]:
        # render, update = create_slot(0)
        return iter((self.render, self.update))

    def __repr__(self) -> str:
        return f"Slot({self._value!r}, {self._options.async_mode.value})"


def create_slot(initial_value: T, options: SlotOptions | None = None, **kwargs: Any) -> Slot[T]:
    """Create a slot holding initial_value.

    Options may be given as a SlotOptions (used by reference, so later
    patches through change_options are visible to whoever passed it) or as
    keyword arguments.

    Usage:
        count = create_slot(0)
        count.subscribe(print)
        count.update(lambda prev, ctx: prev + 1)   # prints 1

        search = create_slot([], async_mode="droppable", on_async_error=log_error)
    """
    if options is None:
        options = SlotOptions(**kwargs)
    elif kwargs:
        options.patch(**kwargs)
    return Slot(initial_value, options)
