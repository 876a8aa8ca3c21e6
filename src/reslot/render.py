"""Render projection: the observer descriptor handed to a view adapter.

A SlotView pairs a slot's get_value/subscribe with how to draw it. It holds
no state of its own; the adapter subscribes, and on each notification asks
present() what to show.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from reslot._listeners import Unsubscribe
from reslot.pending import FALLBACK

T = TypeVar("T")


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class SlotView(Generic[T]):
    get_value: Callable[[], T]
    subscribe: Callable[[Callable[[Any], None]], Unsubscribe]
    render: Callable[[T], Any] = _identity
    fallback: Any = None

    def present(self, notification: Any) -> Any:
        """What to show after receiving notification from the slot."""
        if notification is FALLBACK and self.fallback is not None:
            return self.fallback
        return self.render(self.get_value())


def make_view(
    get_value: Callable[[], T],
    subscribe: Callable[[Callable[[Any], None]], Unsubscribe],
    *args: Any,
) -> SlotView[T]:
    """Build a SlotView from one of three call shapes.

    Usage:
        make_view(get, sub)                 # show the value as-is
        make_view(get, sub, fmt, "...")     # fmt(value), "..." while pending
        make_view(get, sub, "...")          # value as-is, "..." while pending
    """
    if len(args) > 2:
        raise TypeError(f"render() takes at most 2 arguments ({len(args)} given)")
    if not args:
        return SlotView(get_value, subscribe)
    if callable(args[0]):
        return SlotView(get_value, subscribe, *args)
    if len(args) == 2:
        raise TypeError(f"render() expects a render function before the fallback, got {args[0]!r}")
    return SlotView(get_value, subscribe, fallback=args[0])
