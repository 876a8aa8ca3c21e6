"""Slot configuration.

SlotOptions is a live settings object: a slot reads it at every update and
again when an asynchronous result settles, so patching it affects updates
already in flight as well as future ones.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class AsyncMode(str, Enum):
    """How overlapping asynchronous updates on one slot are handled."""

    RESTARTABLE = "restartable"  # apply only results nobody has overtaken
    CONCURRENT = "concurrent"  # apply every result as it arrives
    SEQUENTIAL = "sequential"  # apply results in dispatch order
    DROPPABLE = "droppable"  # ignore new work while a result is pending


@dataclass
class SlotOptions:
    async_mode: AsyncMode = AsyncMode.RESTARTABLE
    on_async_error: Callable[[BaseException], None] | None = None
    extra: Any = None

    def __post_init__(self) -> None:
        self.async_mode = AsyncMode(self.async_mode)

    def patch(self, **changes: Any) -> None:
        """Shallow-merge changes into these options in place."""
        names = {f.name for f in dataclasses.fields(self)}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"Unknown slot option(s): {', '.join(sorted(unknown))}")
        if "async_mode" in changes:
            changes["async_mode"] = AsyncMode(changes["async_mode"])
        for name, value in changes.items():
            setattr(self, name, value)
