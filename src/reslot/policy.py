"""Async update policies: what happens when an update's next value is pending.

Every admitted dispatch follows the same steps: start the pending result,
capture the slot's update token, broadcast FALLBACK, then track a settle
task that feeds the result back into update() (or routes its failure)
once it arrives.
Policies differ only in whether a dispatch is admitted and in what the
settle task waits for.

Resolution always consults the slot's live options: a result is stale when
the slot is in restartable mode and its token changed since dispatch.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING, Any

from reslot.options import AsyncMode, SlotOptions
from reslot.pending import FALLBACK, Pending

if TYPE_CHECKING:
    from reslot.slot import Slot

logger = logging.getLogger("reslot.policy")


class AsyncPolicy:
    """Admits every dispatch and applies each result on arrival."""

    mode: AsyncMode

    def admit(self, slot: Slot) -> bool:
        return True

    def sequence(self, slot: Slot, future: asyncio.Future) -> asyncio.Future:
        return future

    def dispatch(self, slot: Slot, pending: Pending) -> None:
        if not self.admit(slot):
            pending.discard()
            logger.debug("Dropped async update on %r: another update is pending", slot)
            return

        future = self.sequence(slot, pending.start())
        token = slot._token
        slot._listeners.call(FALLBACK)

        task = asyncio.get_running_loop().create_task(_settle(slot, future, token))
        slot._pending = task
        task.add_done_callback(functools.partial(_release, slot))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Restartable(AsyncPolicy):
    """Latest change wins; results overtaken by another change are discarded."""

    mode = AsyncMode.RESTARTABLE


class Concurrent(AsyncPolicy):
    mode = AsyncMode.CONCURRENT


class Sequential(AsyncPolicy):
    """Results are applied in dispatch order, whatever order they arrive in."""

    mode = AsyncMode.SEQUENTIAL

    def sequence(self, slot: Slot, future: asyncio.Future) -> asyncio.Future:
        previous = slot._pending
        if previous is None or previous.done():
            return future
        return asyncio.get_running_loop().create_task(_after(previous, future))


class Droppable(AsyncPolicy):
    """New async work is refused while a result is still pending."""

    mode = AsyncMode.DROPPABLE

    def admit(self, slot: Slot) -> bool:
        return slot._pending is None or slot._pending.done()


_POLICIES: dict[AsyncMode, AsyncPolicy] = {
    policy.mode: policy for policy in (Restartable(), Concurrent(), Sequential(), Droppable())
}


def policy_for(mode: AsyncMode | str) -> AsyncPolicy:
    """Look up the policy for an async mode."""
    return _POLICIES[AsyncMode(mode)]


def is_stale(slot: Slot, token: object) -> bool:
    return slot.options.async_mode is AsyncMode.RESTARTABLE and token is not slot._token


def route_error(options: SlotOptions, error: BaseException) -> None:
    """Hand an async failure to on_async_error, or log it when none is set."""
    handler = options.on_async_error
    if handler is None:
        logger.error("Unhandled async update failure: %r", error, exc_info=error)
        return
    handler(error)


async def _after(previous: asyncio.Future, future: asyncio.Future) -> Any:
    # previous is a settle task; its outcome is reported by _release, not here
    await asyncio.wait([previous])
    return await future


async def _settle(slot: Slot, future: asyncio.Future, token: object) -> None:
    try:
        value = await future
    except Exception as error:
        if is_stale(slot, token):
            logger.debug("Discarded stale async failure on %r: %r", slot, error)
            return
        route_error(slot.options, error)
        return

    if is_stale(slot, token):
        logger.debug("Discarded stale async result on %r: %r", slot, value)
        return
    slot.update(value)


def _release(slot: Slot, task: asyncio.Task) -> None:
    if slot._pending is task:
        slot._pending = None
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("Async update on %r failed while applying its result", slot, exc_info=error)
