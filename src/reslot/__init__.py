"""reslot: reactive value slots with async update policies."""

from importlib.metadata import version as _version

__version__ = _version("reslot")

from reslot.pending import FALLBACK, Pending
from reslot.options import AsyncMode, SlotOptions
from reslot.slot import Slot, UpdateContext, create_slot
from reslot.render import SlotView
from reslot.owned import OwnedSlot, use_slot
# textual NOT auto-imported, opt-in only

__all__ = [
    "FALLBACK",
    "Pending",
    "AsyncMode",
    "SlotOptions",
    "Slot",
    "UpdateContext",
    "create_slot",
    "SlotView",
    "OwnedSlot",
    "use_slot",
]
