"""Textual integration for reslot. Opt-in, requires textual.

bind() draws a SlotView into any widget with an update() method (Static,
Label, ...) and keeps it current. Guard, NoMatches and thread marshaling
are handled here, not at callsites.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from reslot.pending import FALLBACK

# Nothing painted yet; never identical to a slot value.
_UNSHOWN = object()

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bound widgets during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, widget, view):
    """Paint view into widget now and after every slot notification.

    The first paint goes through the same guards as later ones, so nothing
    is drawn while the app is paused or not running.

    Returns the unsubscribe function; call it when the widget unmounts.

    Usage:
        class CountLabel(Static):
            def on_mount(self):
                self._unbind = stx.bind(self.app, self, count.render(str, "..."))

            def on_unmount(self):
                self._unbind()
    """
    _main = threading.get_ident()
    shown = {"value": _UNSHOWN, "fallback": False}

    def _paint(notification):
        showing_fallback = notification is FALLBACK and view.fallback is not None
        if not showing_fallback and not shown["fallback"] and view.get_value() is shown["value"]:
            return
        try:
            widget.update(view.present(notification))
        except NoMatches:
            return
        shown["fallback"] = showing_fallback
        if not showing_fallback:
            shown["value"] = view.get_value()

    def _guarded(notification):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_paint, notification)
        else:
            _paint(notification)

    _guarded(view.get_value())
    return view.subscribe(_guarded)
