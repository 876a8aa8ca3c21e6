"""Tests for reslot.textual: Textual integration layer."""

import asyncio
import threading

import pytest
from textual.css.query import NoMatches

from reslot import create_slot
from reslot import textual as stx


class _MockApp:
    """Minimal mock matching the Textual App interface stx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


class _MockWidget:
    """Records what bind() paints through update()."""

    def __init__(self):
        self.painted = []

    def update(self, renderable):
        self.painted.append(renderable)


async def _drain():
    for _ in range(20):
        await asyncio.sleep(0)


class TestBind:
    def test_paints_on_bind(self):
        widget = _MockWidget()
        slot = create_slot(3)
        stx.bind(_MockApp(), widget, slot.render(lambda v: f"{v} items"))
        assert widget.painted == ["3 items"]

    def test_paints_on_change(self):
        widget = _MockWidget()
        slot = create_slot(1)
        stx.bind(_MockApp(), widget, slot.render(str))
        slot.update(2)
        slot.update(2)
        assert widget.painted == ["1", "2"]

    def test_fallback_then_value(self):
        widget = _MockWidget()

        async def scenario():
            slot = create_slot(1)
            stx.bind(_MockApp(), widget, slot.render(str, "loading"))
            future = asyncio.get_running_loop().create_future()
            slot.update(future)
            future.set_result(2)
            await _drain()

        asyncio.run(scenario())
        assert widget.painted == ["1", "loading", "2"]

    def test_fallback_stays_until_next_broadcast(self):
        """A pending update resolving to the current value broadcasts nothing after FALLBACK."""
        widget = _MockWidget()

        async def scenario():
            slot = create_slot(1)
            view = slot.render(str, "loading")
            stx.bind(_MockApp(), widget, view)
            slot.update(asyncio.sleep(0, 1))
            await _drain()
            assert widget.painted == ["1", "loading"]
            slot.update(asyncio.sleep(0, 3))
            await _drain()

        asyncio.run(scenario())
        assert widget.painted == ["1", "loading", "loading", "3"]

    def test_no_fallback_keeps_value(self):
        widget = _MockWidget()

        async def scenario():
            slot = create_slot(1)
            stx.bind(_MockApp(), widget, slot.render(str))
            slot.update(asyncio.sleep(0, 2))
            await _drain()

        asyncio.run(scenario())
        assert widget.painted == ["1", "2"]

    def test_unbind_stops_painting(self):
        widget = _MockWidget()
        slot = create_slot(1)
        unbind = stx.bind(_MockApp(), widget, slot.render())
        unbind()
        unbind()  # should not raise
        slot.update(2)
        assert widget.painted == [1]

    def test_skips_when_not_running(self):
        widget = _MockWidget()
        slot = create_slot(1)
        stx.bind(_MockApp(is_running=False), widget, slot.render())
        slot.update(2)
        assert widget.painted == []

    def test_bind_while_paused_paints_on_next_change(self):
        app = _MockApp()
        widget = _MockWidget()
        slot = create_slot(1)
        with stx.pause(app):
            stx.bind(app, widget, slot.render())
        assert widget.painted == []
        slot.update(2)
        assert widget.painted == [2]

    def test_skips_during_pause(self):
        app = _MockApp()
        widget = _MockWidget()
        slot = create_slot(1)
        stx.bind(app, widget, slot.render())
        with stx.pause(app):
            slot.update(2)
        slot.update(3)
        assert widget.painted == [1, 3]

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""

        class _Gone(_MockWidget):
            def update(self, renderable):
                if self.painted:
                    raise NoMatches("CountLabel")
                super().update(renderable)

        widget = _Gone()
        slot = create_slot(1)
        stx.bind(_MockApp(), widget, slot.render())
        slot.update(2)  # should not raise
        assert slot.get_value() == 2

    def test_catches_nomatch_at_bind(self):
        """A widget already gone when bound does not make bind() raise."""

        class _Gone(_MockWidget):
            def update(self, renderable):
                raise NoMatches("CountLabel")

        slot = create_slot(1)
        unbind = stx.bind(_MockApp(), _Gone(), slot.render(str))
        slot.update(2)  # should not raise
        unbind()

    def test_propagates_real_errors(self):
        """Non-NoMatches exceptions propagate normally."""

        def _render(value):
            if value > 1:
                raise ValueError("boom")
            return value

        slot = create_slot(1)
        stx.bind(_MockApp(), _MockWidget(), slot.render(_render))
        with pytest.raises(ValueError, match="boom"):
            slot.update(2)

    def test_thread_marshal(self):
        """Notifications from a background thread use call_from_thread."""
        app = _MockApp()
        widget = _MockWidget()
        slot = create_slot(1)
        stx.bind(app, widget, slot.render())

        t = threading.Thread(target=slot.update, args=(2,))
        t.start()
        t.join()

        assert widget.painted == [1, 2]
        assert len(app._call_from_thread_log) == 1


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert stx.is_safe(app)

        with pytest.raises(RuntimeError):
            with stx.pause(app):
                assert not stx.is_safe(app)
                raise RuntimeError("oops")

        assert stx.is_safe(app)

    def test_multiple_apps_independent(self):
        app_a = _MockApp()
        app_b = _MockApp()
        with stx.pause(app_a):
            assert not stx.is_safe(app_a)
            assert stx.is_safe(app_b)
