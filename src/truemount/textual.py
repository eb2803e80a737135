"""Textual integration for truemount. Opt-in — requires textual.

Textual widgets get Mount/Unmount events; a widget removed and re-added in
the same message-processing pass looks exactly like a diagnostic remount.
LifecycleMixin forwards those events to a Component whose deferred checks
run through the app's message pump.
"""

from __future__ import annotations

import functools
import threading
from typing import Callable

from textual.css.query import NoMatches

from truemount.component import Component
from truemount.scheduler import AsyncioScheduler, Task


class TextualScheduler:
    """Scheduler backed by the Textual app's message pump.

    Work runs via ``app.call_later``, after the messages already queued on
    the app. A removed widget's own pump is closing by the time Unmount is
    dispatched and drops anything posted to it, so the app is used instead.
    If the app pump is closing too, work goes straight to the event loop.
    Calls from other threads are marshaled with call_from_thread.
    """

    __slots__ = ("_node", "_main")

    def __init__(self, node) -> None:
        self._node = node
        self._main = threading.get_ident()

    def __call__(self, fn: Task) -> None:
        if threading.get_ident() != self._main:
            self._node.app.call_from_thread(self._schedule, fn)
        else:
            self._schedule(fn)

    def _schedule(self, fn: Task) -> None:
        if not self._node.app.call_later(fn):
            AsyncioScheduler()(fn)


def quiet(fn: Callable[[], object]) -> Callable[[], object]:
    """Wrap a teardown action so NoMatches from widget queries is ignored.

    Widgets are often gone by the time a genuine unmount runs.
    """

    @functools.wraps(fn)
    def _safe() -> object:
        try:
            return fn()
        except NoMatches:
            return None

    return _safe


class LifecycleMixin:
    """Mixin for Textual widgets: a lazily-created ``lifecycle`` Component.

    Register hooks in __init__ (the setup phase):

        class Clock(LifecycleMixin, Static):
            def __init__(self) -> None:
                super().__init__()
                self.lifecycle.run_true_effect(self._start_timer)
    """

    strict_lifecycle: bool = False

    @property
    def lifecycle(self) -> Component:
        component = getattr(self, "_truemount_lifecycle", None)
        if component is None:
            component = Component(
                type(self).__name__,
                strict=self.strict_lifecycle,
                scheduler=TextualScheduler(self),
            )
            self._truemount_lifecycle = component
        return component

    def on_mount(self) -> None:
        self.lifecycle.mount()

    def on_unmount(self) -> None:
        if self.lifecycle.mounted:
            self.lifecycle.unmount()
