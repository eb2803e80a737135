"""True effects — setup on genuine mount, cleanup on the genuine unmount that follows.

Behaves like a run-once effect, except that diagnostic mount → unmount →
mount cycles are invisible: setup for a discarded mount never runs, and
neither does its cleanup.

Both setup and cleanup are deferred past the synchronous diagnostic window.
Each mount takes a fresh generation snapshot; each deferred check compares
against it when it fires.

State machine (per instance):

    UNINITIALIZED ─mount→ SETUP_PENDING ─check current→ ACTIVE
    ACTIVE ─unmount→ TEARDOWN_PENDING ─check current→ FINALIZED
    TEARDOWN_PENDING ─remount before check→ SETUP_PENDING

A stale setup check leaves the state to the newer mount that outdated it.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Callable

from truemount._deferred import invoke, normalize_cleanup, run_if_current
from truemount.cell import SyncedValueCell
from truemount.generation import GenerationTracker
from truemount.scheduler import Scheduler

if TYPE_CHECKING:
    from truemount.component import Component

Cleanup = Callable[[], object]
EffectCallback = Callable[[], object]


class EffectState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SETUP_PENDING = "setup_pending"
    ACTIVE = "active"
    TEARDOWN_PENDING = "teardown_pending"
    FINALIZED = "finalized"


class TrueEffect:
    """A setup/cleanup pair that only follows genuine lifecycle transitions."""

    __slots__ = ("_effect", "_tracker", "_cleanup", "_live", "_state", "_scheduler")

    def __init__(self, effect: EffectCallback, *, scheduler: Scheduler | None = None) -> None:
        self._effect: SyncedValueCell[EffectCallback] = SyncedValueCell(effect)
        self._tracker = GenerationTracker()
        self._cleanup: Cleanup | None = None
        self._live = False
        self._state = EffectState.UNINITIALIZED
        self._scheduler = scheduler

    @property
    def state(self) -> EffectState:
        return self._state

    def update(self, effect: EffectCallback) -> None:
        """Sync a newer effect closure; the next genuine setup uses it."""
        self._effect.sync(effect)

    def _mount(self) -> None:
        snapshot = self._tracker.on_mount()
        run_if_current(self._tracker, snapshot, self._setup, "effect", self._scheduler)
        self._state = EffectState.SETUP_PENDING

    def _setup(self) -> None:
        # A synchronous unmount → remount of a live effect is diagnostic too.
        if not self._live:
            self._live = True
            self._cleanup = normalize_cleanup(invoke(self._effect.read(), "effect"))
        if self._state is EffectState.SETUP_PENDING:
            self._state = EffectState.ACTIVE

    def _unmount(self) -> None:
        if self._state is EffectState.UNINITIALIZED:
            return
        snapshot = self._tracker.snapshot()
        run_if_current(self._tracker, snapshot, self._teardown, "cleanup", self._scheduler)
        self._state = EffectState.TEARDOWN_PENDING

    def _teardown(self) -> None:
        cleanup, self._cleanup = self._cleanup, None
        self._live = False
        self._state = EffectState.FINALIZED
        if cleanup is not None:
            invoke(cleanup, "cleanup")

    def __repr__(self) -> str:
        return f"TrueEffect({self._state.value}, {self._tracker!r})"


def run_true_effect(component: Component, effect: EffectCallback) -> TrueEffect:
    """Register effect to run on component's genuine mount.

    effect may return a cleanup callable; it runs on the genuine unmount.
    Call once per instance, during setup.

    Usage:
        ticker = Component("Ticker", strict=True)

        def subscribe():
            handle = feed.subscribe(on_tick)
            return handle.close

        run_true_effect(ticker, subscribe)
        ticker.mount()      # subscribes once, on the next macrotask
        ticker.unmount()    # closes once, on the next macrotask
    """
    return component.run_true_effect(effect)
