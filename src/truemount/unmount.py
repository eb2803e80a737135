"""True unmount callbacks — run teardown logic only when an instance really goes away.

A plain unmount hook also fires during a diagnostic mount → unmount → mount,
even though the instance stays alive. TrueUnmountCallback defers the action
past the synchronous window and drops it if a remount happened meanwhile.

Good fits: closing sockets, aborting background jobs, sending audit events,
persisting drafts. Not worth it for logging or anything safe to repeat.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Union

from truemount._deferred import DeferredCheck, run_if_current
from truemount.cell import SyncedValueCell
from truemount.generation import GenerationTracker
from truemount.scheduler import Scheduler

if TYPE_CHECKING:
    from truemount.component import Component

UnmountAction = Callable[[], Union[None, Awaitable[None]]]


class TrueUnmountCallback:
    """Runs an action on genuine unmount, never on a diagnostic one.

    The latest action is read through a SyncedValueCell when the check runs,
    so update() after registration is honored without re-registering.
    """

    __slots__ = ("_action", "_tracker", "_snapshot", "_scheduler", "_last_check")

    def __init__(self, action: UnmountAction, *, scheduler: Scheduler | None = None) -> None:
        self._action: SyncedValueCell[UnmountAction] = SyncedValueCell(action)
        self._tracker = GenerationTracker()
        self._snapshot: int | None = None
        self._scheduler = scheduler
        self._last_check: DeferredCheck | None = None

    def update(self, action: UnmountAction) -> None:
        """Sync a newer closure. Only the latest one before teardown runs."""
        self._action.sync(action)

    @property
    def pending(self) -> bool:
        """Is a teardown check scheduled but not yet run?"""
        return self._last_check is not None and not self._last_check.fired

    def _mount(self) -> None:
        self._snapshot = self._tracker.on_mount()

    def _unmount(self) -> None:
        if self._snapshot is None:
            return
        self._last_check = run_if_current(
            self._tracker,
            self._snapshot,
            self._run_latest,
            "unmount",
            self._scheduler,
        )
        self._snapshot = None

    def _run_latest(self) -> object:
        return self._action.read()()

    def __repr__(self) -> str:
        return f"TrueUnmountCallback({self._tracker!r})"


def on_true_unmount(component: Component, action: UnmountAction) -> TrueUnmountCallback:
    """Register action to run when component is genuinely unmounted.

    Call once per instance, during setup.

    Usage:
        dashboard = Component("AdminDashboard", strict=True)
        on_true_unmount(dashboard, lambda: print("dashboard gone"))

        dashboard.mount()     # mount → unmount → mount, nothing printed
        dashboard.unmount()   # prints once, on the next macrotask
    """
    return component.on_true_unmount(action)
