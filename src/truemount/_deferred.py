"""Deferred currency checks and the user-action error boundary.

Every call into caller-supplied setup, cleanup or unmount logic goes
through invoke(). Errors are logged on the ``truemount.lifecycle`` logger
and never reach the host runtime.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable

from truemount.generation import GenerationTracker
from truemount.scheduler import Scheduler, get_scheduler

logger = logging.getLogger("truemount.lifecycle")

# Strong references to in-flight async actions; the loop only keeps weak ones.
_background_tasks: set[asyncio.Task] = set()


def normalize_cleanup(result: object) -> Callable[[], object] | None:
    """Only callables count as cleanups. Anything else means "no cleanup"."""
    return result if callable(result) else None


def invoke(fn: Callable[[], object], label: str) -> object:
    """Call fn, containing any error. Returns fn's result, or None.

    Awaitable results are started in the background (their errors are
    contained too) and None is returned in their place.
    """
    try:
        result = fn()
    except Exception:
        logger.exception("True lifecycle %s error", label)
        return None

    if inspect.isawaitable(result):
        _spawn(result, label)
        return None
    return result


async def _drain(awaitable: Awaitable[object]) -> object:
    return await awaitable


def _spawn(awaitable: Awaitable[object], label: str) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        try:
            asyncio.run(_drain(awaitable))
        except Exception:
            logger.exception("True lifecycle %s error", label)
        return

    task = loop.create_task(_drain(awaitable))
    _background_tasks.add(task)

    def _done(t: asyncio.Task) -> None:
        _background_tasks.discard(t)
        if t.cancelled():
            return
        exc = t.exception()
        if exc is not None:
            logger.error("True lifecycle %s error", label, exc_info=exc)

    task.add_done_callback(_done)


class DeferredCheck:
    """One scheduled "still current?" check. Runs its action at most once."""

    __slots__ = ("_tracker", "_snapshot", "_action", "_label", "_fired")

    def __init__(
        self,
        tracker: GenerationTracker,
        snapshot: int,
        action: Callable[[], object],
        label: str,
    ) -> None:
        self._tracker = tracker
        self._snapshot = snapshot
        self._action = action
        self._label = label
        self._fired = False

    @property
    def snapshot(self) -> int:
        return self._snapshot

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self) -> None:
        if self._fired:
            return
        self._fired = True
        if not self._tracker.is_current(self._snapshot):
            logger.debug("Skipping stale %s (generation %d)", self._label, self._snapshot)
            return
        invoke(self._action, self._label)

    def __repr__(self) -> str:
        state = "fired" if self._fired else "pending"
        return f"DeferredCheck({self._label}, snapshot={self._snapshot}, {state})"


def run_if_current(
    tracker: GenerationTracker,
    snapshot: int,
    action: Callable[[], object],
    label: str,
    scheduler: Scheduler | None = None,
) -> DeferredCheck:
    """Schedule action to run past the diagnostic window if snapshot is still current."""
    check = DeferredCheck(tracker, snapshot, action, label)
    (scheduler or get_scheduler())(check)
    return check
