"""Schedulers — push work past the current synchronous phase.

A scheduler is any callable ``scheduler(fn)`` that runs ``fn()`` strictly
later than the call stack that scheduled it, in FIFO order for equal delays.
Every deferred lifecycle check goes through one.

Call set_scheduler() once at startup to pick the process-wide default. Each
primitive also accepts ``scheduler=`` to override it per instance.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable, Protocol

Task = Callable[[], object]


class Scheduler(Protocol):
    def __call__(self, fn: Task) -> None: ...


class AsyncioScheduler:
    """Defer onto an asyncio event loop.

    With ``delay == 0`` work lands on the next loop iteration (call_soon).
    A positive delay widens the window for hosts whose diagnostic remount
    is not strictly synchronous.
    """

    __slots__ = ("_delay", "_loop")

    def __init__(self, delay: float = 0.0, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay!r}")
        self._delay = delay
        self._loop = loop

    @property
    def delay(self) -> float:
        return self._delay

    def __call__(self, fn: Task) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        loop = self._loop or running
        if loop is None:
            raise RuntimeError(
                "AsyncioScheduler needs a running event loop; pass loop= or "
                "call truemount.set_scheduler() with another scheduler"
            )

        if loop is not running:
            # Off-loop caller: hop onto the loop thread first.
            loop.call_soon_threadsafe(self._defer, loop, fn)
        else:
            self._defer(loop, fn)

    def _defer(self, loop: asyncio.AbstractEventLoop, fn: Task) -> None:
        if self._delay > 0:
            loop.call_later(self._delay, fn)
        else:
            loop.call_soon(fn)

    def __repr__(self) -> str:
        return f"AsyncioScheduler(delay={self._delay!r})"


class ManualScheduler:
    """Deterministic scheduler for synchronous hosts and tests.

    Nothing runs until tick() or flush() is called. One tick is one
    macrotask boundary: work scheduled while a tick runs waits for the next.
    """

    __slots__ = ("_queue",)

    def __init__(self) -> None:
        self._queue: deque[Task] = deque()

    def __call__(self, fn: Task) -> None:
        self._queue.append(fn)

    @property
    def pending(self) -> int:
        """Number of tasks waiting to run. Useful for testing."""
        return len(self._queue)

    def tick(self) -> int:
        """Run everything queued before this call. Returns the number run."""
        batch = list(self._queue)
        self._queue.clear()
        for fn in batch:
            fn()
        return len(batch)

    def flush(self) -> int:
        """Tick until the queue is empty. Returns the total number run."""
        total = 0
        while self._queue:
            total += self.tick()
        return total

    def __repr__(self) -> str:
        return f"ManualScheduler(pending={len(self._queue)})"


# ─── Process-wide default ────────────────────────────────────────────────────
_scheduler: Scheduler | None = None


def set_scheduler(scheduler: Scheduler | None) -> None:
    """Set the default scheduler used by primitives created without one.

    Call once from the main/UI thread:
        truemount.set_scheduler(ManualScheduler())

    Passing None restores the asyncio default.
    """
    global _scheduler
    _scheduler = scheduler


def get_scheduler() -> Scheduler:
    """Return the configured default, creating the asyncio one on first use."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncioScheduler()
    return _scheduler
