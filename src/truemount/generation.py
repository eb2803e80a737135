"""Mount generations — tell genuine lifecycle transitions from diagnostic ones.

Each mount execution (genuine or diagnostic) bumps a per-instance counter.
A deferred check captures the counter when it is scheduled and compares it
when it runs. A diagnostic mount → unmount → mount completes synchronously,
so by the time the first mount's checks run the counter has moved on and
they report stale. After a genuine unmount nothing bumps the counter, so
its check reports current.
"""

from __future__ import annotations


class GenerationTracker:
    """Per-instance mount generation counter. Starts at 0."""

    __slots__ = ("_generation",)

    def __init__(self) -> None:
        self._generation = 0

    def on_mount(self) -> int:
        """Advance by exactly one and return the new generation as a snapshot."""
        self._generation += 1
        return self._generation

    def snapshot(self) -> int:
        """Capture the current generation without advancing it."""
        return self._generation

    def is_current(self, snapshot: int) -> bool:
        return self._generation == snapshot

    def __repr__(self) -> str:
        return f"GenerationTracker(generation={self._generation})"
