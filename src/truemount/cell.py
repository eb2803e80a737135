"""Synced value cells — stale-closure-free reads for long-lived callbacks.

A callback registered once (timer, listener, deferred check) can hold the
cell instead of the value and still observe every later commit. The cell's
identity never changes; only its slot does.

Reading never triggers any re-evaluation. The slot is written only from
commit callbacks (single writer), so no locking is involved.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class SyncedValueCell(Generic[T]):
    """Identity-stable single slot holding the latest committed value."""

    __slots__ = ("_value",)

    def __init__(self, initial: T) -> None:
        self._value = initial

    def read(self) -> T:
        """Latest synced value, or the initial value before any sync."""
        return self._value

    @property
    def current(self) -> T:
        return self._value

    def sync(self, value: T) -> None:
        """Write the committed value. Call from a commit callback only."""
        self._value = value

    def __repr__(self) -> str:
        return f"SyncedValueCell({self._value!r})"


def create_synced_value_cell(initial: T) -> SyncedValueCell[T]:
    """Factory for a SyncedValueCell.

    Usage:
        form = create_synced_value_cell({"name": ""})

        def autosave():
            save_to_server(form.read())   # always the latest commit

        form.sync({"name": "Ada"})
    """
    return SyncedValueCell(initial)
