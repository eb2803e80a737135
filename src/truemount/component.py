"""Component — one instance's lifecycle, carried explicitly.

A Component owns the hooks registered during its setup phase and forwards
mount, unmount and commit notifications to them. It is the seam a host
runtime (or a test) drives.

With ``strict=True``, mount() performs the development-mode diagnostic
remount: mount every hook, unmount them all, mount again, synchronously.
Plain effects see all of that; true effects and true unmount callbacks
only see the surviving mount.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol, TypeVar

from truemount._deferred import normalize_cleanup
from truemount.cell import SyncedValueCell
from truemount.effect import EffectCallback, TrueEffect
from truemount.scheduler import Scheduler
from truemount.unmount import TrueUnmountCallback, UnmountAction

logger = logging.getLogger("truemount.component")

T = TypeVar("T")


class LifecycleError(RuntimeError):
    """The host drove a Component through an impossible transition."""


class _Hook(Protocol):
    def _mount(self) -> None: ...

    def _unmount(self) -> None: ...


class _PlainEffect:
    """Ordinary run-once effect: fires on every mount execution, diagnostic included."""

    __slots__ = ("_setup", "_cleanup")

    def __init__(self, setup: EffectCallback) -> None:
        self._setup = setup
        self._cleanup: Callable[[], object] | None = None

    def _mount(self) -> None:
        self._cleanup = normalize_cleanup(self._setup())

    def _unmount(self) -> None:
        cleanup, self._cleanup = self._cleanup, None
        if cleanup is not None:
            cleanup()


class Component:
    """Per-instance lifecycle host for truemount hooks."""

    def __init__(
        self,
        name: str = "component",
        *,
        strict: bool = False,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.name = name
        self.strict = strict
        self._scheduler = scheduler
        self._hooks: list[_Hook] = []
        self._live: list[_Hook] = []
        self._commit_fns: list[Callable[[], None]] = []
        self._mounted = False

    @property
    def mounted(self) -> bool:
        return self._mounted

    # --- Setup-phase registration ---

    def use_effect(self, setup: EffectCallback) -> None:
        """Plain effect. Runs (and cleans up) on every mount execution."""
        self._register(_PlainEffect(setup))

    def use_synced_value(self, source: Callable[[], T]) -> SyncedValueCell[T]:
        """Cell kept in sync with source() on every commit.

        Usage:
            form = FormState()
            latest = component.use_synced_value(lambda: form.snapshot())
            # timers read latest.read() and never see a stale form
        """
        self._check_unmounted("use_synced_value")
        cell = SyncedValueCell(source())

        def _sync() -> None:
            value = source()
            old = cell.read()
            if old is not value and old != value:
                cell.sync(value)

        self._commit_fns.append(_sync)
        return cell

    def on_true_unmount(self, action: UnmountAction) -> TrueUnmountCallback:
        hook = TrueUnmountCallback(action, scheduler=self._scheduler)
        self._register(hook)
        return hook

    def run_true_effect(self, effect: EffectCallback) -> TrueEffect:
        hook = TrueEffect(effect, scheduler=self._scheduler)
        self._register(hook)
        return hook

    # --- Host-driven transitions ---

    def commit(self) -> None:
        """Sync every use_synced_value cell with its source."""
        for fn in self._commit_fns:
            fn()

    def mount(self) -> None:
        if self._mounted:
            raise LifecycleError(f"{self.name} is already mounted")
        try:
            self.commit()
            self._mount_hooks()
            if self.strict:
                logger.debug("%s: diagnostic remount", self.name)
                self._unmount_hooks()
                self._mount_hooks()
        except Exception:
            self._unwind()
            raise
        self._mounted = True

    def unmount(self) -> None:
        if not self._mounted:
            raise LifecycleError(f"{self.name} is not mounted")
        self._mounted = False
        self._unmount_hooks()

    def _mount_hooks(self) -> None:
        logger.debug("%s: mount", self.name)
        for hook in self._hooks:
            hook._mount()
            self._live.append(hook)

    def _unmount_hooks(self) -> None:
        logger.debug("%s: unmount", self.name)
        while self._live:
            self._live.pop()._unmount()

    def _unwind(self) -> None:
        """Unmount whatever a failed mount() left mounted, newest first."""
        while self._live:
            hook = self._live.pop()
            try:
                hook._unmount()
            except Exception:
                logger.exception("%s: error unwinding failed mount", self.name)

    def _register(self, hook: _Hook) -> None:
        self._check_unmounted(type(hook).__name__)
        self._hooks.append(hook)

    def _check_unmounted(self, what: str) -> None:
        if self._mounted:
            raise LifecycleError(f"cannot register {what} on mounted {self.name}")

    def __repr__(self) -> str:
        state = "mounted" if self._mounted else "unmounted"
        return f"Component({self.name!r}, {state}, hooks={len(self._hooks)})"
