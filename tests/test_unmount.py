"""Tests for TrueUnmountCallback and on_true_unmount."""

import asyncio
import logging

from truemount import AsyncioScheduler, Component, ManualScheduler, TrueUnmountCallback, on_true_unmount


def _component(strict=False):
    s = ManualScheduler()
    return Component("Dashboard", strict=strict, scheduler=s), s


class TestGenuineUnmount:
    def test_runs_once_after_delay(self):
        c, s = _component()
        log = []
        on_true_unmount(c, lambda: log.append("unmounted"))
        c.mount()
        s.flush()
        c.unmount()
        assert log == []  # deferred
        s.flush()
        assert log == ["unmounted"]

    def test_not_on_mount(self):
        c, s = _component()
        log = []
        on_true_unmount(c, lambda: log.append("unmounted"))
        c.mount()
        s.flush()
        assert log == []

    def test_fires_after_destruction(self):
        """Pending check still runs once the instance is gone for good."""
        c, s = _component()
        log = []
        cb = on_true_unmount(c, lambda: log.append("unmounted"))
        c.mount()
        c.unmount()
        assert cb.pending
        del c
        s.flush()
        assert log == ["unmounted"]
        assert not cb.pending

    def test_repeat_sequence_one_call_per_unmount(self):
        c, s = _component()
        log = []
        on_true_unmount(c, lambda: log.append("unmounted"))
        for _ in range(2):
            c.mount()
            s.flush()
            c.unmount()
            s.flush()
        assert log == ["unmounted", "unmounted"]


class TestDiagnosticRemount:
    def test_strict_mount_does_not_fire(self):
        c, s = _component(strict=True)
        log = []
        on_true_unmount(c, lambda: log.append("unmounted"))
        c.mount()
        s.flush()
        assert log == []

    def test_strict_then_genuine_unmount_fires_once(self):
        c, s = _component(strict=True)
        log = []
        on_true_unmount(c, lambda: log.append("unmounted"))
        c.mount()
        c.unmount()
        s.flush()
        assert log == ["unmounted"]

    def test_manual_remount_in_same_phase(self):
        c, s = _component()
        log = []
        on_true_unmount(c, lambda: log.append("unmounted"))
        c.mount()
        c.unmount()
        c.mount()
        s.flush()
        assert log == []


class TestLatestAction:
    def test_update_uses_latest_closure(self):
        c, s = _component()
        log = []
        cb = on_true_unmount(c, lambda: log.append("old"))
        c.mount()
        cb.update(lambda: log.append("new"))
        c.unmount()
        s.flush()
        assert log == ["new"]

    def test_update_after_unmount_before_check(self):
        """The action is read when the check runs, not when it is scheduled."""
        c, s = _component()
        log = []
        cb = on_true_unmount(c, lambda: log.append("old"))
        c.mount()
        c.unmount()
        cb.update(lambda: log.append("newest"))
        s.flush()
        assert log == ["newest"]


class TestErrors:
    def test_error_contained(self, caplog):
        c, s = _component()

        def boom():
            raise RuntimeError("socket already closed")

        on_true_unmount(c, boom)
        c.mount()
        c.unmount()
        with caplog.at_level(logging.ERROR, logger="truemount.lifecycle"):
            s.flush()  # should not raise
        assert "socket already closed" in caplog.text

    def test_other_instances_unaffected(self, caplog):
        s = ManualScheduler()
        a = Component("A", scheduler=s)
        b = Component("B", scheduler=s)
        log = []

        def boom():
            raise RuntimeError("A failed")

        on_true_unmount(a, boom)
        on_true_unmount(b, lambda: log.append("B"))
        a.mount()
        b.mount()
        a.unmount()
        b.unmount()
        with caplog.at_level(logging.ERROR, logger="truemount.lifecycle"):
            s.flush()
        assert log == ["B"]

    def test_double_unmount_runs_action_once(self):
        s = ManualScheduler()
        log = []
        cb = TrueUnmountCallback(lambda: log.append("unmounted"), scheduler=s)
        cb._mount()
        cb._unmount()
        cb._unmount()
        assert s.pending == 1
        s.flush()
        assert log == ["unmounted"]

    def test_unmount_without_mount_is_noop(self):
        s = ManualScheduler()
        cb = TrueUnmountCallback(lambda: None, scheduler=s)
        cb._unmount()
        assert s.pending == 0
        assert not cb.pending


class TestAsync:
    def test_async_action_on_asyncio_scheduler(self):
        log = []

        async def persist_draft():
            await asyncio.sleep(0)
            log.append("saved")

        async def main():
            c = Component("Editor", strict=True, scheduler=AsyncioScheduler())
            on_true_unmount(c, persist_draft)
            c.mount()
            await asyncio.sleep(0)
            assert log == []
            c.unmount()
            for _ in range(5):
                await asyncio.sleep(0)

        asyncio.run(main())
        assert log == ["saved"]
