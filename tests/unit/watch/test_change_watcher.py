"""Tests for debounced filesystem change delivery."""

from __future__ import annotations

import gc
import tempfile
import threading
import time
import unittest
from pathlib import Path

from watchdog.events import (
    DirCreatedEvent,
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)
from watchdog.observers.polling import PollingObserver

from projecttree.watch import ChangeWatcher

DEBOUNCE = 0.1


class _FakeObserver:
    """Observer stand-in that exposes the scheduled handler to tests."""

    def __init__(self, fail_on_start: bool = False) -> None:
        self.fail_on_start = fail_on_start
        self.handler = None
        self.path: str | None = None
        self.recursive = False
        self.started = False
        self.stop_calls = 0

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        self.handler = handler
        self.path = path
        self.recursive = recursive

    def start(self) -> None:
        if self.fail_on_start:
            raise OSError(24, "Too many open files")
        self.started = True

    def stop(self) -> None:
        self.stop_calls += 1

    def join(self, timeout: float | None = None) -> None:
        return None


class _Collector:
    def __init__(self) -> None:
        self.batches: list[frozenset[Path]] = []
        self.delivered = threading.Event()

    def __call__(self, paths: frozenset[Path]) -> None:
        self.batches.append(paths)
        self.delivered.set()


def _make_watcher() -> tuple[ChangeWatcher, list[_FakeObserver]]:
    observers: list[_FakeObserver] = []

    def factory() -> _FakeObserver:
        observer = _FakeObserver()
        observers.append(observer)
        return observer

    return ChangeWatcher(debounce_seconds=DEBOUNCE, observer_factory=factory), observers


class ChangeWatcherDebounceTests(unittest.TestCase):
    def test_burst_of_events_is_delivered_as_one_batch(self) -> None:
        watcher, observers = _make_watcher()
        collector = _Collector()
        self.assertTrue(watcher.start(Path("/project"), collector))
        observer = observers[0]
        self.assertEqual(observer.path, "/project")
        self.assertTrue(observer.recursive)

        for i in range(50):
            observer.handler.dispatch(FileModifiedEvent(f"/project/file{i}.md"))

        self.assertTrue(collector.delivered.wait(timeout=2.0))
        time.sleep(DEBOUNCE * 3)
        watcher.stop()

        self.assertEqual(len(collector.batches), 1)
        self.assertEqual(collector.batches[0], frozenset(Path(f"/project/file{i}.md") for i in range(50)))

    def test_renames_report_both_paths_and_directory_events_report_none(self) -> None:
        watcher, observers = _make_watcher()
        collector = _Collector()
        watcher.start(Path("/project"), collector)
        handler = observers[0].handler

        handler.dispatch(FileCreatedEvent("/project/new.md"))
        handler.dispatch(FileMovedEvent("/project/old.md", "/project/renamed.md"))
        handler.dispatch(DirCreatedEvent("/project/docs"))
        handler.dispatch(FileDeletedEvent("/project/gone.md"))

        self.assertTrue(collector.delivered.wait(timeout=2.0))
        watcher.stop()
        self.assertEqual(
            collector.batches,
            [frozenset({Path("/project/new.md"), Path("/project/old.md"), Path("/project/renamed.md")})],
        )

    def test_structural_only_events_deliver_an_empty_batch(self) -> None:
        watcher, observers = _make_watcher()
        collector = _Collector()
        watcher.start(Path("/project"), collector)

        observers[0].handler.dispatch(FileDeletedEvent("/project/gone.md"))

        self.assertTrue(collector.delivered.wait(timeout=2.0))
        watcher.stop()
        self.assertEqual(collector.batches, [frozenset()])

    def test_directory_modified_events_are_ignored(self) -> None:
        watcher, observers = _make_watcher()
        collector = _Collector()
        watcher.start(Path("/project"), collector)

        observers[0].handler.dispatch(DirModifiedEvent("/project/docs"))

        self.assertFalse(collector.delivered.wait(timeout=DEBOUNCE * 3))
        watcher.stop()

    def test_stop_cancels_pending_flush(self) -> None:
        watcher, observers = _make_watcher()
        collector = _Collector()
        watcher.start(Path("/project"), collector)

        observers[0].handler.dispatch(FileModifiedEvent("/project/a.md"))
        watcher.stop()

        self.assertFalse(collector.delivered.wait(timeout=DEBOUNCE * 3))
        self.assertFalse(watcher.is_running)

    def test_restart_does_not_redeliver_flushed_batch(self) -> None:
        watcher, observers = _make_watcher()
        collector = _Collector()
        watcher.start(Path("/project"), collector)
        observers[0].handler.dispatch(FileModifiedEvent("/project/a.md"))
        self.assertTrue(collector.delivered.wait(timeout=2.0))

        watcher.stop()
        watcher.start(Path("/project"), collector)
        time.sleep(DEBOUNCE * 3)
        watcher.stop()

        self.assertEqual(collector.batches, [frozenset({Path("/project/a.md")})])
        self.assertEqual(len(observers), 2)

    def test_stop_is_idempotent(self) -> None:
        watcher, observers = _make_watcher()
        watcher.start(Path("/project"), _Collector())

        watcher.stop()
        watcher.stop()

        self.assertEqual(observers[0].stop_calls, 1)
        self.assertFalse(watcher.is_running)

    def test_setup_failure_leaves_watcher_stopped(self) -> None:
        watcher = ChangeWatcher(debounce_seconds=DEBOUNCE, observer_factory=lambda: _FakeObserver(fail_on_start=True))

        with self.assertLogs("projecttree.watch", level="WARNING"):
            started = watcher.start(Path("/project"), _Collector())

        self.assertFalse(started)
        self.assertFalse(watcher.is_running)
        watcher.stop()

    def test_bound_method_callback_does_not_keep_owner_alive(self) -> None:
        class Owner:
            def __init__(self) -> None:
                self.batches: list[frozenset[Path]] = []

            def on_change(self, paths: frozenset[Path]) -> None:
                self.batches.append(paths)

        watcher, observers = _make_watcher()
        owner = Owner()
        watcher.start(Path("/project"), owner.on_change)
        del owner
        gc.collect()

        observers[0].handler.dispatch(FileModifiedEvent("/project/a.md"))

        deadline = time.monotonic() + 2.0
        while watcher.is_running and time.monotonic() < deadline:
            time.sleep(0.01)
        self.assertFalse(watcher.is_running)
        self.assertEqual(observers[0].stop_calls, 1)


class ChangeWatcherPollingTests(unittest.TestCase):
    def test_polling_observer_reports_written_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            collector = _Collector()
            watcher = ChangeWatcher(debounce_seconds=DEBOUNCE, observer_factory=lambda: PollingObserver(timeout=0.05))
            self.assertTrue(watcher.start(root, collector))
            try:
                time.sleep(0.2)
                target = root / "note.md"
                target.write_text("# hi\n", encoding="utf-8")

                deadline = time.monotonic() + 3.0
                while time.monotonic() < deadline:
                    if any(target in batch for batch in collector.batches):
                        break
                    time.sleep(0.02)
            finally:
                watcher.stop()

            self.assertTrue(any(target in batch for batch in collector.batches))


if __name__ == "__main__":
    unittest.main()
