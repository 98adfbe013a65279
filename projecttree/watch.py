"""Debounced filesystem change notifications for a project subtree.

``ChangeWatcher`` subscribes to OS change events through ``watchdog``,
collects changed file paths, and delivers them as one batch once events
stop arriving for ``debounce_seconds``. Bursts such as a batch edit or a
large checkout therefore produce a single downstream refresh.
"""

from __future__ import annotations

import contextlib
import inspect
import logging
import os
import threading
import weakref
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3

ChangeCallback = Callable[[frozenset[Path]], None]

_FILE_CHANGE_EVENTS = frozenset({"created", "modified", "moved"})
_STRUCTURAL_EVENTS = frozenset({"created", "deleted", "moved"})


class _ChangeHandler(FileSystemEventHandler):
    """Forwards watchdog events to the owning watcher."""

    def __init__(self, watcher: ChangeWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        self._watcher._record_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._watcher._record_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._watcher._record_event(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._watcher._record_event(event)


def _event_paths(event: FileSystemEvent) -> tuple[set[Path], bool]:
    """Return ``(changed_file_paths, relevant)`` for one watchdog event.

    File creates, modifications and renames report paths. Deletions and
    directory creates/deletes/renames report no path but still count, so the
    consumer refreshes the tree structure.
    """
    if not event.is_directory and event.event_type in _FILE_CHANGE_EVENTS:
        paths = {Path(os.fsdecode(event.src_path))}
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.add(Path(os.fsdecode(dest_path)))
        return paths, True
    if event.event_type in _STRUCTURAL_EVENTS:
        return set(), True
    return set(), False


class ChangeWatcher:
    """Watches one directory subtree and reports debounced change batches.

    Bound-method callbacks are held weakly so the watcher never keeps its
    owner alive; when the owner is gone the next flush stops the watcher.
    """

    def __init__(
        self,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self._debounce_seconds = max(0.0, float(debounce_seconds))
        self._observer_factory = observer_factory
        self._lock = threading.Lock()
        self._observer = None
        self._path: Path | None = None
        self._callback: Callable[[], ChangeCallback | None] | None = None
        self._pending: set[Path] = set()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._running = False

    @property
    def debounce_seconds(self) -> float:
        return self._debounce_seconds

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, path: Path, on_change: ChangeCallback) -> bool:
        """Start watching ``path``; any previous subscription is stopped first.

        Returns ``False`` when the OS subscription cannot be created, in which
        case no notifications will be delivered.
        """
        self.stop()
        path = Path(path)
        if inspect.ismethod(on_change):
            callback_ref = weakref.WeakMethod(on_change)
        else:
            callback_ref = lambda: on_change  # noqa: E731

        observer = self._observer_factory()
        try:
            observer.schedule(_ChangeHandler(self), str(path), recursive=True)
            observer.start()
        except OSError as exc:
            logger.warning("cannot watch %s for changes: %s", path, exc)
            with contextlib.suppress(OSError, RuntimeError):
                observer.stop()
            return False

        with self._lock:
            self._observer = observer
            self._path = path
            self._callback = callback_ref
            self._pending = set()
            self._running = True
        logger.debug("watching %s", path)
        return True

    def stop(self) -> None:
        """Cancel any pending flush, drop pending changes, and unsubscribe.

        Safe to call any number of times.
        """
        with self._lock:
            self._generation += 1
            timer, self._timer = self._timer, None
            observer, self._observer = self._observer, None
            self._pending = set()
            self._callback = None
            self._running = False

        if timer is not None:
            timer.cancel()
        if observer is None:
            return
        observer.stop()
        if threading.current_thread() is not observer:
            observer.join(timeout=2.0)
        logger.debug("stopped watching %s", self._path)

    def _record_event(self, event: FileSystemEvent) -> None:
        paths, relevant = _event_paths(event)
        if not relevant:
            return
        with self._lock:
            if not self._running:
                return
            self._pending.update(paths)
            self._generation += 1
            token = self._generation
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self._debounce_seconds, self._flush, args=(token,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _flush(self, token: int) -> None:
        with self._lock:
            if token != self._generation or not self._running:
                return
            changes = frozenset(self._pending)
            self._pending = set()
            self._timer = None
            callback = self._callback() if self._callback is not None else None

        if callback is None:
            logger.debug("change listener for %s is gone; stopping", self._path)
            self.stop()
            return
        callback(changes)


__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "ChangeCallback",
    "ChangeWatcher",
]
