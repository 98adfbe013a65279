"""Project-tree orchestration for one open project.

``ProjectTreeController`` owns the extension index, the enabled-extension
filter, the change watcher, and the background scan scheduler for a single
root directory. The presentation layer drives it from one thread:

- ``set_root`` / ``refresh`` / filter mutations schedule scan jobs
- ``process_pending`` applies finished jobs and reacts to watcher batches
- ``on_tree_changed`` listeners fire whenever a new listing becomes ready

Each job carries a request id; only the newest request's result is applied,
so a slow, superseded scan can never overwrite newer state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from ..file_tree_model import (
    EnabledExtensionSet,
    ExtensionIndex,
    FileNode,
    TreeScanner,
    TreeSnapshot,
    build_tree_snapshot,
)
from ..watch import DEFAULT_DEBOUNCE_SECONDS, ChangeWatcher
from .scan_scheduler import ScanScheduler

logger = logging.getLogger(__name__)

STATE_EMPTY = "empty"
STATE_SCANNING = "scanning"
STATE_READY = "ready"

TreeListener = Callable[["ProjectTreeController"], None]


class ProjectTreeController:
    """Filtered, live project tree over one root directory."""

    def __init__(
        self,
        *,
        index: ExtensionIndex | None = None,
        background: bool = True,
        watch: bool = False,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        watcher_factory: Callable[..., ChangeWatcher] = ChangeWatcher,
    ) -> None:
        self._scanner = TreeScanner(index if index is not None else ExtensionIndex())
        self._scheduler = ScanScheduler(background=background)
        self._watcher = watcher_factory(debounce_seconds=debounce_seconds) if watch else None

        self._root: Path | None = None
        self._state = STATE_EMPTY
        self._extensions = EnabledExtensionSet()
        self._nodes: tuple[FileNode, ...] = ()
        self._nodes_by_path: dict[Path, FileNode] = {}
        self._expanded: set[Path] = set()
        self._latest_request_id: int | None = None
        self._rebuild_outstanding = False
        self._listeners: list[TreeListener] = []

        # Written from the watcher's timer thread.
        self._modified_lock = threading.Lock()
        self._modified: set[Path] = set()
        self._refresh_requested = threading.Event()

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def state(self) -> str:
        return self._state

    @property
    def scanner(self) -> TreeScanner:
        return self._scanner

    @property
    def index(self) -> ExtensionIndex:
        return self._scanner.index

    @property
    def watcher(self) -> ChangeWatcher | None:
        return self._watcher

    @property
    def extensions(self) -> EnabledExtensionSet:
        return self._extensions

    @property
    def available_extensions(self) -> tuple[str, ...]:
        return self._extensions.available

    @property
    def enabled_extensions(self) -> frozenset[str]:
        return self._extensions.enabled

    @property
    def refresh_requested(self) -> bool:
        return self._refresh_requested.is_set()

    # Root lifecycle

    def set_root(self, path: Path | None) -> None:
        """Switch to ``path`` and start scanning it; ``None`` clears the root."""
        if path is None:
            self.clear_root()
            return
        root = Path(path).resolve()
        if root == self._root:
            self.refresh()
            return

        self._reset_session()
        self._root = root
        logger.debug("project root set to %s", root)
        if self._watcher is not None:
            self._watcher.start(root, self._on_files_changed)
        self._schedule(rebuild_index=True)

    def clear_root(self) -> None:
        """Forget the root, stop watching, and discard in-flight scans."""
        self._reset_session()
        self._root = None

    def close(self) -> None:
        """Tear down the session; the controller may be reused via ``set_root``."""
        self.clear_root()

    def __enter__(self) -> ProjectTreeController:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def _reset_session(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
        self._latest_request_id = None
        self._rebuild_outstanding = False
        self._scanner.index.clear()
        self._state = STATE_EMPTY
        self._extensions = EnabledExtensionSet()
        self._nodes = ()
        self._nodes_by_path = {}
        self._expanded = set()
        self._refresh_requested.clear()
        with self._modified_lock:
            self._modified.clear()

    # Scanning

    def refresh(self) -> None:
        """Rebuild the extension index and listing for the current root."""
        self._schedule(rebuild_index=True)

    def _refilter(self) -> None:
        self._schedule(rebuild_index=False)

    def _schedule(self, *, rebuild_index: bool) -> None:
        self._submit(rebuild_index=rebuild_index)
        if not self._scheduler.background:
            self.process_pending()

    def _submit(self, *, rebuild_index: bool) -> None:
        root = self._root
        if root is None:
            return
        if rebuild_index:
            self._rebuild_outstanding = True
        # A superseded rebuild must not be lost to a later filter-only request.
        rebuild = rebuild_index or self._rebuild_outstanding
        scanner = self._scanner
        extensions = self._extensions
        expanded = frozenset(self._expanded)

        def job() -> TreeSnapshot:
            return build_tree_snapshot(scanner, root, extensions, expanded, rebuild_index=rebuild)

        self._state = STATE_SCANNING
        self._latest_request_id = self._scheduler.schedule(job)

    def process_pending(self) -> bool:
        """Apply finished scans and pending watcher refreshes.

        Must be called from the presentation thread. Returns ``True`` when the
        latest scan finished, with a new listing or with a logged failure.
        """
        if self._refresh_requested.is_set():
            self._refresh_requested.clear()
            self._submit(rebuild_index=True)

        applied = False
        for result in self._scheduler.drain_results():
            if result.request_id != self._latest_request_id:
                logger.debug("discarding stale scan result %d", result.request_id)
                continue
            if result.error is not None:
                self._apply_failure()
            else:
                self._apply(result.payload)
            applied = True
        return applied

    def _apply_failure(self) -> None:
        # The previous listing stays; the next refresh retries the rebuild.
        self._state = STATE_READY if self._root is not None else STATE_EMPTY
        self._notify()

    def _apply(self, snapshot: TreeSnapshot) -> None:
        self._nodes = snapshot.nodes
        self._nodes_by_path = {node.path: node for node in snapshot.iter_nodes()}
        self._extensions = snapshot.extensions
        if snapshot.rebuilt_index:
            self._rebuild_outstanding = False
        self._state = STATE_READY
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # Extension filter

    def toggle_extension(self, extension: str) -> None:
        self._extensions = self._extensions.toggled(extension)
        self._refilter()

    def enable_all(self) -> None:
        self._extensions = self._extensions.with_all_enabled()
        self._refilter()

    def disable_all(self) -> None:
        self._extensions = self._extensions.with_none_enabled()
        self._refilter()

    def set_enabled_extensions(self, extensions: Iterable[str]) -> None:
        self._extensions = self._extensions.with_enabled(extensions)
        self._refilter()

    # Presentation surface

    def get_root_listing(self) -> list[FileNode]:
        return list(self._nodes)

    def node_for(self, path: Path) -> FileNode | None:
        return self._nodes_by_path.get(Path(path))

    def expand_directory(self, path: Path) -> list[FileNode]:
        """Load (once) and return the children of the directory at ``path``.

        The directory is remembered as expanded and re-expanded in later
        snapshots. Unknown paths and files give an empty list.
        """
        node = self.node_for(path)
        if node is None or not node.is_directory:
            return []
        if self._scanner.load_children(node, self._extensions.enabled):
            for child in node.children or ():
                self._nodes_by_path[child.path] = child
        self._expanded.add(node.path)
        return list(node.children or ())

    def collapse_directory(self, path: Path) -> None:
        """Stop re-expanding ``path`` in later snapshots."""
        self._expanded.discard(Path(path))

    def on_tree_changed(self, callback: TreeListener) -> Callable[[], None]:
        """Register ``callback`` for new listings; returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # Modified markers

    @property
    def modified_paths(self) -> frozenset[Path]:
        with self._modified_lock:
            return frozenset(self._modified)

    def is_modified(self, path: Path) -> bool:
        with self._modified_lock:
            return Path(path) in self._modified

    def mark_files_modified(self, paths: Iterable[Path]) -> None:
        """Record ``paths`` as modified, skipping anything under ignored directories."""
        root = self._root
        ignore = self._scanner.index.ignore
        relevant: set[Path] = set()
        for raw_path in paths:
            path = Path(raw_path)
            parts = path.relative_to(root).parts if root is not None and path.is_relative_to(root) else path.parts
            if ignore.is_ignored_path(parts):
                continue
            relevant.add(path)
        with self._modified_lock:
            self._modified.update(relevant)

    def mark_viewed(self, path: Path) -> None:
        """Clear the modified marker for ``path`` once the user has opened it."""
        with self._modified_lock:
            self._modified.discard(Path(path))

    def _on_files_changed(self, paths: frozenset[Path]) -> None:
        # Runs on the watcher's timer thread; the refresh itself happens in
        # ``process_pending`` on the presentation thread.
        self.mark_files_modified(paths)
        self._refresh_requested.set()


__all__ = [
    "STATE_EMPTY",
    "STATE_SCANNING",
    "STATE_READY",
    "TreeListener",
    "ProjectTreeController",
]
