"""Per-directory extension aggregates for one project root.

One traversal of the root records the extensions of each directory's
direct files, then folds them bottom-up so every directory maps to the
union of extensions anywhere beneath it. ``TreeScanner`` answers "does this
subtree contain anything visible" from that cache instead of re-walking.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from .extensions import file_extension
from .ignore import DEFAULT_IGNORE_SET, IgnoreSet

logger = logging.getLogger(__name__)

DEFAULT_MAX_SCAN_DEPTH = 64


@dataclass(frozen=True)
class ExtensionIndexResult:
    """Outcome of one ``build_index`` call."""

    root: Path
    all_extensions: frozenset[str]
    cache: Mapping[Path, frozenset[str]]


def classify_entry(entry: os.DirEntry) -> bool | None:
    """Return ``True`` for directories, ``False`` for files, ``None`` to skip.

    Symlinks to directories are skipped so traversal can never loop; symlinks
    to regular files count as files.
    """
    try:
        if entry.is_dir(follow_symlinks=False):
            return True
        if entry.is_symlink() and entry.is_dir():
            return None
        if entry.is_file():
            return False
    except OSError:
        return None
    return None


def walk_extensions(
    directory: Path,
    ignore: IgnoreSet = DEFAULT_IGNORE_SET,
    max_depth: int = DEFAULT_MAX_SCAN_DEPTH,
) -> tuple[frozenset[str], dict[Path, frozenset[str]]]:
    """Walk ``directory`` once and return ``(all_extensions, aggregates)``.

    ``aggregates`` holds an entry for every directory visited. A directory
    that cannot be read keeps whatever was read before the failure.
    Symlinked directories are never entered, so the walk always terminates;
    descending past ``max_depth`` levels is logged once and otherwise allowed.
    """
    direct: dict[Path, set[str]] = {}
    subdirectories: dict[Path, list[Path]] = {}
    visit_order: list[Path] = []
    all_extensions: set[str] = set()

    stack: list[tuple[Path, int]] = [(directory, 0)]
    warned_depth = False
    while stack:
        current, depth = stack.pop()
        visit_order.append(current)
        extensions = direct.setdefault(current, set())
        children = subdirectories.setdefault(current, [])
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    name = entry.name
                    if name.startswith("."):
                        continue
                    is_dir = classify_entry(entry)
                    if is_dir is None:
                        continue
                    if is_dir:
                        if ignore.is_ignored(name):
                            continue
                        child = current / name
                        if depth >= max_depth and not warned_depth:
                            warned_depth = True
                            logger.warning("%s is more than %d levels below %s", child, max_depth, directory)
                        children.append(child)
                        stack.append((child, depth + 1))
                        continue
                    ext = file_extension(name)
                    if ext:
                        extensions.add(ext)
                        all_extensions.add(ext)
        except OSError as exc:
            logger.debug("cannot enumerate %s: %s", current, exc)

    # Children are always visited after their parent, so reverse order is post-order.
    aggregates: dict[Path, frozenset[str]] = {}
    for current in reversed(visit_order):
        combined = set(direct[current])
        for child in subdirectories[current]:
            combined.update(aggregates[child])
        aggregates[current] = frozenset(combined)
    return frozenset(all_extensions), aggregates


class ExtensionIndex:
    """Extension cache owned by one project session.

    ``build_index`` always rebuilds from scratch; switching to a different
    root discards every entry of the previous root first. Reads and writes
    are guarded so a background rebuild can swap the cache while the
    presentation thread expands directories.
    """

    def __init__(self, ignore: IgnoreSet = DEFAULT_IGNORE_SET, max_depth: int = DEFAULT_MAX_SCAN_DEPTH) -> None:
        self._ignore = ignore
        self._max_depth = max(1, int(max_depth))
        self._lock = threading.Lock()
        self._root: Path | None = None
        self._all_extensions: frozenset[str] = frozenset()
        self._cache: dict[Path, frozenset[str]] = {}

    @property
    def ignore(self) -> IgnoreSet:
        return self._ignore

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def all_extensions(self) -> frozenset[str]:
        return self._all_extensions

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, directory: object) -> bool:
        with self._lock:
            return directory in self._cache

    def clear(self) -> None:
        """Drop every cached aggregate and forget the root."""
        with self._lock:
            self._cache = {}
            self._all_extensions = frozenset()
            self._root = None

    def build_index(self, root: Path) -> ExtensionIndexResult:
        """Walk ``root`` and replace the cache with its aggregates."""
        root = Path(root)
        with self._lock:
            if self._root != root:
                self._cache = {}
                self._all_extensions = frozenset()
                self._root = root

        all_extensions, aggregates = walk_extensions(root, self._ignore, self._max_depth)
        logger.debug("indexed %s: %d directories, %d extensions", root, len(aggregates), len(all_extensions))

        with self._lock:
            self._root = root
            self._cache = aggregates
            self._all_extensions = all_extensions
        return ExtensionIndexResult(
            root=root,
            all_extensions=all_extensions,
            cache=MappingProxyType(dict(aggregates)),
        )

    def collect_extensions(self, root: Path) -> list[str]:
        """Build the index for ``root`` and return its extensions sorted."""
        return sorted(self.build_index(root).all_extensions)

    def cached_extensions(self, directory: Path) -> frozenset[str] | None:
        """Return the cached aggregate for ``directory`` or ``None`` on a miss."""
        with self._lock:
            return self._cache.get(Path(directory))

    def extensions_under(self, directory: Path) -> frozenset[str]:
        """Return the aggregate for ``directory``, scanning it directly on a miss.

        Aggregates found by the fallback scan are cached when ``directory``
        lies under the current root.
        """
        directory = Path(directory)
        cached = self.cached_extensions(directory)
        if cached is not None:
            return cached

        logger.debug("extension cache miss for %s; scanning directly", directory)
        _all, aggregates = walk_extensions(directory, self._ignore, self._max_depth)
        with self._lock:
            if self._root is not None and directory.is_relative_to(self._root):
                for path, extensions in aggregates.items():
                    self._cache.setdefault(path, extensions)
        return aggregates.get(directory, frozenset())

    def contains_any(self, directory: Path, enabled: Iterable[str]) -> bool:
        """Return whether anything under ``directory`` has an enabled extension."""
        return not self.extensions_under(directory).isdisjoint(enabled)


__all__ = [
    "DEFAULT_MAX_SCAN_DEPTH",
    "ExtensionIndexResult",
    "ExtensionIndex",
    "classify_entry",
    "walk_extensions",
]
