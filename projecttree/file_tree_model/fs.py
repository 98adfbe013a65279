"""Filtered, lazily expanded directory listings for the project tree."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .extension_index import ExtensionIndex, classify_entry
from .extensions import file_extension
from .types import DirectoryChild, FileNode

logger = logging.getLogger(__name__)


def sort_children(children: Iterable[DirectoryChild]) -> list[DirectoryChild]:
    """Sort directories first, then case-insensitively by name."""
    return sorted(children, key=lambda item: (not item.is_dir, item.name.casefold(), item.name))


class TreeScanner:
    """Lists one directory level at a time, filtered by enabled extensions.

    Files are kept when their extension is enabled. Subdirectories are kept
    when they are not ignored and the extension index says something enabled
    lives below them.
    """

    def __init__(self, index: ExtensionIndex | None = None) -> None:
        self._index = index if index is not None else ExtensionIndex()

    @property
    def index(self) -> ExtensionIndex:
        return self._index

    def list_children(self, directory: Path, enabled: Iterable[str]) -> list[DirectoryChild]:
        """Return the visible immediate children of ``directory``.

        Enumeration failures give an empty listing.
        """
        enabled_set = enabled if isinstance(enabled, (set, frozenset)) else frozenset(enabled)
        ignore = self._index.ignore
        directory = Path(directory)
        children: list[DirectoryChild] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    name = entry.name
                    if name.startswith("."):
                        continue
                    is_dir = classify_entry(entry)
                    if is_dir is None:
                        continue
                    child_path = directory / name
                    if is_dir:
                        if ignore.is_ignored(name):
                            continue
                        if self._index.contains_any(child_path, enabled_set):
                            children.append(DirectoryChild(name=name, path=child_path, is_dir=True))
                        continue
                    ext = file_extension(name)
                    if ext and ext in enabled_set:
                        children.append(DirectoryChild(name=name, path=child_path, is_dir=False))
        except OSError as exc:
            logger.debug("cannot list %s: %s", directory, exc)
            return []
        return sort_children(children)

    def list_nodes(self, directory: Path, enabled: Iterable[str]) -> list[FileNode]:
        """Return ``list_children`` wrapped as fresh, unloaded ``FileNode`` objects."""
        return [FileNode.from_child(child) for child in self.list_children(directory, enabled)]

    def load_children(self, node: FileNode, enabled: Iterable[str]) -> bool:
        """Populate ``node.children`` once.

        Returns ``True`` when a listing was performed, ``False`` for files and
        already-loaded directories.
        """
        if not node.is_directory or node.is_loaded:
            return False
        node.children = self.list_nodes(node.path, enabled)
        node.is_loaded = True
        return True


__all__ = [
    "TreeScanner",
    "sort_children",
]
