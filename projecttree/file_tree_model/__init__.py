"""Domain model for the filtered project file tree.

This package contains non-UI tree primitives:
- the fixed ignore-list policy
- per-directory extension aggregates for a project root
- filtered, lazily expanded directory listings
- the enabled-extension policy and tree snapshots built from it
"""

from __future__ import annotations

from .extension_index import DEFAULT_MAX_SCAN_DEPTH, ExtensionIndex, ExtensionIndexResult, walk_extensions
from .extensions import EnabledExtensionSet, file_extension, normalize_extension
from .fs import TreeScanner, sort_children
from .ignore import DEFAULT_IGNORE_SET, IGNORED_DIRECTORY_NAMES, IgnoreSet
from .kinds import file_kind
from .snapshot import TreeSnapshot, build_tree_snapshot
from .types import DirectoryChild, FileNode

__all__ = [
    "DEFAULT_IGNORE_SET",
    "IGNORED_DIRECTORY_NAMES",
    "IgnoreSet",
    "DEFAULT_MAX_SCAN_DEPTH",
    "ExtensionIndex",
    "ExtensionIndexResult",
    "walk_extensions",
    "EnabledExtensionSet",
    "file_extension",
    "normalize_extension",
    "TreeScanner",
    "sort_children",
    "file_kind",
    "TreeSnapshot",
    "build_tree_snapshot",
    "DirectoryChild",
    "FileNode",
]
