"""Immutable snapshots of the filtered project tree.

A snapshot is built off the presentation thread: optionally rebuild the
extension index, reconcile the enabled-extension set with what was found,
list the root, pre-expand root-level directories one level, and re-expand
directories the user had open before.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .extensions import EnabledExtensionSet
from .fs import TreeScanner
from .types import FileNode


@dataclass(frozen=True)
class TreeSnapshot:
    """Result of one scan job: the root listing plus the filter it used."""

    root: Path
    extensions: EnabledExtensionSet
    nodes: tuple[FileNode, ...]
    rebuilt_index: bool

    def iter_nodes(self):
        """Yield every loaded node in the snapshot, depth-first."""
        for node in self.nodes:
            yield from node.iter_loaded()


def _normalize_expanded(root: Path, expanded: Iterable[Path]) -> frozenset[Path]:
    """Keep only expanded paths under ``root``."""
    normalized: set[Path] = set()
    for raw_path in expanded:
        path = Path(raw_path)
        if path != root and path.is_relative_to(root):
            normalized.add(path)
    return frozenset(normalized)


def build_tree_snapshot(
    scanner: TreeScanner,
    root: Path,
    extensions: EnabledExtensionSet,
    expanded: Iterable[Path] = (),
    *,
    rebuild_index: bool = True,
) -> TreeSnapshot:
    """Build a fresh snapshot of ``root`` filtered by ``extensions``.

    With ``rebuild_index`` the extension index is rebuilt and newly found
    extensions are merged into the filter; otherwise the existing index is
    reused and only the enabled predicate is re-applied.
    """
    root = Path(root)
    if rebuild_index:
        result = scanner.index.build_index(root)
        extensions = extensions.merge_discovered(result.all_extensions)

    enabled = extensions.enabled
    expanded_paths = _normalize_expanded(root, expanded)
    nodes = scanner.list_nodes(root, enabled)

    pending = [node for node in nodes if node.is_directory]
    while pending:
        node = pending.pop()
        scanner.load_children(node, enabled)
        for child in node.children or ():
            if child.is_directory and child.path in expanded_paths:
                pending.append(child)

    return TreeSnapshot(
        root=root,
        extensions=extensions,
        nodes=tuple(nodes),
        rebuilt_index=rebuild_index,
    )


__all__ = [
    "TreeSnapshot",
    "build_tree_snapshot",
]
