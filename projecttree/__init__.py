"""Public package surface for projecttree.

Exports the controller and tree model types for embedding, plus ``main``
for programmatic CLI invocation.
"""

from __future__ import annotations

from .file_tree_model import EnabledExtensionSet, ExtensionIndex, FileNode, IgnoreSet, TreeScanner
from .runtime import ProjectTreeController
from .watch import ChangeWatcher


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ChangeWatcher",
    "EnabledExtensionSet",
    "ExtensionIndex",
    "FileNode",
    "IgnoreSet",
    "ProjectTreeController",
    "TreeScanner",
    "main",
]
