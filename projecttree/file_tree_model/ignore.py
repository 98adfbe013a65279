"""Fixed ignore-list policy for project tree traversal.

Directories matched here are pruned from every walk: never descended,
never listed, never contributing extensions to any aggregate.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

IGNORED_DIRECTORY_NAMES: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        ".next",
        ".nuxt",
        ".svelte-kit",
        "dist",
        "build",
        ".build",
        "DerivedData",
        ".cache",
        "__pycache__",
        ".venv",
        "venv",
        "vendor",
        "Pods",
        ".idea",
        ".vscode",
    }
)


@dataclass(frozen=True)
class IgnoreSet:
    """Exact, case-sensitive basename membership test for pruned directories."""

    names: frozenset[str] = IGNORED_DIRECTORY_NAMES

    def is_ignored(self, directory_name: str) -> bool:
        """Return whether a directory with basename ``directory_name`` is pruned."""
        return directory_name in self.names

    def is_ignored_path(self, path: Iterable[str]) -> bool:
        """Return whether any component of ``path`` (a sequence of parts) is pruned."""
        return any(part in self.names for part in path)


DEFAULT_IGNORE_SET = IgnoreSet()


__all__ = [
    "IGNORED_DIRECTORY_NAMES",
    "IgnoreSet",
    "DEFAULT_IGNORE_SET",
]
