"""Extension helpers and the session-scoped enabled-extension policy."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass


def file_extension(name: str) -> str:
    """Return the lowercase extension of ``name`` without its dot.

    ``"notes.MD"`` gives ``"md"``, ``"archive.tar.gz"`` gives ``"gz"``; names
    without an extension (``"README"``, ``"name."``, ``".bashrc"``) give ``""``.
    """
    return os.path.splitext(name)[1][1:].lower()


def normalize_extension(extension: str) -> str:
    """Return ``extension`` trimmed, without leading dots, lowercased (``" .MD"`` -> ``"md"``)."""
    return extension.strip().lstrip(".").lower()


def _normalize(extensions: Iterable[str]) -> frozenset[str]:
    normalized = (normalize_extension(ext) for ext in extensions)
    return frozenset(ext for ext in normalized if ext)


@dataclass(frozen=True)
class EnabledExtensionSet:
    """Discovered extensions plus the subset the user wants visible.

    Instances are immutable; every mutation returns a new set so background
    scan jobs can work from a consistent copy.
    """

    available: tuple[str, ...] = ()
    enabled: frozenset[str] = frozenset()

    def merge_discovered(self, discovered: Iterable[str]) -> EnabledExtensionSet:
        """Adopt a freshly discovered extension set.

        First discovery (nothing available yet) enables everything. Later
        discoveries auto-enable only extensions not seen before, so explicit
        disables survive refreshes.
        """
        found = _normalize(discovered)
        available = tuple(sorted(found))
        if not self.available:
            return EnabledExtensionSet(available=available, enabled=found)
        added = found.difference(self.available)
        return EnabledExtensionSet(available=available, enabled=self.enabled | added)

    def toggled(self, extension: str) -> EnabledExtensionSet:
        ext = normalize_extension(extension)
        if not ext:
            return self
        if ext in self.enabled:
            return EnabledExtensionSet(available=self.available, enabled=self.enabled - {ext})
        return EnabledExtensionSet(available=self.available, enabled=self.enabled | {ext})

    def with_all_enabled(self) -> EnabledExtensionSet:
        return EnabledExtensionSet(available=self.available, enabled=frozenset(self.available))

    def with_none_enabled(self) -> EnabledExtensionSet:
        return EnabledExtensionSet(available=self.available, enabled=frozenset())

    def with_enabled(self, extensions: Iterable[str]) -> EnabledExtensionSet:
        return EnabledExtensionSet(available=self.available, enabled=_normalize(extensions))

    def is_enabled(self, extension: str) -> bool:
        return normalize_extension(extension) in self.enabled


__all__ = [
    "file_extension",
    "normalize_extension",
    "EnabledExtensionSet",
]
