"""Domain datatypes for the filtered project tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .kinds import file_kind


@dataclass(frozen=True)
class DirectoryChild:
    """One visible immediate child of a listed directory."""

    name: str
    path: Path
    is_dir: bool


@dataclass(eq=False)
class FileNode:
    """One filesystem entry in the project tree.

    Identity is the path: two nodes for the same path compare equal and hash
    alike. ``children`` is ``None`` for files and a list for directories;
    directories start unloaded and are filled by ``TreeScanner.load_children``.
    """

    path: Path
    is_directory: bool
    children: list[FileNode] | None = field(default=None)
    is_loaded: bool = False

    def __post_init__(self) -> None:
        if self.is_directory and self.children is None:
            self.children = []
        elif not self.is_directory:
            self.children = None
            self.is_loaded = False

    @classmethod
    def from_child(cls, child: DirectoryChild) -> FileNode:
        return cls(path=child.path, is_directory=child.is_dir)

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def kind(self) -> str:
        return file_kind(self.path, self.is_directory)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileNode):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def iter_loaded(self):
        """Yield this node and every loaded descendant, depth-first."""
        yield self
        for child in self.children or ():
            yield from child.iter_loaded()

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready description of this node and its loaded children."""
        return {
            "path": str(self.path),
            "name": self.name,
            "is_dir": self.is_directory,
            "kind": self.kind,
            "is_loaded": self.is_loaded,
            "children": [child.to_dict() for child in self.children] if self.children is not None else None,
        }


__all__ = [
    "DirectoryChild",
    "FileNode",
]
