"""Coarse file-kind classification used to pick tree icons."""

from __future__ import annotations

from pathlib import Path

from .extensions import file_extension

KIND_DIRECTORY = "directory"
KIND_MARKDOWN = "markdown"
KIND_JSON = "json"
KIND_YAML = "yaml"
KIND_MERMAID = "mermaid"
KIND_DOCUMENT = "document"

_KIND_BY_EXTENSION = {
    "md": KIND_MARKDOWN,
    "markdown": KIND_MARKDOWN,
    "json": KIND_JSON,
    "yaml": KIND_YAML,
    "yml": KIND_YAML,
    "mermaid": KIND_MERMAID,
}


def file_kind(path: Path, is_directory: bool) -> str:
    """Return the kind label for ``path``; unknown extensions are ``document``."""
    if is_directory:
        return KIND_DIRECTORY
    return _KIND_BY_EXTENSION.get(file_extension(path.name), KIND_DOCUMENT)


__all__ = [
    "KIND_DIRECTORY",
    "KIND_MARKDOWN",
    "KIND_JSON",
    "KIND_YAML",
    "KIND_MERMAID",
    "KIND_DOCUMENT",
    "file_kind",
]
