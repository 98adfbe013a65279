"""Command-line front door for projecttree.

Scans a project root, prints the extension-filtered tree, and optionally
keeps watching the root, reprinting whenever a change batch lands.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path

from .config import load_debounce_seconds, load_log_level, load_max_scan_depth
from .file_tree_model import ExtensionIndex, FileNode, normalize_extension
from .runtime import ProjectTreeController

WATCH_POLL_SECONDS = 0.1


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _extension_list(value: str) -> list[str]:
    """argparse type for comma-separated extensions (``md,.txt`` -> ``md, txt``)."""
    extensions = [normalize_extension(part) for part in value.split(",")]
    return [ext for ext in extensions if ext]


def display_name(name: str) -> str:
    """Return ``name`` as printable text; undecodable bytes become U+FFFD."""
    return os.fsencode(name).decode("utf-8", "replace")


def format_tree_lines(
    controller: ProjectTreeController,
    nodes: list[FileNode],
    max_depth: int,
    depth: int = 0,
) -> list[str]:
    """Render ``nodes`` as indented rows, expanding directories up to ``max_depth``."""
    lines: list[str] = []
    indent = "  " * depth
    for node in nodes:
        if node.is_directory:
            expand = depth + 1 < max_depth
            marker = "▾ " if expand else "▸ "
            lines.append(f"{indent}{marker}{display_name(node.name)}/")
            if expand:
                children = controller.expand_directory(node.path)
                lines.extend(format_tree_lines(controller, children, max_depth, depth + 1))
            continue
        suffix = " *" if controller.is_modified(node.path) else ""
        lines.append(f"{indent}  {display_name(node.name)}{suffix}")
    return lines


def render_tree(controller: ProjectTreeController, max_depth: int) -> str:
    root = controller.root
    header = f"{display_name(root.name or str(root))}/" if root is not None else ""
    lines = [header, *format_tree_lines(controller, controller.get_root_listing(), max_depth)]
    return "\n".join(lines) + "\n"


def render_tree_json(controller: ProjectTreeController, max_depth: int) -> str:
    # Expansion side effects load the requested depth before serializing.
    format_tree_lines(controller, controller.get_root_listing(), max_depth)
    payload = {
        "root": str(controller.root),
        "available_extensions": list(controller.available_extensions),
        "enabled_extensions": sorted(controller.enabled_extensions),
        "nodes": [node.to_dict() for node in controller.get_root_listing()],
    }
    return json.dumps(payload, indent=2) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projecttree",
        description="Print a project's file tree filtered by file extension.",
    )
    parser.add_argument("root", nargs="?", default=".", help="project root directory (default: .)")
    parser.add_argument(
        "-e",
        "--extensions",
        type=_extension_list,
        default=None,
        help="comma-separated extensions to show (default: every extension found)",
    )
    parser.add_argument(
        "--depth",
        type=_positive_int,
        default=2,
        help="number of directory levels to print expanded (default: 2)",
    )
    parser.add_argument("--json", action="store_true", help="print the tree as JSON")
    parser.add_argument("--watch", action="store_true", help="keep running and reprint on changes")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the filtered tree for the chosen root."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else load_log_level(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = Path(args.root).expanduser()
    if not root.is_dir():
        parser.error(f"not a directory: {root}")

    render = render_tree_json if args.json else render_tree
    controller = ProjectTreeController(
        index=ExtensionIndex(max_depth=load_max_scan_depth()),
        background=False,
        watch=args.watch,
        debounce_seconds=load_debounce_seconds(),
    )
    with controller:
        controller.set_root(root)
        if args.extensions is not None:
            controller.set_enabled_extensions(args.extensions)
        sys.stdout.write(render(controller, args.depth))
        sys.stdout.flush()

        if not args.watch:
            return
        try:
            while True:
                time.sleep(WATCH_POLL_SECONDS)
                if controller.process_pending():
                    sys.stdout.write("\n" + render(controller, args.depth))
                    sys.stdout.flush()
        except KeyboardInterrupt:
            pass


if __name__ == "__main__":
    main()
