"""Traversal, selection, and serialisation helpers for directory trees."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Collection, Dict, Iterator, List, Protocol, Tuple

from .models import DirectoryNode, ProgressRecord

LISTING_STYLES = ("plain", "annotated")

FileRef = Tuple[str, str]


class NodeBuilder(Protocol):
    def build(self, path: str, *, collect_files: bool) -> DirectoryNode: ...


def join_path(directory: str, name: str) -> str:
    return f"{directory.rstrip('/')}/{name}"


def list_folder_names(
    root: DirectoryNode,
    *,
    style: str = "plain",
    include_files: bool = False,
) -> str:
    """Return an indented pre-order listing of every directory in the tree.

    ``plain`` prints one name per line; ``annotated`` labels each entry with its
    parent folder so a classifier can tell apart identically named folders.
    """
    if style not in LISTING_STYLES:
        raise ValueError(f"Unknown listing style '{style}'")
    lines: List[str] = []
    _collect_listing(root, 0, None, style, include_files, lines)
    return "".join(f"{line}\n" for line in lines)


def _collect_listing(
    node: DirectoryNode,
    depth: int,
    parent: str | None,
    style: str,
    include_files: bool,
    lines: List[str],
) -> None:
    indent = "  " * depth
    if style == "annotated":
        origin = f"top folder: {parent}" if parent is not None else "root folder"
        lines.append(f"{indent}folder: {node.name} ({origin})")
    else:
        lines.append(f"{indent}{node.name}")
    for child in node.children:
        _collect_listing(child, depth + 1, node.name, style, include_files, lines)
    if include_files:
        file_indent = "  " * (depth + 1)
        lines.extend(f"{file_indent}{entry.name}" for entry in node.files)


def iter_files(node: DirectoryNode) -> Iterator[FileRef]:
    """Yield ``(path, name)`` for every file under ``node``: own files first, then children."""
    for entry in node.files:
        yield join_path(node.path, entry.name), entry.name
    for child in node.children:
        yield from iter_files(child)


def select_and_expand(
    root: DirectoryNode,
    targets: Collection[str],
    builder: NodeBuilder,
) -> Tuple[DirectoryNode, List[FileRef]]:
    """Deep-rebuild every subtree whose name matches a target.

    Matching is case-insensitive on the node name. A matched node is replaced by
    a fresh deep build of its path and its files are returned; matched subtrees
    are not searched for further matches. Returns a new tree; ``root`` is left
    untouched.
    """
    wanted = {name.lower() for name in targets}
    selected: List[FileRef] = []
    new_root = _expand(root, wanted, builder, selected)
    return new_root, selected


def _expand(
    node: DirectoryNode,
    wanted: Collection[str],
    builder: NodeBuilder,
    selected: List[FileRef],
) -> DirectoryNode:
    if node.name.lower() in wanted:
        rebuilt = builder.build(node.path, collect_files=True)
        selected.extend(iter_files(rebuilt))
        return rebuilt
    children = [_expand(child, wanted, builder, selected) for child in node.children]
    return replace(node, children=children, files=[replace(entry) for entry in node.files])


def apply_summary(root: DirectoryNode, path: str, summary: str) -> bool:
    """Set the summary of the file at ``path``; returns False when no such file is known."""
    node = root
    while True:
        for entry in node.files:
            if join_path(node.path, entry.name) == path:
                entry.summary = summary
                return True
        for child in node.children:
            if path.startswith(child.path.rstrip("/") + "/"):
                node = child
                break
        else:
            return False


def tree_to_dict(node: DirectoryNode) -> Dict[str, Any]:
    return {
        "name": node.name,
        "path": node.path,
        "subdirs": [tree_to_dict(child) for child in node.children],
        "files": [{"name": entry.name, "summary": entry.summary} for entry in node.files],
    }


def progress_to_dict(progress: ProgressRecord) -> Dict[str, Any]:
    return {
        "total_files": progress.total_files,
        "completed_files": progress.completed_files,
        "summaries": dict(progress.summaries),
    }


__all__ = [
    "FileRef",
    "LISTING_STYLES",
    "apply_summary",
    "iter_files",
    "join_path",
    "list_folder_names",
    "progress_to_dict",
    "select_and_expand",
    "tree_to_dict",
]
