"""Filesystem scanning into ``DirectoryNode`` trees."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Tuple

from .logging import get_logger
from .models import DirectoryNode, FileEntry

DEFAULT_IGNORED_DIRS = frozenset(
    {
        ".git",
        ".github",
        ".gitignore",
        ".pytest_cache",
        "site-packages",
    }
)

DEFAULT_CODE_EXTENSIONS = frozenset(
    {
        "rs",
        "py",
        "js",
        "ts",
        "java",
        "cpp",
        "c",
        "go",
        "sh",
        "rb",
        "bat",
        "cs",
        "resx",
        "h",
        "md",
    }
)

logger = get_logger("scanner")


def _file_extension(name: str) -> str:
    # Dotfiles such as ".bashrc" have no extension.
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return ""
    return ext


class TreeScanner:
    """Builds directory trees, optionally collecting eligible code files."""

    def __init__(
        self,
        *,
        ignored_dirs: Iterable[str] | None = None,
        extensions: Iterable[str] | None = None,
    ) -> None:
        self.ignored_dirs = frozenset(ignored_dirs) if ignored_dirs else DEFAULT_IGNORED_DIRS
        self.extensions = (
            frozenset(ext.lstrip(".") for ext in extensions) if extensions else DEFAULT_CODE_EXTENSIONS
        )

    def scan(self, root: str, *, collect_files: bool = False) -> DirectoryNode:
        """Validate ``root`` and return its tree."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")
        return self.build(str(root_path), collect_files=collect_files)

    def build(self, path: str, *, collect_files: bool) -> DirectoryNode:
        """Recursively build the node for ``path``.

        Subdirectories and files are sorted by name. Symlinked directories are
        skipped. Directories that cannot be listed produce an empty node
        instead of failing the whole build.
        """
        node = DirectoryNode(name=os.path.basename(path.rstrip("/")) or path, path=path)

        try:
            subdirs, files = self._list_entries(path, collect_files)
        except OSError as exc:
            logger.debug("Unable to read directory %s: %s", path, exc)
            return node

        for name in subdirs:
            node.children.append(self.build(f"{path.rstrip('/')}/{name}", collect_files=collect_files))
        node.files = [FileEntry(name=name) for name in files]
        return node

    def is_code_file(self, name: str) -> bool:
        return _file_extension(name) in self.extensions

    def _list_entries(self, path: str, collect_files: bool) -> Tuple[List[str], List[str]]:
        subdirs: List[str] = []
        files: List[str] = []
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        if entry.name not in self.ignored_dirs:
                            subdirs.append(entry.name)
                    elif collect_files and entry.is_file() and self.is_code_file(entry.name):
                        files.append(entry.name)
                except OSError:
                    continue
        subdirs.sort()
        files.sort()
        return subdirs, files


__all__ = ["DEFAULT_CODE_EXTENSIONS", "DEFAULT_IGNORED_DIRS", "TreeScanner"]
