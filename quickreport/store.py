"""Thread-safe owner of the live directory tree and summarization progress."""

from __future__ import annotations

import copy
import threading

from .models import DirectoryNode, ProgressRecord
from .tree import apply_summary


class SharedStateStore:
    """Holds the annotated tree and the progress record for the serving phase.

    Writers go through :meth:`record_completion`; readers receive copies taken
    under the relevant lock, so a snapshot never reflects a half-applied update.
    State is only ever added to, never reset.
    """

    def __init__(self, tree: DirectoryNode, total_files: int) -> None:
        self._tree = tree
        self._progress = ProgressRecord(total_files=total_files)
        self._tree_lock = threading.Lock()
        self._progress_lock = threading.Lock()

    def read_tree_snapshot(self) -> DirectoryNode:
        with self._tree_lock:
            return copy.deepcopy(self._tree)

    def read_progress_snapshot(self) -> ProgressRecord:
        with self._progress_lock:
            return ProgressRecord(
                total_files=self._progress.total_files,
                completed_files=self._progress.completed_files,
                summaries=dict(self._progress.summaries),
            )

    def record_completion(self, path: str, summary: str) -> bool:
        """Record one finished attempt; returns whether the tree held a matching file."""
        with self._progress_lock:
            self._progress.completed_files += 1
            self._progress.summaries[path] = summary
        with self._tree_lock:
            return apply_summary(self._tree, path, summary)


__all__ = ["SharedStateStore"]
