"""Tests for quickreport.store."""

from __future__ import annotations

import threading

from quickreport.models import DirectoryNode, FileEntry
from quickreport.store import SharedStateStore


def _tree(count: int) -> DirectoryNode:
    return DirectoryNode(
        name="root",
        path="/r",
        files=[FileEntry(name=f"f{index}.py") for index in range(count)],
    )


def test_record_completion_updates_progress_and_tree() -> None:
    store = SharedStateStore(_tree(2), total_files=2)

    assert store.record_completion("/r/f0.py", "zero") is True

    progress = store.read_progress_snapshot()
    assert progress.total_files == 2
    assert progress.completed_files == 1
    assert progress.summaries == {"/r/f0.py": "zero"}
    tree = store.read_tree_snapshot()
    assert [entry.summary for entry in tree.files] == ["zero", None]


def test_unknown_path_still_counts_toward_progress() -> None:
    store = SharedStateStore(_tree(1), total_files=1)

    assert store.record_completion("/r/deleted.py", "gone") is False

    progress = store.read_progress_snapshot()
    assert progress.completed_files == 1
    assert store.read_tree_snapshot().files[0].summary is None


def test_snapshots_are_detached_from_live_state() -> None:
    store = SharedStateStore(_tree(1), total_files=1)
    tree = store.read_tree_snapshot()
    progress = store.read_progress_snapshot()

    tree.files[0].summary = "tampered"
    progress.summaries["/r/x.py"] = "tampered"
    store.record_completion("/r/f0.py", "real")

    assert store.read_tree_snapshot().files[0].summary == "real"
    assert store.read_progress_snapshot().summaries == {"/r/f0.py": "real"}
    assert tree.files[0].summary == "tampered"


def test_concurrent_completions_do_not_lose_updates() -> None:
    count = 200
    store = SharedStateStore(_tree(count), total_files=count)
    start = threading.Barrier(8)

    def _worker(offset: int) -> None:
        start.wait()
        for index in range(offset, count, 8):
            store.record_completion(f"/r/f{index}.py", f"s{index}")

    threads = [threading.Thread(target=_worker, args=(offset,)) for offset in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    progress = store.read_progress_snapshot()
    assert progress.completed_files == count == len(progress.summaries)
    tree = store.read_tree_snapshot()
    assert all(entry.summary == f"s{index}" for index, entry in enumerate(tree.files))
