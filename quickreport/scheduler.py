"""Concurrent fan-out of file summarization work."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Optional, Sequence

from .llm.backends import Summarizer
from .logging import get_logger
from .prompting import EMPTY_FILE_SUMMARY, FAILED_SUMMARY
from .store import SharedStateStore
from .tree import FileRef

CompletionCallback = Callable[[str, str], None]

logger = get_logger("scheduler")


def read_source(path: str) -> str:
    """Return the file's text, or an empty string when it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Unable to read %s: %s", path, exc)
        return ""


def summarize_content(content: str, summarizer: Summarizer, *, path: str = "") -> str:
    """Summarize ``content``, substituting sentinels for empty input or backend failure."""
    if not content.strip():
        return EMPTY_FILE_SUMMARY
    try:
        return summarizer.summarize(content)
    except Exception as exc:
        logger.warning("Summary failed for %s: %s", path or "<content>", exc)
        return FAILED_SUMMARY


class SummarizationScheduler:
    """Summarizes every selected file on a worker pool and records results in the store.

    Each file is independent: a failure only affects that file's entry. The
    pool is bounded by ``max_workers``; completion order is unconstrained.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        *,
        max_workers: int = 16,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.summarizer = summarizer
        self.max_workers = max_workers
        self.on_complete = on_complete

    def run(self, store: SharedStateStore, files: Sequence[FileRef]) -> None:
        """Dispatch one task per file and block until all of them have finished."""
        if not files:
            return
        logger.info("Summarizing %d files with up to %d workers", len(files), self.max_workers)
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(files)),
            thread_name_prefix="quickreport-summary",
        ) as pool:
            futures = [pool.submit(self._summarize_one, store, path) for path, _name in files]
            wait(futures)
        for future in futures:
            # _summarize_one absorbs backend errors; anything left is a programming error.
            future.result()

    def _summarize_one(self, store: SharedStateStore, path: str) -> None:
        content = read_source(path)
        summary = summarize_content(content, self.summarizer, path=path)
        store.record_completion(path, summary)
        logger.debug("Summary complete: %s", path)
        if self.on_complete is not None:
            self.on_complete(path, summary)


__all__ = ["SummarizationScheduler", "read_source", "summarize_content"]
