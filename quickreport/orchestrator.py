"""Pipeline orchestration: scan, select, expand, summarize, serve."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import QuickReportConfig
from .llm.backends import Backend
from .logging import get_logger
from .models import DirectoryNode
from .scheduler import SummarizationScheduler
from .selector import FolderSelector, OperatorPrompt
from .store import SharedStateStore
from .tree import FileRef, select_and_expand
from .tree_scanner import TreeScanner

ServeFunction = Callable[[SharedStateStore], None]


class ServerError(RuntimeError):
    """Raised when the report server stops with an error."""


@dataclass
class RunOutcome:
    """What a completed summarization phase produced."""

    store: SharedStateStore
    targets: List[str]
    files: List[FileRef]


class Orchestrator:
    """Coordinates a quickreport run as a sequence of single-purpose phases."""

    def __init__(
        self,
        config: QuickReportConfig,
        backend: Backend,
        *,
        scanner: TreeScanner | None = None,
        prompt: OperatorPrompt | None = None,
        accept_empty: bool = False,
        listing_style: str = "plain",
    ) -> None:
        self.config = config
        self.backend = backend
        self.scanner = scanner or TreeScanner(
            ignored_dirs=config.scan.ignore_dirs or None,
            extensions=config.scan.extensions or None,
        )
        self.prompt = prompt
        self.accept_empty = accept_empty
        self.listing_style = listing_style
        self.logger = get_logger("orchestrator")

    def summarize(
        self,
        root: str | Path,
        *,
        targets: Optional[Sequence[str]] = None,
        on_store_ready: Optional[ServeFunction] = None,
    ) -> RunOutcome:
        """Run every phase up to and including the summarization join.

        ``targets`` skips folder negotiation. ``on_store_ready`` is invoked with
        the populated store before any summarization starts, which is how the
        server can be exposed while work is still in flight.
        """
        root_path = Path(root).expanduser().resolve()
        self.logger.info("Scanning %s", root_path)
        skeleton = self.scanner.scan(str(root_path), collect_files=False)

        if targets is None:
            chosen = self.select_folders(skeleton)
        else:
            chosen = list(targets)
            self.logger.info("Using folders from the command line: %s", ", ".join(chosen))

        tree, files = select_and_expand(skeleton, chosen, self.scanner)
        self.logger.info("Selected %d files across %d folders", len(files), len(chosen))

        store = SharedStateStore(tree, total_files=len(files))
        if on_store_ready is not None:
            on_store_ready(store)

        def _narrate(path: str, _summary: str) -> None:
            progress = store.read_progress_snapshot()
            self.logger.info("[%d/%d] %s", progress.completed_files, progress.total_files, path)

        scheduler = SummarizationScheduler(
            self.backend.summarizer,
            max_workers=self.config.summarize.max_workers,
            on_complete=_narrate,
        )
        scheduler.run(store, files)
        progress = store.read_progress_snapshot()
        self.logger.info(
            "Summarization finished: %d/%d files", progress.completed_files, progress.total_files
        )
        return RunOutcome(store=store, targets=chosen, files=files)

    def select_folders(self, skeleton: DirectoryNode) -> List[str]:
        selector = FolderSelector(
            self.backend.classifier,
            prompt=self.prompt,
            accept_empty=self.accept_empty,
            listing_style=self.listing_style,
        )
        return selector.run(skeleton)

    def run(self, root: str | Path, serve: ServeFunction, *, targets: Optional[Sequence[str]] = None) -> None:
        """Summarize ``root`` and then hand the store to ``serve``.

        With ``serve_during_summarization`` enabled the server starts on a
        daemon thread before the fan-out, so progress is visible live. A
        server that stops with an error (uvicorn exits when it cannot bind)
        raises ServerError in either mode.
        """
        if not self.config.summarize.serve_during_summarization:
            outcome = self.summarize(root, targets=targets)
            _serve_or_raise(serve, outcome.store)
            return

        threads: List[threading.Thread] = []
        failures: List[ServerError] = []

        def _serve_in_thread(store: SharedStateStore) -> None:
            try:
                _serve_or_raise(serve, store)
            except ServerError as exc:
                self.logger.error("%s", exc)
                failures.append(exc)

        def _start(store: SharedStateStore) -> None:
            thread = threading.Thread(
                target=_serve_in_thread, args=(store,), name="quickreport-server", daemon=True
            )
            threads.append(thread)
            thread.start()

        self.summarize(root, targets=targets, on_store_ready=_start)
        for thread in threads:
            thread.join()
        if failures:
            raise failures[0]


def _serve_or_raise(serve: ServeFunction, store: SharedStateStore) -> None:
    try:
        serve(store)
    except SystemExit as exc:
        if exc.code in (None, 0):
            return
        raise ServerError(f"Report server exited with status {exc.code}") from exc
    except Exception as exc:
        raise ServerError(f"Report server failed: {exc}") from exc


__all__ = ["Orchestrator", "RunOutcome", "ServerError"]
