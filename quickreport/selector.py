"""Interactive negotiation of which folders to summarize."""

from __future__ import annotations

import enum
import json
from typing import Callable, List, Sequence

from .llm.backends import FolderClassifier
from .llm.errors import BackendError
from .logging import get_logger
from .models import DirectoryNode
from .prompting import ANALYSIS_KEY, HINT_TEMPLATE
from .tree import list_folder_names

OperatorPrompt = Callable[[Sequence[str]], str]


class ClassificationError(RuntimeError):
    """Raised when the classifier cannot produce a usable folder list."""


class SelectorState(enum.Enum):
    SCANNING = "scanning"
    AWAITING_CLASSIFICATION = "awaiting_classification"
    AWAITING_OPERATOR = "awaiting_operator"
    FINALIZED = "finalized"


def parse_classification(text: str) -> List[str]:
    """Parse ``{"analysis_key": [...]}``; anything else is a ClassificationError."""
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ClassificationError(f"Classifier response is not valid JSON: {text!r}") from exc
    if not isinstance(payload, dict) or ANALYSIS_KEY not in payload:
        raise ClassificationError(f"Classifier response lacks '{ANALYSIS_KEY}': {text!r}")
    names = payload[ANALYSIS_KEY]
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise ClassificationError(f"'{ANALYSIS_KEY}' must be an array of strings: {text!r}")
    return names


class FolderSelector:
    """Alternates between the classifier and the operator until the folder set is confirmed."""

    def __init__(
        self,
        classifier: FolderClassifier,
        *,
        prompt: OperatorPrompt | None = None,
        done_keyword: str = "ok",
        accept_empty: bool = False,
        listing_style: str = "plain",
    ) -> None:
        self.classifier = classifier
        self.prompt = prompt
        self.done_keyword = done_keyword.lower()
        self.accept_empty = accept_empty
        self.listing_style = listing_style
        self.state = SelectorState.SCANNING
        self.hints = ""
        self.logger = get_logger("selector")

    def run(self, tree: DirectoryNode) -> List[str]:
        """Return the confirmed target folder names for ``tree``.

        Without an operator prompt the first classifier answer is final.
        """
        while True:
            self.state = SelectorState.SCANNING
            listing = list_folder_names(tree, style=self.listing_style)
            self.logger.info("Collected folders:\n%s", listing.rstrip("\n"))

            self.state = SelectorState.AWAITING_CLASSIFICATION
            answer = self._classify(listing)
            self.logger.info("Classifier selected: %s", ", ".join(answer) or "(none)")

            if self.prompt is None or self._confirm(self.prompt, answer):
                self.state = SelectorState.FINALIZED
                self.logger.info("Final folder selection: %s", ", ".join(answer) or "(none)")
                return answer

    def _confirm(self, prompt: OperatorPrompt, answer: List[str]) -> bool:
        """Ask the operator about ``answer``; False means rescan with the new hint."""
        self.state = SelectorState.AWAITING_OPERATOR
        while True:
            reply = prompt(answer).strip()
            if self._is_done(reply):
                return True
            if reply:
                self.hints += HINT_TEMPLATE.format(folders=reply)
                return False

    def _is_done(self, reply: str) -> bool:
        if not reply:
            return self.accept_empty
        return reply.lower() == self.done_keyword

    def _classify(self, listing: str) -> List[str]:
        try:
            text = self.classifier.classify(listing, self.hints)
        except BackendError as exc:
            raise ClassificationError(f"Folder classification failed: {exc}") from exc
        self.logger.debug("Classifier response: %s", text)
        return parse_classification(text)


__all__ = [
    "ClassificationError",
    "FolderSelector",
    "OperatorPrompt",
    "SelectorState",
    "parse_classification",
]
