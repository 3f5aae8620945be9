"""Summarizer and folder-classifier capabilities built on the completion runners."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Protocol

from ..config import ConfigError, LLMConfig
from ..logging import get_logger
from ..prompting import (
    ANALYSIS_KEY,
    CHUNK_SUMMARY_PROMPT,
    COMPLETION_FOLDER_ANALYSIS_PROMPT,
    CONDENSE_SUMMARY_PROMPT,
    FILE_SUMMARY_PROMPT,
    FOLDER_ANALYSIS_PROMPT,
)
from .errors import BackendError
from .llamacpp import LlamaServerRunner
from .runner import ChatCompletionRunner

_ANALYSIS_JSON = re.compile(r'\{[^{}]*"' + ANALYSIS_KEY + r'"\s*:[^{}]*\}')

logger = get_logger("llm")


class Summarizer(Protocol):
    def summarize(self, content: str) -> str: ...


class FolderClassifier(Protocol):
    def classify(self, folders: str, hints: str) -> str: ...


class ChatSummarizer:
    """Summarizes a whole file in one chat completion call."""

    def __init__(self, runner: ChatCompletionRunner) -> None:
        self.runner = runner

    def summarize(self, content: str) -> str:
        return self.runner.run(FILE_SUMMARY_PROMPT.format(content=content))


class ChatFolderClassifier:
    def __init__(self, runner: ChatCompletionRunner) -> None:
        self.runner = runner

    def classify(self, folders: str, hints: str) -> str:
        prompt = FOLDER_ANALYSIS_PROMPT.format(folders=folders, extra_folders=hints)
        return self.runner.run(prompt)


class ChunkedSummarizer:
    """Summarizes files in fixed-size line chunks, then condenses the partial summaries.

    The local completion server has a limited context, so each chunk of
    ``chunk_lines`` lines is summarized separately and the joined results are
    passed through one more condensing request.
    """

    def __init__(
        self,
        runner: LlamaServerRunner,
        *,
        chunk_lines: int = 500,
        condense_temperature: float = 0.28,
    ) -> None:
        if chunk_lines < 1:
            raise ValueError("chunk_lines must be positive")
        self.runner = runner
        self.chunk_lines = chunk_lines
        self.condense_temperature = condense_temperature

    def summarize(self, content: str) -> str:
        partials = [
            self.runner.run(CHUNK_SUMMARY_PROMPT.format(content=chunk))
            for chunk in split_lines(content, self.chunk_lines)
        ]
        joined = " ".join(partial for partial in partials if partial)
        return self.runner.run(
            CONDENSE_SUMMARY_PROMPT.format(content=joined),
            temperature=self.condense_temperature,
        )


class CompletionFolderClassifier:
    """Classifier for raw completion models that tend to wrap JSON in prose."""

    def __init__(self, runner: LlamaServerRunner, *, temperature: float = 0.28) -> None:
        self.runner = runner
        self.temperature = temperature

    def classify(self, folders: str, hints: str) -> str:
        prompt = COMPLETION_FOLDER_ANALYSIS_PROMPT.format(
            folders=folders.strip(), extra_folders=hints.strip()
        )
        text = self.runner.run(prompt, temperature=self.temperature)
        logger.debug("Raw classifier response: %s", text)
        matches = _ANALYSIS_JSON.findall(text)
        if not matches:
            raise BackendError(f"No '{ANALYSIS_KEY}' JSON object found in classifier response")
        return matches[-1]


def split_lines(content: str, chunk_lines: int) -> List[str]:
    lines = content.splitlines()
    return [
        "\n".join(lines[start : start + chunk_lines])
        for start in range(0, len(lines), chunk_lines)
    ]


@dataclass
class Backend:
    """The two capabilities a run needs from one configured backend."""

    name: str
    summarizer: Summarizer
    classifier: FolderClassifier


def build_backend(config: LLMConfig) -> Backend:
    """Instantiate the configured backend; a hosted backend without a credential is fatal."""
    name = config.backend or "openai"
    timeout = config.request_timeout if config.request_timeout is not None else 120.0

    if name == "llama":
        runner = LlamaServerRunner(
            base_url=config.base_url,
            temperature=config.temperature if config.temperature is not None else 0.2,
            max_tokens=config.max_tokens or 4096,
            request_timeout=timeout,
        )
        return Backend(
            name=name,
            summarizer=ChunkedSummarizer(runner, chunk_lines=config.chunk_lines or 500),
            classifier=CompletionFolderClassifier(runner),
        )

    if name != "openai":
        raise ConfigError(f"Unknown backend '{name}'")

    runner = ChatCompletionRunner(
        config.model,
        base_url=config.base_url,
        api_key=config.api_key,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        request_timeout=timeout,
    )
    if not runner.api_key:
        raise ConfigError(
            "No API key configured for the hosted backend. Set OPENAI_API_KEY or llm.api_key."
        )
    return Backend(
        name=name,
        summarizer=ChatSummarizer(runner),
        classifier=ChatFolderClassifier(runner),
    )


__all__ = [
    "Backend",
    "ChatFolderClassifier",
    "ChatSummarizer",
    "ChunkedSummarizer",
    "CompletionFolderClassifier",
    "FolderClassifier",
    "Summarizer",
    "build_backend",
    "split_lines",
]
