"""Tests for summarizer/classifier composition and backend selection."""

from __future__ import annotations

import pytest

from quickreport.config import ConfigError, LLMConfig
from quickreport.llm.backends import (
    ChatFolderClassifier,
    ChatSummarizer,
    ChunkedSummarizer,
    CompletionFolderClassifier,
    build_backend,
    split_lines,
)
from quickreport.llm.errors import BackendError
from quickreport.llm.llamacpp import LlamaServerRunner
from quickreport.llm.runner import ChatCompletionRunner


class _ScriptedLlama(LlamaServerRunner):
    def __init__(self, replies):
        super().__init__(transport=self._reply)
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.temperatures: list[object] = []

    def _reply(self, payload):
        self.prompts.append(str(payload["prompt"]))
        self.temperatures.append(payload["temperature"])
        return {"content": self.replies.pop(0)}


def test_split_lines_uses_fixed_chunks() -> None:
    content = "\n".join(f"line {index}" for index in range(5))

    assert split_lines(content, 2) == ["line 0\nline 1", "line 2\nline 3", "line 4"]
    assert split_lines("", 2) == []


def test_chunked_summarizer_condenses_partial_summaries() -> None:
    runner = _ScriptedLlama(["first half", "second half", "whole file"])
    summarizer = ChunkedSummarizer(runner, chunk_lines=3, condense_temperature=0.3)
    content = "\n".join(f"x{index} = {index}" for index in range(6))

    assert summarizer.summarize(content) == "whole file"
    assert len(runner.prompts) == 3
    assert "x0 = 0" in runner.prompts[0] and "x3 = 3" not in runner.prompts[0]
    assert "x3 = 3" in runner.prompts[1]
    assert "first half second half" in runner.prompts[2]
    assert runner.temperatures == [0.2, 0.2, 0.3]


def test_chunked_summarizer_rejects_bad_chunk_size() -> None:
    with pytest.raises(ValueError):
        ChunkedSummarizer(_ScriptedLlama([]), chunk_lines=0)


def test_completion_classifier_extracts_last_json_object() -> None:
    runner = _ScriptedLlama(
        [
            'Example: {"analysis_key": ["demo"]}. Answer: {"analysis_key": ["src", "lib"]} done',
        ]
    )
    classifier = CompletionFolderClassifier(runner)

    assert classifier.classify("proj\n  src\n", ", please also consider lib") == (
        '{"analysis_key": ["src", "lib"]}'
    )
    assert "USER:proj\n  src, please also consider lib" in runner.prompts[0]


def test_completion_classifier_without_json_raises() -> None:
    classifier = CompletionFolderClassifier(_ScriptedLlama(["src looks like code"]))

    with pytest.raises(BackendError):
        classifier.classify("proj", "")


def test_chat_capabilities_format_prompts() -> None:
    prompts: list[str] = []

    def fake_runner(request):
        prompts.append(request.prompt)
        return '{"analysis_key": []}'

    runner = ChatCompletionRunner(api_key="k", runner=fake_runner)
    ChatSummarizer(runner).summarize("def f(): pass")
    ChatFolderClassifier(runner).classify("proj\n  src\n", ", please also consider lib")

    assert prompts[0].endswith("def f(): pass")
    assert "proj\n  src\n" in prompts[1]
    assert prompts[1].endswith(", please also consider lib")


def test_build_backend_requires_api_key_for_hosted(monkeypatch) -> None:
    for key in ("QUICKREPORT_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)

    with pytest.raises(ConfigError):
        build_backend(LLMConfig())


def test_build_backend_hosted_uses_configured_values(monkeypatch) -> None:
    for key in ("QUICKREPORT_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)

    backend = build_backend(LLMConfig(api_key="cfg-key", model="gpt-4o-mini", request_timeout=5))

    assert backend.name == "openai"
    assert isinstance(backend.summarizer, ChatSummarizer)
    assert backend.summarizer.runner.api_key == "cfg-key"
    assert backend.summarizer.runner.model == "gpt-4o-mini"
    assert backend.summarizer.runner.request_timeout == 5


def test_build_backend_local_needs_no_key(monkeypatch) -> None:
    for key in ("QUICKREPORT_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)

    backend = build_backend(LLMConfig(backend="llama", chunk_lines=100))

    assert backend.name == "llama"
    assert isinstance(backend.summarizer, ChunkedSummarizer)
    assert backend.summarizer.chunk_lines == 100
    assert isinstance(backend.classifier, CompletionFolderClassifier)
