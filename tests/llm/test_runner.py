"""Tests for the hosted chat completion runner."""

from __future__ import annotations

import json
from urllib.error import URLError

import pytest

from quickreport.llm.errors import BackendError
from quickreport.llm.runner import ChatCompletionRunner, first_choice_text


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def read(self):
        if isinstance(self._payload, bytes):
            return self._payload
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_runner_constructs_request() -> None:
    captured = {}

    def fake_runner(request):
        captured["prompt"] = request.prompt
        captured["system"] = request.system
        captured["model"] = request.model
        captured["temperature"] = request.temperature
        captured["max_tokens"] = request.max_tokens
        captured["base_url"] = request.base_url
        captured["api_key"] = request.api_key
        captured["request_timeout"] = request.request_timeout
        return "response"

    runner = ChatCompletionRunner(
        model="custom-model",
        base_url="https://llm.example.test/v1/",
        api_key="secret",
        temperature=0.15,
        max_tokens=256,
        request_timeout=42.0,
        runner=fake_runner,
    )
    result = runner.run("Hello world", system="system message")

    assert result == "response"
    assert captured == {
        "prompt": "Hello world",
        "system": "system message",
        "model": "custom-model",
        "temperature": 0.15,
        "max_tokens": 256,
        "base_url": "https://llm.example.test/v1",
        "api_key": "secret",
        "request_timeout": 42.0,
    }


def test_runner_resolves_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    monkeypatch.setenv("QUICKREPORT_LLM_MODEL", "env-model")
    monkeypatch.delenv("QUICKREPORT_API_KEY", raising=False)
    monkeypatch.delenv("QUICKREPORT_LLM_BASE_URL", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)

    runner = ChatCompletionRunner()

    assert runner.api_key == "env-key"
    assert runner.model == "env-model"
    assert runner.base_url == ChatCompletionRunner.DEFAULT_BASE_URL


def test_runner_http_posts_payload(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse({"choices": [{"message": {"content": " Parses CLI flags. "}}]})

    monkeypatch.setattr("quickreport.llm.runner.urlopen", fake_urlopen)

    runner = ChatCompletionRunner(
        model="gpt-3.5-turbo",
        base_url="https://api.openai.com/v1",
        api_key="sk-test",
        request_timeout=25.0,
    )
    result = runner.run("Summarize this file.")

    assert result == "Parses CLI flags."
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["headers"]["content-type"] == "application/json"
    assert captured["headers"]["authorization"] == "Bearer sk-test"
    assert captured["payload"] == {
        "model": "gpt-3.5-turbo",
        "messages": [{"role": "user", "content": "Summarize this file."}],
    }
    assert captured["timeout"] == 25.0


@pytest.mark.parametrize(
    "payload",
    [b"<html>bad gateway</html>", {"choices": []}, {"choices": [{"message": {"content": ""}}]}],
)
def test_runner_rejects_unusable_responses(monkeypatch, payload) -> None:
    monkeypatch.setattr(
        "quickreport.llm.runner.urlopen", lambda request, timeout=None: FakeResponse(payload)
    )
    runner = ChatCompletionRunner(api_key="sk-test")

    with pytest.raises(BackendError):
        runner.run("anything")


def test_runner_wraps_network_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr("quickreport.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(BackendError) as excinfo:
        ChatCompletionRunner(api_key="sk-test").run("anything")
    assert "connection refused" in str(excinfo.value)


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"choices": [{"message": {"content": "chat"}}]}, "chat"),
        ({"choices": [{"text": "legacy"}]}, "legacy"),
        ({"choices": {"0": {"text": "odd"}}}, ""),
        (["not", "a", "mapping"], ""),
    ],
)
def test_first_choice_text(payload, expected) -> None:
    assert first_choice_text(payload) == expected
