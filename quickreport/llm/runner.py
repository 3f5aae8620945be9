"""Client for hosted OpenAI-compatible chat completion APIs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger
from .errors import BackendError

logger = get_logger("llm.chat")


@dataclass
class ChatRequest:
    """Everything needed to issue one chat completion call."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def messages(self) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": self.system}] if self.system else []
        messages.append({"role": "user", "content": self.prompt})
        return messages

    def body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"model": self.model, "messages": self.messages()}
        if self.temperature is not None:
            body["temperature"] = self.temperature
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body


def _env(*keys: str) -> Optional[str]:
    return next((os.environ[key] for key in keys if os.environ.get(key)), None)


class ChatCompletionRunner:
    """Sends single-turn prompts to ``{base_url}/chat/completions``.

    ``model``, ``base_url`` and ``api_key`` fall back to the environment when
    left as ``None``. ``runner`` replaces the HTTP call, which keeps tests
    offline.
    """

    DEFAULT_MODEL = "gpt-3.5-turbo"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_MODEL_KEYS = ("QUICKREPORT_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("QUICKREPORT_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("QUICKREPORT_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        api_key: Optional[str] = None,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[ChatRequest], str] | None = None,
    ) -> None:
        self.model = model or _env(*self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = (base_url or _env(*self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL).rstrip("/")
        self.api_key = api_key or _env(*self.ENV_API_KEY_KEYS)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner or send_chat_request

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Return the assistant text for ``prompt``; transport problems raise BackendError."""
        return self._runner(
            ChatRequest(
                prompt=prompt,
                system=system,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                base_url=self.base_url,
                api_key=self.api_key,
                request_timeout=self.request_timeout,
            )
        )


def send_chat_request(request: ChatRequest) -> str:
    headers = {"Content-Type": "application/json"}
    if request.api_key:
        headers["Authorization"] = f"Bearer {request.api_key}"
    timeout = request.request_timeout or 120.0

    logger.debug("POST %s (model=%s, %d prompt chars)", request.endpoint, request.model, len(request.prompt))
    payload = _post_json(request.endpoint, request.body(), headers, timeout)

    text = first_choice_text(payload)
    if not text.strip():
        raise BackendError("Chat completion returned an empty response")
    return text.strip()


def _post_json(url: str, body: Dict[str, Any], headers: Dict[str, str], timeout: float) -> Any:
    http_request = Request(url, data=json.dumps(body).encode("utf-8"), headers=headers, method="POST")
    try:
        with urlopen(http_request, timeout=timeout) as response:
            raw = response.read()
    except HTTPError as exc:  # pragma: no cover - depends on runtime
        detail = exc.read().decode("utf-8", errors="ignore").strip()
        raise BackendError(f"Chat completion failed with status {exc.code}: {detail or exc.reason}") from exc
    except URLError as exc:
        raise BackendError(f"Chat completion request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise BackendError(f"Chat completion timed out after {timeout}s") from exc

    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BackendError("Chat completion returned invalid JSON") from exc


def first_choice_text(payload: Any) -> str:
    """Pull the first choice's message content (or legacy ``text``) out of a response."""
    try:
        choice = payload["choices"][0]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(choice, dict):
        return ""
    message = choice.get("message")
    content = message.get("content") if isinstance(message, dict) else choice.get("text")
    return content if isinstance(content, str) else ""


__all__ = ["ChatCompletionRunner", "ChatRequest", "first_choice_text", "send_chat_request"]
