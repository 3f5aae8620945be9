"""Adapter for a local llama.cpp completion server."""

from __future__ import annotations

import json
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .errors import BackendError

STOP_SEQUENCES = (
    "</s>",
    "<|end|>",
    "<|eot_id|>",
    "<|end_of_text|>",
    "<|im_end|>",
    "<|EOT|>",
    "<|END_OF_TURN_TOKEN|>",
    "<|end_of_turn|>",
    "<|endoftext|>",
    "ASSISTANT",
    "USER",
)


class LlamaServerRunner:
    """Posts raw prompts to the ``/completion`` endpoint of ``llama-server``."""

    DEFAULT_BASE_URL = "http://127.0.0.1:9090"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 4096,
        top_k: int = 40,
        top_p: float = 0.79,
        min_p: float = 0.43,
        repeat_penalty: float = 0.8,
        request_timeout: Optional[float] = 120.0,
        transport: Callable[[dict[str, object]], dict[str, object]] | None = None,
    ) -> None:
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_k = top_k
        self.top_p = top_p
        self.min_p = min_p
        self.repeat_penalty = repeat_penalty
        self.request_timeout = request_timeout
        self._transport = transport or self._post

    def run(self, prompt: str, *, temperature: float | None = None) -> str:
        payload: dict[str, object] = {
            "prompt": prompt.strip(),
            "n_predict": self.max_tokens,
            "temperature": self.temperature if temperature is None else temperature,
            "top_k": self.top_k,
            "top_p": self.top_p,
            "min_p": self.min_p,
            "repeat_penalty": self.repeat_penalty,
            "repeat_last_n": 0,
            "penalize_nl": False,
            "stop": list(STOP_SEQUENCES),
        }
        response = self._transport(payload)
        content = response.get("content")
        if not isinstance(content, str):
            raise BackendError("llama.cpp server response has no 'content' field")
        return content.strip()

    def _post(self, payload: dict[str, object]) -> dict[str, object]:
        endpoint = f"{self.base_url}/completion"
        data = json.dumps(payload).encode("utf-8")
        http_request = Request(
            endpoint,
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        timeout = self.request_timeout or 120.0
        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            raise BackendError(f"llama.cpp server failed with status {exc.code}: {exc.reason}") from exc
        except URLError as exc:  # pragma: no cover - depends on runtime
            raise BackendError(f"llama.cpp server unreachable: {exc.reason}") from exc
        except TimeoutError as exc:
            raise BackendError(f"llama.cpp server timed out after {timeout}s") from exc

        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise BackendError("llama.cpp server returned invalid JSON") from exc
        if not isinstance(parsed, dict):
            raise BackendError("llama.cpp server returned a non-object payload")
        return parsed


__all__ = ["LlamaServerRunner", "STOP_SEQUENCES"]
