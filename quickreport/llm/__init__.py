"""Completion backends used for folder classification and file summaries."""

from .backends import Backend, FolderClassifier, Summarizer, build_backend
from .errors import BackendError
from .llamacpp import LlamaServerRunner
from .runner import ChatCompletionRunner

__all__ = [
    "Backend",
    "BackendError",
    "ChatCompletionRunner",
    "FolderClassifier",
    "LlamaServerRunner",
    "Summarizer",
    "build_backend",
]
