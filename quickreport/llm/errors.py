"""Exceptions raised by completion backends."""

from __future__ import annotations


class BackendError(RuntimeError):
    """Raised when a completion backend cannot produce a usable response."""


__all__ = ["BackendError"]
