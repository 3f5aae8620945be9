"""Summarize a project's source tree with an LLM and serve the annotated result."""

__version__ = "0.1.0"
