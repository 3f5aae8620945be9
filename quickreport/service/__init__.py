"""HTTP service mode for browsing quickreport results."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
