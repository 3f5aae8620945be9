"""FastAPI application serving the annotated tree and summarization progress."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import BaseModel

from ..store import SharedStateStore
from ..tree import progress_to_dict, tree_to_dict
from .dashboard import INDEX_HTML

FILE_UNAVAILABLE = "Unable to read file contents."


class FileModel(BaseModel):
    name: str
    summary: Optional[str] = None


class DirectoryModel(BaseModel):
    name: str
    path: str
    subdirs: List["DirectoryModel"]
    files: List[FileModel]


class ProgressResponse(BaseModel):
    total_files: int
    completed_files: int
    summaries: Dict[str, str]


class HealthResponse(BaseModel):
    status: str


DirectoryModel.model_rebuild()


def _read_text(path: str, file_root: Path | None) -> str:
    target = Path(path)
    if file_root is not None:
        resolved = target.resolve()
        if not resolved.is_relative_to(file_root):
            raise PermissionError(f"{path} is outside {file_root}")
    return target.read_text(encoding="utf-8")


def create_app(store: SharedStateStore, *, file_root: str | Path | None = None) -> FastAPI:
    """Create the report application over ``store``.

    When ``file_root`` is given, ``/get-file`` refuses paths outside it;
    otherwise any readable file on the host can be fetched.
    """
    app = FastAPI(title="Quick Project Report", version="1.0.0")
    app.state.store = store
    allowed_root = Path(file_root).resolve() if file_root is not None else None

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return INDEX_HTML

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/filtered-tree", response_model=DirectoryModel)
    async def filtered_tree() -> Dict[str, Any]:
        return tree_to_dict(store.read_tree_snapshot())

    @app.get("/progress", response_model=ProgressResponse)
    async def progress() -> Dict[str, Any]:
        return progress_to_dict(store.read_progress_snapshot())

    @app.get("/get-file", response_class=PlainTextResponse)
    async def get_file(path: Optional[str] = None) -> PlainTextResponse:
        if not path:
            return PlainTextResponse(FILE_UNAVAILABLE, status_code=404)
        loop = asyncio.get_running_loop()
        try:
            content = await loop.run_in_executor(None, _read_text, path, allowed_root)
        except (OSError, UnicodeDecodeError, ValueError):
            return PlainTextResponse(FILE_UNAVAILABLE, status_code=404)
        return PlainTextResponse(content)

    return app


def run_service(
    app: FastAPI, *, host: str = "127.0.0.1", port: int = 3030, log_level: str = "warning"
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level=log_level)


__all__ = ["create_app", "run_service"]
