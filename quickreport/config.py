"""Configuration loading for quickreport (.quickreport.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".quickreport.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration is missing required values or cannot be parsed."""


@dataclass
class LLMConfig:
    """Completion backend settings."""

    backend: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None
    chunk_lines: Optional[int] = None


@dataclass
class ScanConfig:
    """Overrides for the directory denylist and the summarizable extensions."""

    ignore_dirs: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)


@dataclass
class ServerConfig:
    """Where the report server listens and what it may read."""

    host: str = "127.0.0.1"
    port: int = 3030
    restrict_file_access: bool = False


@dataclass
class SummarizeConfig:
    """Summarization fan-out settings."""

    max_workers: int = 16
    serve_during_summarization: bool = False


@dataclass
class QuickReportConfig:
    """Represents the settings defined in .quickreport.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    summarize: SummarizeConfig = field(default_factory=SummarizeConfig)


def load_config(config_path: Path) -> QuickReportConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return QuickReportConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        backend=_as_str(llm_data.get("backend")),
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
        chunk_lines=_as_int(llm_data.get("chunk_lines")),
    )
    if llm.backend is not None:
        llm.backend = llm.backend.lower()
        if llm.backend not in {"openai", "llama"}:
            raise ConfigError(f"Unknown llm.backend '{llm.backend}' (expected 'openai' or 'llama')")

    scan_data = _as_dict(data.get("scan"))
    scan = ScanConfig(
        ignore_dirs=_as_str_list(scan_data.get("ignore_dirs")),
        extensions=[ext.lstrip(".").lower() for ext in _as_str_list(scan_data.get("extensions"))],
    )

    server_data = _as_dict(data.get("server"))
    server = ServerConfig()
    host = _as_str(server_data.get("host"))
    if host:
        server.host = host
    port = _as_int(server_data.get("port"))
    if port is not None:
        if not 0 < port < 65536:
            raise ConfigError(f"server.port must be between 1 and 65535, got {port}")
        server.port = port
    restrict = _as_bool(server_data.get("restrict_file_access"))
    if restrict is not None:
        server.restrict_file_access = restrict

    summarize_data = _as_dict(data.get("summarize"))
    summarize = SummarizeConfig()
    max_workers = _as_int(summarize_data.get("max_workers"))
    if max_workers is not None:
        if max_workers < 1:
            raise ConfigError("summarize.max_workers must be at least 1")
        summarize.max_workers = max_workers
    live = _as_bool(summarize_data.get("serve_during_summarization"))
    if live is not None:
        summarize.serve_during_summarization = live

    return QuickReportConfig(
        root=root,
        llm=llm,
        scan=scan,
        server=server,
        summarize=summarize,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
