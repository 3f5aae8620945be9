"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from quickreport import cli
from quickreport.cli import _apply_overrides, _build_parser
from quickreport.config import ConfigError, QuickReportConfig


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "run"])
    assert args.verbose is True
    assert args.command == "run"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["run", "--verbose"])
    assert args.verbose is True


def test_cli_collects_repeated_targets() -> None:
    args = _build_parser().parse_args(["run", "proj", "--target", "src", "--target", "lib", "-y"])
    assert args.path == "proj"
    assert args.target == ["src", "lib"]
    assert args.yes is True


def test_cli_rejects_unknown_backend() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["run", "--backend", "gemini"])


def test_overrides_take_precedence_over_config(tmp_path: Path) -> None:
    args = _build_parser().parse_args(
        ["run", "--backend", "llama", "--port", "9000", "--max-workers", "2", "--live", "--restrict-file-access"]
    )

    config = _apply_overrides(QuickReportConfig(root=tmp_path), args)

    assert config.llm.backend == "llama"
    assert config.server.port == 9000
    assert config.server.host == "127.0.0.1"
    assert config.server.restrict_file_access is True
    assert config.summarize.max_workers == 2
    assert config.summarize.serve_during_summarization is True


def test_overrides_reject_invalid_worker_count(tmp_path: Path) -> None:
    args = _build_parser().parse_args(["run", "--max-workers", "0"])
    with pytest.raises(ConfigError):
        _apply_overrides(QuickReportConfig(root=tmp_path), args)


def test_main_exits_when_api_key_missing(tmp_path: Path, monkeypatch, capsys) -> None:
    for key in ("QUICKREPORT_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "API key" in capsys.readouterr().err


def test_main_exits_when_root_missing(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", str(tmp_path / "missing"), "--target", "src"])

    assert excinfo.value.code == 1


def test_main_serves_after_summarizing_targets(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.py").write_text("", encoding="utf-8")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    served = {}

    def fake_run_service(app, *, host, port, log_level):
        served["progress"] = app.state.store.read_progress_snapshot()
        served["address"] = (host, port)
        served["log_level"] = log_level

    monkeypatch.setattr(cli, "run_service", fake_run_service)

    cli.main(["run", str(tmp_path), "--target", "src", "--port", "4321"])

    assert served["address"] == ("127.0.0.1", 4321)
    assert served["log_level"] == "warning"
    assert served["progress"].completed_files == served["progress"].total_files == 1


def test_main_exits_when_live_server_cannot_start(tmp_path: Path, monkeypatch, capsys) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.py").write_text("", encoding="utf-8")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    def failing_run_service(app, *, host, port, log_level):
        raise SystemExit(1)

    monkeypatch.setattr(cli, "run_service", failing_run_service)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", str(tmp_path), "--target", "src", "--live"])

    assert excinfo.value.code == 1
    assert "Report server exited" in capsys.readouterr().err


def test_main_exits_when_config_unreadable(tmp_path: Path, capsys) -> None:
    (tmp_path / ".quickreport.yml").mkdir()

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", str(tmp_path), "--backend", "llama"])

    assert excinfo.value.code == 1
    assert "Unable to read" in capsys.readouterr().err
