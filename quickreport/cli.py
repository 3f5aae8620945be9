"""CLI entrypoint for quickreport."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from .config import ConfigError, QuickReportConfig, load_config
from .llm.backends import build_backend
from .logging import configure_logging, get_logger, server_log_level
from .orchestrator import Orchestrator, ServerError
from .selector import ClassificationError
from .service import create_app, run_service
from .store import SharedStateStore


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quickreport",
        description="Summarize a project's source files with an LLM and browse the results.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Scan, summarize, and serve a report for a project.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    run_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    run_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (defaults to <path>/.quickreport.yml).",
    )
    run_parser.add_argument(
        "--backend",
        choices=("openai", "llama"),
        default=None,
        help="Completion backend: hosted OpenAI-compatible API or local llama.cpp server.",
    )
    run_parser.add_argument("--host", default=None, help="Interface for the report server.")
    run_parser.add_argument("--port", type=int, default=None, help="Port for the report server.")
    run_parser.add_argument(
        "--target",
        action="append",
        default=None,
        metavar="FOLDER",
        help="Folder name to summarize; repeat to add more. Skips classification.",
    )
    run_parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Accept the classifier's first answer without prompting.",
    )
    run_parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum concurrent summarization requests.",
    )
    run_parser.add_argument(
        "--live",
        action="store_true",
        help="Start the server before summarizing so progress can be watched.",
    )
    run_parser.add_argument(
        "--restrict-file-access",
        action="store_true",
        help="Only serve /get-file requests for paths inside the project root.",
    )
    run_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    return parser


def _apply_overrides(config: QuickReportConfig, args: argparse.Namespace) -> QuickReportConfig:
    llm = config.llm
    if args.backend:
        llm = replace(llm, backend=args.backend)
    server = config.server
    if args.host:
        server = replace(server, host=args.host)
    if args.port is not None:
        server = replace(server, port=args.port)
    if args.restrict_file_access:
        server = replace(server, restrict_file_access=True)
    summarize = config.summarize
    if args.max_workers is not None:
        if args.max_workers < 1:
            raise ConfigError("--max-workers must be at least 1")
        summarize = replace(summarize, max_workers=args.max_workers)
    if args.live:
        summarize = replace(summarize, serve_during_summarization=True)
    return replace(config, llm=llm, server=server, summarize=summarize)


def _console_prompt(current: Sequence[str]) -> str:
    print(f"Classifier selected: {', '.join(current) or '(none)'}")
    try:
        return input("Folder names to reconsider (comma separated), or 'ok' to continue: ")
    except EOFError:
        return "ok"


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for quickreport."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    root = Path(args.path).expanduser().resolve()
    try:
        config = load_config(args.config if args.config is not None else root)
        config = _apply_overrides(config, args)
        backend = build_backend(config.llm)
    except ConfigError as exc:
        parser.exit(1, f"quickreport: {exc}\n")

    interactive = not args.yes and args.target is None and sys.stdin.isatty()
    orchestrator = Orchestrator(
        config,
        backend,
        prompt=_console_prompt if interactive else None,
        accept_empty=True,
    )
    file_root = root if config.server.restrict_file_access else None

    def _serve(store: SharedStateStore) -> None:
        app = create_app(store, file_root=file_root)
        logger.info(
            "Report server listening on http://%s:%d", config.server.host, config.server.port
        )
        run_service(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level=server_log_level(bool(args.verbose)),
        )

    try:
        orchestrator.run(root, _serve, targets=args.target)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ClassificationError as exc:
        parser.exit(1, f"quickreport run failed: {exc}\nRun with --verbose for more details.\n")
    except ServerError as exc:
        parser.exit(1, f"quickreport: {exc}\n")
    except KeyboardInterrupt:  # pragma: no cover - interactive path
        parser.exit(130, "Interrupted\n")


if __name__ == "__main__":
    main(sys.argv[1:])
