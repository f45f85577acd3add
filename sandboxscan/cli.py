"""CLI entrypoints for sandboxscan commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .commands import SubprocessExecutor
from .config import ConfigError, ScanConfig, load_config
from .errors import SandboxScanError
from .logging import configure_logging
from .session import SandboxSession, SessionRegistry


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)
    parser.add_argument(
        "--trace-commands",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Log every command sent to the sandbox.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a full debug log, command traffic included, to this file.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=argparse.SUPPRESS,
        help="Path to a .sandboxscan.yml file or the directory holding it.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sandboxscan",
        description="Summarise a dev sandbox: file manifest, routes and dependency errors.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    files_parser = subparsers.add_parser(
        "files",
        help="Build the file manifest for a project directory.",
    )
    _add_logging_options(files_parser, suppress_default=True)
    _add_config_option(files_parser)
    files_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Project root (defaults to the configured root or current directory).",
    )
    files_parser.add_argument(
        "--skipped",
        action="store_true",
        help="Also report files left out of the manifest and why.",
    )

    deps_parser = subparsers.add_parser(
        "deps",
        help="List packages the dev server failed to resolve.",
    )
    _add_logging_options(deps_parser, suppress_default=True)
    _add_config_option(deps_parser)

    logs_parser = subparsers.add_parser(
        "logs",
        help="Report dev server status and recent log output.",
    )
    _add_logging_options(logs_parser, suppress_default=True)
    _add_config_option(logs_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the HTTP API against a local project directory.",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("path", nargs="?", default=None, help="Project root.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sandboxscan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        trace_commands=bool(args.trace_commands),
        log_file=args.log_file,
    )

    try:
        config = _load_config(args)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    root = getattr(args, "path", None) or config.root
    session = SandboxSession(SubprocessExecutor(cwd=root), config, name=str(root))

    if args.command == "serve":
        from .service import run_service

        registry = SessionRegistry()
        registry.activate(session)
        run_service(registry, host=args.host, port=args.port)
        return

    payload: Dict[str, Any]
    with session:
        try:
            if args.command == "files":
                result = session.build_manifest()
                payload = result.to_dict()
                if args.skipped:
                    payload["skipped"] = [item.to_dict() for item in result.skipped]
            elif args.command == "deps":
                payload = session.mine_dependency_errors().to_dict()
            elif args.command == "logs":
                payload = session.read_log_status().to_dict()
            else:  # pragma: no cover - argparse enforces choices
                parser.exit(1, "Unknown command\n")
        except SandboxScanError as exc:
            parser.exit(
                1, f"sandboxscan {args.command} failed: {exc}\nRun with --verbose for more details.\n"
            )

    print(json.dumps(payload, indent=2))


def _load_config(args: argparse.Namespace) -> ScanConfig:
    config_path = getattr(args, "config", None)
    if config_path is None:
        path = getattr(args, "path", None)
        config_path = Path(path) if path else Path.cwd()
    return load_config(config_path)


if __name__ == "__main__":
    main(sys.argv[1:])
