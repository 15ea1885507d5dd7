# main.py
# SPDX-License-Identifier: MIT

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from ..core.config import FixAugmentConfig, load_config_from_path
from ..core.log import configure_logging, get_logger
from ..core.normalize import OutputFormat
from ..core.session import Session

log = get_logger(__name__)


class _StderrNotifier:
    """Print session notifications on stderr so stdout carries only text."""

    def info(self, message: str) -> None:
        print(message, file=sys.stderr)

    def warning(self, message: str) -> None:
        print(f"Warning: {message}", file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level fixaugment CLI argument parser.

    Every text command reads INPUT (a file path, or stdin when omitted or
    ``-``) and writes its result to stdout.

    Returns:
        argparse.ArgumentParser: Configured argument parser for the CLI.
    """
    parser = argparse.ArgumentParser(prog="fixaugment", description="Chunk prompts and tidy assistant output.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    )
    parser.add_argument("-c", "--config", help="Path to config file (TOML or JSON).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chunk_p = subparsers.add_parser("chunk", help="Split input into size-bounded chunks.")
    chunk_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")
    chunk_p.add_argument("--max-size", type=int, help="Override chunk.policy.max_chunk_size.")
    chunk_p.add_argument("--plain", action="store_true", help="Disable smart (context-carrying) chunking.")
    chunk_p.add_argument("--no-preserve-code", action="store_true", help="Do not keep fenced code blocks intact.")
    chunk_p.add_argument("--json", action="store_true", help="Print chunks as a JSON list instead of joined text.")

    enhance_p = subparsers.add_parser("enhance", help="Chunk oversized input, otherwise tidy it into a polite prompt.")
    enhance_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")

    fmt_p = subparsers.add_parser("format", help="Normalize assistant output.")
    fmt_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")
    fmt_p.add_argument("--format", choices=sorted(OutputFormat.ALL), help="Override output.format.")

    tidy_p = subparsers.add_parser("tidy-code", help="Tag and tidy fenced code blocks.")
    tidy_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")

    check_p = subparsers.add_parser("check", help="Report size and complexity advisories.")
    check_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")

    opt_p = subparsers.add_parser("optimize", help="Escape quotes and report advisories.")
    opt_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")

    quotes_p = subparsers.add_parser("quotes", help="Escape unescaped double quotes.")
    quotes_p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin).")

    subparsers.add_parser("show-config", help="Print the effective configuration as JSON.")

    return parser


def _read_input(source: str) -> str:
    if source in ("-", ""):
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _load_config(path: Optional[str]) -> FixAugmentConfig:
    if not path:
        return FixAugmentConfig()
    return load_config_from_path(path)


def _cmd_chunk(session: Session, args: argparse.Namespace) -> int:
    policy = session.cfg.chunk.policy
    if args.max_size is not None:
        policy = replace(policy, max_chunk_size=args.max_size)
    if args.plain:
        policy = replace(policy, smart_chunking=False)
    if args.no_preserve_code:
        policy = replace(policy, preserve_code_blocks=False)

    text = _read_input(args.input)
    run = session.chunk_input(text, policy=policy, progress=log.info)
    if args.json:
        print(json.dumps(run.chunks, indent=2))
    else:
        sys.stdout.write(run.joined)
    return 0


def _cmd_check(session: Session, args: argparse.Namespace) -> int:
    text = _read_input(args.input)
    size = session.check_size(text)
    report = {
        "length": len(text),
        "limit": session.cfg.policy.size_limit,
        "is_over_threshold": size.is_over_threshold,
        "advisory": size.advisory_message,
        "breakdown": session.suggest_breakdown(text),
    }
    print(json.dumps(report, indent=2))
    return 0


def _cmd_optimize(session: Session, args: argparse.Namespace) -> int:
    review = session.review_prompt(_read_input(args.input))
    sys.stdout.write(review.text)
    if not review.issues:
        print("Prompt is already optimized", file=sys.stderr)
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch a parsed CLI command to the appropriate handler.

    Args:
        args (argparse.Namespace): Parsed arguments from the top-level
            argument parser.

    Returns:
        int: Process exit code, where 0 indicates success.
    """
    configure_logging(level=args.log_level)
    cfg = _load_config(args.config)

    if args.command == "show-config":
        cfg.validate()
        print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
        return 0

    with Session(cfg, notifier=_StderrNotifier()) as session:
        cmd = args.command
        if cmd == "chunk":
            return _cmd_chunk(session, args)
        if cmd == "enhance":
            sys.stdout.write(session.enhance_input(_read_input(args.input), progress=log.info))
            return 0
        if cmd == "format":
            sys.stdout.write(session.format_output(_read_input(args.input), args.format))
            return 0
        if cmd == "tidy-code":
            sys.stdout.write(session.tidy_code(_read_input(args.input)))
            return 0
        if cmd == "check":
            return _cmd_check(session, args)
        if cmd == "optimize":
            return _cmd_optimize(session, args)
        if cmd == "quotes":
            sys.stdout.write(session.fix_quotes(_read_input(args.input)))
            return 0

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the fixaugment command-line interface.

    Args:
        argv (Sequence[str] | None): Optional argument list to parse
            instead of ``sys.argv[1:]``. Primarily useful for tests.

    Returns:
        int: Process exit code, where 0 indicates success and non-zero
        values indicate failure.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return _dispatch(args)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
