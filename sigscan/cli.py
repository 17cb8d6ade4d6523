"""CLI entrypoints for sigscan commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import REPORT_FORMATS, ConfigError, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator
from .readers import DecodeError
from .report import format_json, format_text


def _add_verbosity_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only log warnings and errors to stderr.",
    )


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if parsed < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return parsed


def _positive_int(value: str) -> int:
    parsed = _non_negative_int(value)
    if parsed == 0:
        raise argparse.ArgumentTypeError("must be positive")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigscan",
        description="Detect repeated structural signatures in hierarchical data.",
    )
    _add_verbosity_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    signatures_parser = subparsers.add_parser(
        "signatures",
        help="Report container shapes (records, lists, sequences) that recur in the input.",
        description=(
            "Two records share a signature when they have the same fields with the "
            "same types. Two lists or sequences share a signature when they have the "
            "same number of elements with the same types in order."
        ),
    )
    _add_verbosity_options(signatures_parser, suppress_default=True)
    signatures_parser.add_argument(
        "sources",
        nargs="*",
        help="Input files to scan; '-' or no argument reads standard input.",
    )
    signatures_parser.add_argument(
        "--min-signature-size",
        type=_non_negative_int,
        default=None,
        help="Minimum size for signatures to be registered (default: 2).",
    )
    signatures_parser.add_argument(
        "--format",
        dest="input_format",
        default=None,
        help="Input format (json or yaml); inferred from file suffix when omitted.",
    )
    signatures_parser.add_argument(
        "--report",
        choices=REPORT_FORMATS,
        default=None,
        help="Report format (default: text).",
    )
    signatures_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Only report the N most frequent signatures.",
    )
    signatures_parser.add_argument(
        "--config",
        default=".",
        help="Path to .sigscan.yml or the directory holding it (defaults to current directory).",
    )
    signatures_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the signature scanner as an HTTP service.",
    )
    _add_verbosity_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sigscan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "signatures":
        _run_signatures(parser, args)
    elif args.command == "serve":
        configure_logging(**_verbosity(parser, args))
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _verbosity(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> dict[str, bool]:
    if args.verbose and args.quiet:
        parser.error("--verbose and --quiet cannot be combined")
    return {"verbose": bool(args.verbose), "quiet": bool(args.quiet)}


def _run_signatures(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"sigscan signatures failed: {exc}\n")

    log_file = Path(args.log_file) if args.log_file else config.log_file
    configure_logging(**_verbosity(parser, args), log_file=log_file)

    orchestrator = Orchestrator(config)
    try:
        result = orchestrator.run(
            args.sources,
            min_signature_size=args.min_signature_size,
            fmt=args.input_format,
        )
    except (DecodeError, ValueError) as exc:
        parser.exit(1, f"sigscan signatures failed: {exc}\n")

    report_format = args.report or config.report.format
    limit = args.limit if args.limit is not None else config.report.limit
    if report_format == "json":
        print(format_json(result, limit))
    else:
        for line in format_text(result, limit):
            print(line)


if __name__ == "__main__":
    main(sys.argv[1:])
