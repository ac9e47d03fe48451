"""
dlq — command line tool for the Datalog query adapter.

Usage:
  dlq <command> [options]

Commands:
  query    Runs a program whose last clause is the query, prints the JSON envelope.
  check    Parses and stratifies a program, shows schema, ext preds and strata.
  shell    Interactive session: define facts and rules, ask queries.

Environment:
  DLQ_SOURCE_NAME   source label used in parser messages (default: wasm_input)
  DLQ_ENGINE        naive | seminaive (default: naive)
  DLQ_LOG_LEVEL     log level (default: WARNING)
"""

from __future__ import annotations

import argparse
import sys

# Windows terminals may default to cp1252; program text and results are UTF-8.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from adapter import get_settings
from dlq._logging import configure_logging
from dlq.commands import check as cmd_check
from dlq.commands import query as cmd_query
from dlq.commands import shell as cmd_shell

__version__ = "0.1.0"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dlq",
        description="dlq — Datalog query adapter.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"dlq {__version__}"
    )
    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ...). Default: $DLQ_LOG_LEVEL or WARNING.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Shortcut for --log-level DEBUG.",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        metavar="<command>",
        dest="command",
    )
    subparsers.required = True

    cmd_query.add_parser(subparsers)
    cmd_check.add_parser(subparsers)
    cmd_shell.add_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = "DEBUG" if args.verbose else (args.log_level or get_settings().log_level)
    if level not in LOG_LEVELS:
        parser.error(f"invalid DLQ_LOG_LEVEL {level!r} (choose from {', '.join(LOG_LEVELS)})")
    configure_logging(level)
    args.func(args)


if __name__ == "__main__":
    main()
