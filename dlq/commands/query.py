"""Command: dlq query — runs a program and prints the JSON envelope."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys

from rich.console import Console
from rich.table import Table
from rich import box
from rich.text import Text

from adapter import get_settings, run_query
from dlq._io import read_source

console = Console(width=200)


def _show_table(envelope: dict) -> None:
    if envelope["status"] != "success":
        console.print(Text.assemble(("Error: ", "red"), envelope["message"]))
        return

    data: list[str] = envelope["data"]
    if not data:
        console.print("[yellow]No results.[/yellow]")
        return

    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    table.add_column("#", style="dim", justify="right", no_wrap=True)
    table.add_column("FACT", style="cyan", no_wrap=False)
    for i, fact in enumerate(data, 1):
        table.add_row(str(i), Text(fact))
    console.print(table)
    console.print(f"  [dim]{len(data)} results[/dim]")


def run(args: argparse.Namespace) -> None:
    try:
        text = read_source(args.source)
    except OSError as e:
        console.print(f"[red]Cannot read program:[/red] {e}")
        raise SystemExit(1)

    settings = get_settings()
    if args.engine:
        settings = dataclasses.replace(settings, engine=args.engine)
    if args.source_name:
        settings = dataclasses.replace(settings, source_name=args.source_name)

    output   = run_query(text, settings)
    envelope = json.loads(output)

    if args.table:
        _show_table(envelope)
    else:
        sys.stdout.write(output + "\n")
        sys.stdout.flush()

    if envelope["status"] != "success":
        raise SystemExit(1)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "query",
        help="Runs a program whose last clause is the query.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Reads a program (facts and rules) followed by one query atom, evaluates it
and prints the result envelope:

  {"status":"success","data":["is_vulnerable(\\"order-service\\")."]}
  {"status":"error","message":"..."}

Examples:
  dlq query examples/vulnerability.dl
  cat program.dl | dlq query -
  dlq query examples/lion_king.dl --table --engine seminaive
        """,
    )
    p.add_argument(
        "source",
        metavar="FILE",
        help="Program file, or '-' for standard input.",
    )
    p.add_argument(
        "--table",
        action="store_true",
        help="Show results as a table instead of JSON.",
    )
    p.add_argument(
        "--engine", "-e",
        choices=["naive", "seminaive"],
        help="Evaluator (default: $DLQ_ENGINE or naive).",
    )
    p.add_argument(
        "--source-name",
        metavar="NAME",
        help="Source label used in parse error messages.",
    )
    p.set_defaults(func=run)
