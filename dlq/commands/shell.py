"""Command: dlq shell — interactive define/query session."""

from __future__ import annotations

import argparse

from rich.console import Console
from rich.table import Table
from rich import box
from rich.text import Text

from adapter import Session, SessionError
from dlq._io import read_source

console = Console(width=200)

PROMPT = "dlq> "

HELP = """\
  fact(...).  /  head(...) :- body.    add clauses to the session
  ?- atom                              query, shows variable bindings
  :clauses                             list the session's clauses
  :reset                               forget every clause
  :help                                this text
  :quit                                leave the shell"""


def _show_bindings(results: list[dict[str, str]]) -> None:
    if not results:
        console.print("  [red]false[/red]")
        return
    if results == [{}]:
        console.print("  [green]true[/green]")
        return

    variables = list(results[0])
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    for var in variables:
        table.add_column(var, style="cyan", no_wrap=True)
    for r in results:
        table.add_row(*[Text(r.get(v, "?")) for v in variables])
    console.print(table)
    console.print(f"  [dim]{len(results)} answers[/dim]")


def handle_line(session: Session, line: str) -> bool:
    """Executes one shell line. Returns False when the shell should exit."""
    line = line.strip()
    if not line:
        return True

    if line in (":quit", ":q", ":exit"):
        return False
    if line == ":help":
        console.print(Text(HELP))
        return True
    if line == ":reset":
        session.reset()
        console.print("[yellow]Session cleared.[/yellow]")
        return True
    if line == ":clauses":
        clauses = session.clauses
        if not clauses:
            console.print("  [dim](no clauses)[/dim]")
        for clause in clauses:
            console.print(Text(f"  {clause}"))
        return True

    try:
        if line.startswith("?-"):
            _show_bindings(session.query(line[2:].strip()))
        else:
            n = session.define(line)
            console.print(f"  [dim]{n} clauses added[/dim]")
    except SessionError as e:
        console.print(Text(str(e), style="red"))
    return True


def run(args: argparse.Namespace) -> None:
    session = Session()

    if args.load:
        try:
            n = session.define(read_source(args.load))
        except OSError as e:
            console.print(f"[red]Cannot read program:[/red] {e}")
            raise SystemExit(1)
        except SessionError as e:
            console.print(Text(str(e), style="red"))
            raise SystemExit(1)
        console.print(f"Loaded [bold]{n}[/bold] clauses from [bold]{args.load}[/bold]")

    console.print("dlq shell — [bold]:help[/bold] for commands, [bold]:quit[/bold] to leave.")
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            break
        if not handle_line(session, line):
            break


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "shell",
        help="Interactive session: define facts and rules, then ask queries.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Keeps the clauses entered so far and answers queries against them.
Queries are written as `?- atom` and show variable bindings.

Examples:
  dlq shell
  dlq shell --load examples/lion_king_facts.dl
        """,
    )
    p.add_argument(
        "--load", "-l",
        metavar="FILE",
        help="Program file (facts and rules only) to define at start.",
    )
    p.set_defaults(func=run)
