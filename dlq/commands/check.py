"""Command: dlq check — parses and stratifies a program without querying it."""

from __future__ import annotations

import argparse

from rich.console import Console
from rich.table import Table
from rich import box
from rich.text import Text

from adapter import AdapterError, PreparedQuery, get_settings, prepare
from adapter.query import evaluate
from dlq._io import read_source
from solver import get_engine

console = Console(width=200)

ROLE_STYLE: dict[str, str] = {
    "extensional": "blue",
    "intensional": "green",
    "unused":      "dim white",
}


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def _show_schema(prepared: PreparedQuery) -> None:
    ext   = set(prepared.program.ext_preds)
    heads = prepared.program.rule_heads()

    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    table.add_column("PREDICATE", style="bold cyan", no_wrap=True)
    table.add_column("ROLE", no_wrap=True)
    table.add_column("FACTS", justify="right", no_wrap=True)
    table.add_column("STRATUM", justify="right", no_wrap=True)

    for sym in sorted(prepared.schema, key=lambda s: s.sort_key()):
        if sym in heads:
            role = "intensional"
        elif sym in ext:
            role = "extensional"
        else:
            role = "unused"
        stratum = prepared.stratified.pred_to_stratum.get(sym)
        table.add_row(
            str(sym),
            Text(role, style=ROLE_STYLE[role]),
            str(len(prepared.store.atoms(sym))),
            "-" if stratum is None else str(stratum),
        )
    console.print(table)
    console.print(Text.assemble(("Query: ", "bold"), (str(prepared.query_atom), "cyan")))


def _show_strata(prepared: PreparedQuery) -> None:
    console.print("\n[bold]Strata:[/bold]")
    if not prepared.stratified.strata:
        console.print("  [dim](no rules)[/dim]")
        return
    for s, rules in enumerate(prepared.stratified.strata):
        style = "green" if s == 0 else "yellow" if s == 1 else "red"
        preds = sorted({str(r.head.sym) for r in rules})
        console.print(Text.assemble(f"  Stratum {s}: ", (", ".join(preds), style)))
        for rule in rules:
            console.print(Text(f"    {rule}", style="dim"))


def _show_derived(prepared: PreparedQuery, seed: dict) -> None:
    """Derived facts: everything in the store that was not a seed fact."""
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    table.add_column("PREDICATE", style="bold cyan", no_wrap=True)
    table.add_column("FACT", no_wrap=False)
    count = 0
    for sym in sorted(prepared.store.predicates(), key=lambda s: s.sort_key()):
        for atom in prepared.store.atoms(sym):
            if atom not in seed.get(sym, set()):
                table.add_row(str(sym), Text(atom.as_fact()))
                count += 1

    if not count:
        console.print("\n[yellow]No derived facts.[/yellow]")
        return
    console.print("\n[bold]Derived facts:[/bold]")
    console.print(table)
    console.print(f"  [dim]{count} derived facts[/dim]")


# ---------------------------------------------------------------------------
# Main logic
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> None:
    try:
        text = read_source(args.source)
    except OSError as e:
        console.print(f"[red]Cannot read program:[/red] {e}")
        raise SystemExit(1)

    settings = get_settings()
    try:
        prepared = prepare(text, settings)
    except AdapterError as e:
        console.print(Text.assemble(("Check failed: ", "red"), e.message))
        raise SystemExit(1)

    console.print(
        f"Clauses: [bold]{len(prepared.clauses)}[/bold]  "
        f"facts: [bold]{prepared.store.estimate_fact_count()}[/bold]  "
        f"rules: [bold]{len(prepared.program.rules)}[/bold]  "
        f"ext preds: [bold]{len(prepared.program.ext_preds)}[/bold]"
    )
    _show_schema(prepared)
    _show_strata(prepared)

    if args.show_derived:
        seed = {sym: set(prepared.store.atoms(sym)) for sym in prepared.store.predicates()}
        try:
            engine = get_engine(settings.engine)
        except ValueError as e:
            console.print(Text.assemble(("Evaluation failed: ", "red"), str(e)))
            raise SystemExit(1)
        try:
            evaluate(prepared.store, prepared.stratified, engine)
        except AdapterError as e:
            console.print(Text.assemble(("Evaluation failed: ", "red"), e.message))
            raise SystemExit(1)
        _show_derived(prepared, seed)


# ---------------------------------------------------------------------------
# Parser registration
# ---------------------------------------------------------------------------

def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "check",
        help="Parses and stratifies a program; shows schema, ext preds and strata.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Runs every step of a query except evaluation: parsing, splitting off the
final query atom, building the schema, loading facts and rules, and
stratification. Reports the first error exactly as `dlq query` would.

Examples:
  dlq check examples/lion_king.dl
  dlq check examples/lion_king.dl --show-derived
        """,
    )
    p.add_argument(
        "source",
        metavar="FILE",
        help="Program file, or '-' for standard input.",
    )
    p.add_argument(
        "--show-derived",
        action="store_true",
        help="Also evaluate the program and list the derived facts.",
    )
    p.set_defaults(func=run)
