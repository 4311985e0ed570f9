"""
CLI (Command Line Interface).

    agendafacil import <source> --out events.ics
    agendafacil import <source> --dry-run --verbose
    agendafacil inspect <link>

<source> is a text file (one link per line), a .csv export, an .html page
or an http(s) URL of a published sheet. Links are read from column A
unless --column says otherwise.
"""

from __future__ import annotations

import argparse
import logging

import requests
from rich import box
from rich.console import Console
from rich.table import Table

from agendafacil.batch import format_summary, run_batch
from agendafacil.build import build
from agendafacil.extract import LINK_PREFIXES, extract
from agendafacil.model import AllDay, BatchOutcome, BuildError, EventDescriptor
from agendafacil.sinks import EventSink, IcsCalendarSink, MemorySink
from agendafacil.sources import open_source

console = Console()


def _render_outcome(outcome: BatchOutcome, verbose: bool) -> None:
    table = Table(title="Agenda Fácil", box=box.SIMPLE)
    table.add_column("Result")
    table.add_column("Rows", justify="right")
    table.add_row("[green]created[/green]", str(outcome.created_count))
    table.add_row("[red]errors[/red]", str(outcome.error_count))
    table.add_row("skipped", str(outcome.skipped_count))
    console.print(table)

    if verbose:
        for entry in outcome.log:
            console.print(f"  {entry}", markup=False, highlight=False)

    console.print(format_summary(outcome), markup=False, highlight=False)


def _render_descriptor(descriptor: EventDescriptor) -> None:
    rng = descriptor.range
    if isinstance(rng, AllDay):
        when = f"all day {rng.start_date.isoformat()}"
    else:
        when = f"{rng.start.isoformat(sep=' ')} -> {rng.end.isoformat(sep=' ')}"
    console.print(f"[green]OK[/green] {descriptor.title!r} ({when})")


def _cmd_import(args: argparse.Namespace) -> int:
    """
    Read links from a source and create one calendar event per valid link.
    """
    if not args.out and not args.dry_run:
        print("Please provide --out <file.ics> or use --dry-run.")
        return 1
    if args.first_row < 1:
        print("--first-row must be >= 1.")
        return 1

    prefixes = tuple(args.prefix) if args.prefix else LINK_PREFIXES

    sink: EventSink
    if args.dry_run:
        sink = MemorySink()
    else:
        sink = IcsCalendarSink(args.out)

    outcome = BatchOutcome()
    read_failed = False
    try:
        source = open_source(args.source, column=args.column)
        run_batch(source, sink, prefixes=prefixes, first_row=args.first_row, outcome=outcome)
    except (OSError, ValueError, requests.RequestException) as exc:
        print(f"Could not read {args.source}: {exc}")
        if outcome.rows_seen == 0:
            return 1
        # keep what was processed before the source broke
        read_failed = True
        outcome.log.append(f"source stopped after {outcome.rows_seen} rows: {exc}")

    if outcome.rows_seen == 0:
        print("No URLs found in the source.")
        return 0

    if isinstance(sink, IcsCalendarSink):
        try:
            n = sink.save()
        except OSError as exc:
            print(f"Could not write {args.out}: {exc}")
            return 1
        print(f"Exported {n} events to: {args.out}")

    _render_outcome(outcome, verbose=args.verbose)
    return 1 if read_failed else 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    """
    Show what a single link extracts and builds to.
    """
    params = extract(args.link.strip())

    table = Table(box=box.SIMPLE)
    table.add_column("Field")
    table.add_column("Value")
    for name, value in params.as_dict().items():
        table.add_row(name, value if value else "[dim](empty)[/dim]")
    console.print(table)

    result = build(params)
    if isinstance(result, BuildError):
        console.print(f"[red]ERROR[/red] {result.describe()}")
        return 1

    _render_descriptor(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="agendafacil", description="Google Calendar links -> calendar events")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Create events from a column of links")
    p_import.add_argument("source", type=str, help="Text/CSV/HTML file or http(s) URL")
    p_import.add_argument("--out", "-o", type=str, default="", help="Output .ics path")
    p_import.add_argument("--column", "-c", type=int, default=0, help="CSV column index (0 = column A)")
    p_import.add_argument("--first-row", type=int, default=1, help="Number of the first row (for log messages)")
    p_import.add_argument(
        "--prefix",
        action="append",
        default=[],
        help=f"Accepted link prefix, repeatable (default: {LINK_PREFIXES[0]})",
    )
    p_import.add_argument("--dry-run", action="store_true", help="Validate only, do not write a calendar")
    p_import.add_argument("--verbose", "-v", action="store_true", help="Print the per-row log")

    p_inspect = sub.add_parser("inspect", help="Parse a single event link")
    p_inspect.add_argument("link", type=str, help="Event-creation link")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "import":
        raise SystemExit(_cmd_import(args))
    if args.command == "inspect":
        raise SystemExit(_cmd_inspect(args))

    raise SystemExit(2)
