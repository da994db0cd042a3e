"""
CLI interface for CostOf.Life.

Add expenses and look at what your daily life costs.
"""

import logging
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from costoflife.config.loader import AppConfig, default_config, load_config
from costoflife.config.log import configure_logging
from costoflife.core.dates import parse_date, today
from costoflife.core.errors import CostOfLifeError
from costoflife.core.record import CURRENCY_SYMBOL, ExpenseRecord, parse
from costoflife.storage.ledger import Ledger

app = typer.Typer(help="Keep track of the cost of your daily life.")
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

PROGRESS_BAR_WIDTH = 10


@dataclass
class CliState:
    """What every command needs: settings, the loaded ledger and the date."""
    config: AppConfig
    ledger: Ledger
    ledger_path: Path
    target_date: date


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Use a custom config file"
    ),
    on: Optional[str] = typer.Option(
        None,
        "--on",
        "-o",
        help="Date used to calculate the cost of life, e.g. 31/12/2021"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logs"
    ),
):
    """CostOf.Life CLI."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        app_config = load_config(str(config)) if config else default_config()
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading config:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    target_date = today()
    if on is not None:
        target_date = parse_date(on)
        if target_date is None:
            console.print(f"[red]The date provided is not valid:[/] {on}")
            sys.exit(EXIT_CODE_FAIL)

    data_dir = app_config.data_dir
    if not data_dir.exists():
        authorized = typer.confirm(
            "The CostOf.Life data dir does not exist, can I create it?",
            default=True
        )
        if not authorized:
            console.print("nevermind then :(")
            sys.exit(EXIT_CODE_PASS)
        data_dir.mkdir(parents=True)
        console.print(f"data folder created at {data_dir}")

    ledger = Ledger()
    if app_config.ledger_path.exists():
        try:
            ledger.load(app_config.ledger_path)
        except OSError as e:
            console.print(f"[red]Error loading the ledger:[/] {str(e)}")
            sys.exit(EXIT_CODE_FAIL)

    ctx.obj = CliState(
        config=app_config,
        ledger=ledger,
        ledger_path=app_config.ledger_path,
        target_date=target_date
    )
    if ctx.invoked_subcommand is None:
        _print_cost_of_life(ctx.obj)


@app.command()
def add(
    ctx: typer.Context,
    expense: List[str] = typer.Argument(
        ...,
        help="The expense, e.g. Car 2000€ .transport 5y"
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Add without asking for confirmation"
    ),
):
    """Add a new expense."""
    state: CliState = ctx.obj
    try:
        record = parse(" ".join(expense))
    except CostOfLifeError as e:
        console.print(f"[red]Cannot parse the expense:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if not yes:
        _display_record(record)
        if not typer.confirm("Do you want to add it?", default=True):
            console.print("ok, another time")
            _print_cost_of_life(state)
            return

    state.ledger.insert(record)
    try:
        state.ledger.save(state.ledger_path)
    except OSError as e:
        console.print(f"[red]Error saving the ledger:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    console.print("[green]✓[/] done!")
    _print_cost_of_life(state)


@app.command()
def summary(ctx: typer.Context):
    """Print the summary of the active expenses."""
    state: CliState = ctx.obj
    table = Table(title="Summary")
    table.add_column("Item")
    table.add_column("Price", justify="right")
    table.add_column("Diem", justify="right")
    table.add_column("Progress")

    for row in state.ledger.summary(state.target_date):
        table.add_row(
            row.name,
            _format_currency(row.total_amount),
            _format_currency(row.per_diem),
            _format_progress(row.progress)
        )
    console.print(table)
    _print_cost_of_life(state)


@app.command()
def tags(ctx: typer.Context):
    """Print the per diem of the active expenses grouped by tag."""
    state: CliState = ctx.obj
    total = state.ledger.cost_of_life(state.target_date)

    table = Table(title="Tags")
    table.add_column("Title")
    table.add_column("Count", justify="right")
    table.add_column("Diem", justify="right")
    table.add_column("%", justify="right")

    for row in state.ledger.tags(state.target_date):
        table.add_row(
            row.tag,
            str(row.count),
            _format_currency(row.per_diem),
            _format_share(row.per_diem, total)
        )
    console.print(table)
    _print_cost_of_life(state)


@app.command()
def search(
    ctx: typer.Context,
    pattern: List[str] = typer.Argument(
        ...,
        help="Text to match against expense names and tags"
    ),
):
    """Search for an expense."""
    state: CliState = ctx.obj
    rows = state.ledger.search(
        " ".join(pattern),
        on=state.target_date,
        threshold=state.config.search_threshold
    )
    if not rows:
        console.print("No matches found ¯\\_(ツ)_/¯")
        return

    table = Table(title="Search")
    for column in ("Item", "Price", "Diem", "Start", "End", "Tags", "%"):
        table.add_column(column, justify="right" if column in ("Price", "Diem") else "left")

    total_amount, total_per_diem = Decimal(0), Decimal(0)
    for row in rows:
        table.add_row(
            row.name,
            _format_currency(row.total_amount),
            _format_currency(row.per_diem),
            row.starts_on.isoformat(),
            row.ends_on.isoformat(),
            row.tags,
            _format_progress(row.progress)
        )
        total_amount += row.total_amount
        total_per_diem += row.per_diem
    table.add_section()
    table.add_row(
        "", _format_currency(total_amount), _format_currency(total_per_diem), "", "", "", ""
    )
    console.print(table)
    _print_cost_of_life(state)


def _format_currency(amount: Decimal) -> str:
    """Format an amount with 2 decimals, thousands separator and currency."""
    return f"{amount:,.2f}{CURRENCY_SYMBOL}"


def _format_progress(progress: float) -> str:
    """Progress as a bar followed by the percentage."""
    bar = "▮" * int(progress * PROGRESS_BAR_WIDTH)
    return f"{bar:<{PROGRESS_BAR_WIDTH}} {progress * 100:.2f}%"


def _format_share(part: Decimal, total: Decimal) -> str:
    """Share of the total as a percentage."""
    if total == 0:
        return "N/A"
    return f"{part / total * 100:.2f}%"


def _display_record(record: ExpenseRecord):
    """Show the parsed expense before it is added."""
    amount = _format_currency(record.amount_display)
    if record.amount_is_total():
        amount += f" (Total: {_format_currency(record.amount_total())})"
    console.print(f"Name     : {record.name}")
    console.print(f"Tags     : {', '.join(record.tag_labels())}")
    console.print(f"Amount   : {amount}")
    console.print(f"From - To: {record.starts_on.isoformat()} - {record.ends_on().isoformat()}")
    console.print(f"Per Diem : {_format_currency(record.per_diem())}")


def _print_cost_of_life(state: CliState):
    cost = state.ledger.cost_of_life(state.target_date)
    console.print(f"Today CostOf.Life is: {_format_currency(cost)}")


if __name__ == "__main__":
    app()
