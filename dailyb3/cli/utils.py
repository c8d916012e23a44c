"""
CLI utility functions for the watchlist tool.

Output formatting and access to the objects the group callback puts on
the click context.
"""

import sys
from typing import List

import click

from dailyb3.watchlist.controller import RefreshReport, WatchlistController
from dailyb3.watchlist.metrics import average_signal, reference_links, upside_signal
from dailyb3.watchlist.models import CHECKLIST_ITEMS, CHECKLIST_LABELS, Stock


def get_cli_context(ctx: click.Context):
    """Get the CLIContext from the click context."""
    return ctx.obj


def get_controller(ctx: click.Context) -> WatchlistController:
    """Open the watchlist controller, exiting when no CPF is set."""
    cli_ctx = get_cli_context(ctx)
    if not cli_ctx.cpf:
        print_error("No CPF set. Run: dailyb3 cpf <CPF>")
        sys.exit(1)
    return cli_ctx.controller()


def print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def print_success(message: str) -> None:
    """Print success message."""
    click.secho(message, fg="green")


def print_warning(message: str) -> None:
    """Print warning message."""
    click.secho(f"Warning: {message}", fg="yellow")


def _fmt(value, suffix: str = "") -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.2f}{suffix}"
    return f"{value}{suffix}"


def print_stock_table(stocks: List[Stock]) -> None:
    """Print stocks as one row each."""
    if not stocks:
        click.echo("No stocks found.")
        return

    click.echo()
    header = (
        f"{'Symbol':<8} {'Obs':<3} {'Price':>9} {'Target':>9} {'Upside':>9} "
        f"{'MM200':>9} {'%MM200':>9} {'Score':>5}  Last check"
    )
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for stock in stocks:
        upside = f"{_fmt(stock.upside, '%'):>9}"
        deviation = f"{_fmt(stock.average_percent200, '%'):>9}"
        if upside_signal(stock):
            upside = click.style(upside, fg="green")
        if average_signal(stock):
            deviation = click.style(deviation, fg="yellow")
        click.echo(
            f"{stock.symbol:<8} {stock.observer_to or '-':<3} "
            f"{_fmt(stock.current_price):>9} {_fmt(stock.target_price):>9} {upside} "
            f"{_fmt(stock.media200):>9} {deviation} {stock.score:>5}  "
            f"{stock.date_last_check or '-'}"
        )
    click.echo()


def print_stock(stock: Stock, verbose: bool = False) -> None:
    """Print one stock with its checklist, notes and links."""
    click.echo()
    click.secho(f"=== {stock.symbol} ===", bold=True)
    click.echo(f"Watch:      {'buy (C)' if stock.observer_to == 'C' else 'sell (V)'}")
    click.echo(f"Price:      {_fmt(stock.current_price)}")
    click.echo(f"Target:     {_fmt(stock.target_price)}")
    click.echo(f"Upside:     {_fmt(stock.upside, '%')}")
    click.echo(f"MM200:      {_fmt(stock.media200)} ({_fmt(stock.average_percent200, '%')})")
    click.echo(
        f"Thresholds: -{_fmt(stock.distance_negative)}% / +{_fmt(stock.distance_positive)}%"
    )
    click.echo(f"Score:      {stock.score}/{len(CHECKLIST_ITEMS)}")

    click.echo()
    checklist = stock.checklist.to_document()
    for item in CHECKLIST_ITEMS:
        mark = "x" if checklist[item] else " "
        click.echo(f"  [{mark}] {CHECKLIST_LABELS[item]} ({item})")

    if stock.annotations:
        click.echo()
        click.secho("Notes:", bold=True)
        for index, note in enumerate(stock.annotations):
            color = {"warning": "yellow", "error": "red"}.get(note.type)
            click.secho(f"  {index}. [{note.date}] {note.text}", fg=color)

    if verbose:
        click.echo()
        for name, url in reference_links(stock).items():
            click.echo(f"  {name}: {url}")


def print_refresh_report(report: RefreshReport) -> None:
    """Print the outcome of a bulk refresh."""
    print_success(f"Refreshed {report.symbols_refreshed} stocks")
    for symbol, error in report.quote_errors.items():
        print_warning(f"{symbol}: quote unavailable ({error})")
    for symbol, error in report.errors.items():
        print_error(f"{symbol}: {error}")
