"""
Watchlist commands for the dailyb3 CLI.

Each command opens the watchlist of the session CPF, runs one controller
operation and prints the result.
"""

import sys
from typing import Optional, Tuple

import click

from dailyb3.exceptions import (
    ConfigurationError,
    DocumentNotFoundError,
    DuplicateSymbolError,
    InvalidCPFError,
    StockNotFoundError,
)
from dailyb3.utils.cpf import normalize_cpf, validate_cpf
from dailyb3.watchlist.controller import UNCHANGED

from .utils import (
    get_cli_context,
    get_controller,
    print_error,
    print_refresh_report,
    print_stock,
    print_stock_table,
    print_success,
    print_warning,
)

ANNOTATION_TYPES = ["info", "warning", "error"]


def _parse_filters(values: Tuple[str, ...]) -> dict:
    filters = {}
    for value in values:
        key, sep, expected = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected key=value, got: {value}", param_hint="--filter")
        filters[key.strip()] = expected.strip()
    return filters


@click.command()
@click.argument("value", required=False)
@click.pass_context
def cpf(ctx: click.Context, value: Optional[str]) -> None:
    """
    Show or set the active CPF.

    \b
    Examples:
      dailyb3 cpf                  # Show the active CPF
      dailyb3 cpf 111.444.777-35   # Switch to another CPF
    """
    cli_ctx = get_cli_context(ctx)

    if value is None:
        if not cli_ctx.cpf:
            click.echo("No CPF set.")
            return
        state = "valid" if validate_cpf(cli_ctx.cpf) else "invalid"
        click.echo(f"CPF: {cli_ctx.cpf} ({state})")
        return

    normalized = normalize_cpf(value)
    try:
        cli_ctx.session_config.save_cpf(normalized)
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(1)
    cli_ctx.cpf = normalized

    if validate_cpf(normalized):
        print_success(f"CPF set to {normalized}")
    else:
        print_warning(f"CPF inválido: {normalized}. Stocks cannot be added until it is fixed.")


@click.command()
@click.argument("symbol")
@click.option("--target", type=float, help="Target price")
@click.pass_context
def add(ctx: click.Context, symbol: str, target: Optional[float]) -> None:
    """
    Add a stock to the watchlist.

    \b
    Examples:
      dailyb3 add PETR4
      dailyb3 add VALE3 --target 80
    """
    controller = get_controller(ctx)
    try:
        stock = controller.add_stock(symbol, target)
    except (InvalidCPFError, DuplicateSymbolError, ValueError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Added {stock.symbol}")
    print_stock(stock, verbose=get_cli_context(ctx).verbose)


@click.command(name="list")
@click.option("--sort", "sort_by", help="Sort field (e.g. score, upside, dateLastCheck)")
@click.option(
    "--observer",
    type=click.Choice(["C", "V"], case_sensitive=False),
    help="Only buy-watch (C) or sell-watch (V) stocks",
)
@click.option("--filter", "filters", multiple=True, help="Field filter as key=value")
@click.pass_context
def list_stocks(
    ctx: click.Context,
    sort_by: Optional[str],
    observer: Optional[str],
    filters: Tuple[str, ...],
) -> None:
    """
    List the watchlist.

    \b
    Examples:
      dailyb3 list --sort score
      dailyb3 list --observer V --filter symbol=PETR
      dailyb3 list --filter dateLastCheck=2026-10-18
    """
    controller = get_controller(ctx)
    parsed = _parse_filters(filters)
    if observer:
        parsed["observerTo"] = observer.upper()

    try:
        controller.set_filters(parsed)
        if sort_by:
            controller.sort(sort_by)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)

    print_stock_table(controller.stocks_filtered)


@click.command()
@click.argument("symbol")
@click.pass_context
def show(ctx: click.Context, symbol: str) -> None:
    """Show one stock with its checklist and notes."""
    controller = get_controller(ctx)
    try:
        stock = controller.get_stock(symbol)
    except StockNotFoundError as e:
        print_error(str(e))
        sys.exit(1)
    print_stock(stock, verbose=True)


@click.command()
@click.argument("symbol")
@click.argument("item")
@click.option("--on/--off", "value", default=None, help="Set the flag instead of flipping it")
@click.pass_context
def check(ctx: click.Context, symbol: str, item: str, value: Optional[bool]) -> None:
    """
    Flip a checklist item.

    \b
    Examples:
      dailyb3 check PETR4 insider
      dailyb3 check PETR4 margemLiquida --off
    """
    controller = get_controller(ctx)
    try:
        stock = controller.toggle_checklist(symbol, item, value)
    except (StockNotFoundError, DocumentNotFoundError, ValueError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"{stock.symbol} score: {stock.score}")


@click.command()
@click.argument("symbol", required=False)
@click.pass_context
def refresh(ctx: click.Context, symbol: Optional[str]) -> None:
    """
    Refresh live prices.

    With SYMBOL refreshes one stock and stamps its last check date;
    without it refreshes the whole watchlist.
    """
    controller = get_controller(ctx)

    if symbol is None:
        print_refresh_report(controller.refresh_all())
        return

    try:
        controller.refresh_stock(symbol)
        stock = controller.get_stock(symbol)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Refreshed {stock.symbol}: {stock.current_price:.2f}")


@click.command()
@click.argument("symbol")
@click.pass_context
def toggle(ctx: click.Context, symbol: str) -> None:
    """Switch a stock between buy-watch (C) and sell-watch (V)."""
    controller = get_controller(ctx)
    try:
        controller.toggle_observer(symbol)
        stock = controller.get_stock(symbol)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"{stock.symbol} now watched to {'buy' if stock.observer_to == 'C' else 'sell'}")


@click.command()
@click.argument("symbol")
@click.option("--price", type=float, help="Current price")
@click.option("--target", type=float, help="Target price (recomputes upside)")
@click.option("--distance-negative", type=float, help="Lower 200-day average threshold (%)")
@click.option("--distance-positive", type=float, help="Upper 200-day average threshold (%)")
@click.option("--rent-url", help="Share-rental page link (empty string removes it)")
@click.pass_context
def edit(
    ctx: click.Context,
    symbol: str,
    price: Optional[float],
    target: Optional[float],
    distance_negative: Optional[float],
    distance_positive: Optional[float],
    rent_url: Optional[str],
) -> None:
    """
    Edit a stock.

    \b
    Examples:
      dailyb3 edit PETR4 --target 45 --distance-negative 10 --distance-positive 15
      dailyb3 edit PETR4 --rent-url ""
    """
    controller = get_controller(ctx)
    try:
        controller.edit_stock(
            symbol,
            current_price=price,
            target_price=target,
            distance_negative=distance_negative,
            distance_positive=distance_positive,
            rent_url=UNCHANGED if rent_url is None else rent_url,
        )
        stock = controller.get_stock(symbol)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Updated {stock.symbol}")
    print_stock(stock, verbose=get_cli_context(ctx).verbose)


@click.command()
@click.argument("symbol")
@click.argument("text")
@click.option(
    "--type", "note_type", default="info", type=click.Choice(ANNOTATION_TYPES), help="Note type"
)
@click.pass_context
def note(ctx: click.Context, symbol: str, text: str, note_type: str) -> None:
    """Add a note to a stock."""
    controller = get_controller(ctx)
    try:
        controller.add_annotation(symbol, text, note_type)
    except (StockNotFoundError, DocumentNotFoundError, ValueError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Note added to {symbol.upper()}")


@click.command()
@click.argument("symbol")
@click.argument("index", type=int)
@click.pass_context
def unnote(ctx: click.Context, symbol: str, index: int) -> None:
    """Remove a stock's note by its number (see 'dailyb3 show')."""
    controller = get_controller(ctx)
    try:
        removed = controller.remove_annotation(symbol, index)
    except (StockNotFoundError, DocumentNotFoundError, IndexError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Removed note: {removed.text}")
