"""
Click CLI for the dailyb3 watchlist.

The active CPF comes from ``--cpf`` (which is remembered) or from the
session file written by a previous run.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import click
from sqlalchemy.orm import Session

from dailyb3.config import QuoteConfig
from dailyb3.exceptions import ConfigurationError
from dailyb3.market_data.quote_client import QuoteClient
from dailyb3.server.database.session import create_session_factory
from dailyb3.server.repositories.document_store import DocumentStore
from dailyb3.utils.cpf import normalize_cpf
from dailyb3.utils.dates import DEFAULT_TIMEZONE
from dailyb3.watchlist.controller import WatchlistController
from dailyb3.watchlist.session import SessionConfig, WatchlistSession

from .commands import add, check, cpf, edit, list_stocks, note, refresh, show, toggle, unnote

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Attributes:
        db_path: SQLite database file
        session_config: Session file holding the last used CPF
        cpf: Active CPF (None when never set)
        timezone: Timezone for calendar-day filters and timestamps
        verbose: Verbose output enabled
    """

    db_path: str
    session_config: SessionConfig
    cpf: Optional[str]
    timezone: str = DEFAULT_TIMEZONE
    verbose: bool = False
    _controller: Optional[WatchlistController] = field(default=None, repr=False)
    _db: Optional[Session] = field(default=None, repr=False)

    def controller(self) -> WatchlistController:
        """Open the watchlist of the active CPF (once per invocation)."""
        if self._controller is None:
            SessionLocal = create_session_factory(
                f"sqlite:///{os.path.expanduser(self.db_path)}"
            )
            self._db = SessionLocal()
            self._controller = WatchlistController(
                WatchlistSession(cpf=self.cpf or "", timezone=self.timezone),
                DocumentStore(self._db),
                QuoteClient(QuoteConfig.from_env()),
            ).open()
        return self._controller

    def close(self) -> None:
        if self._controller is not None:
            self._controller.close()
            self._controller.quote_client.close()
            self._controller = None
        if self._db is not None:
            self._db.close()
            self._db = None


@click.group()
@click.option(
    "--db",
    default="~/.dailyb3/watchlist.db",
    help="Database file path",
    envvar="DAILYB3_DB_PATH",
)
@click.option("--cpf", "cpf_option", help="CPF to use (remembered for later runs)")
@click.option(
    "--session-file",
    type=click.Path(dir_okay=False),
    help="Path to the session file",
    envvar="DAILYB3_SESSION_FILE",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(
    ctx: click.Context,
    db: str,
    cpf_option: Optional[str],
    session_file: Optional[str],
    verbose: bool,
) -> None:
    """
    dailyb3 - Daily B3 stock watchlist.

    Track buy and sell candidates per CPF with a qualitative checklist,
    live prices and 200-day average signals.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session_config = SessionConfig(session_file)
    try:
        if cpf_option:
            active_cpf = normalize_cpf(cpf_option)
            session_config.save_cpf(active_cpf)
        else:
            active_cpf = session_config.load_cpf()
    except ConfigurationError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    cli_ctx = CLIContext(
        db_path=db,
        session_config=session_config,
        cpf=active_cpf,
        timezone=os.getenv("DAILYB3_TIMEZONE", DEFAULT_TIMEZONE),
        verbose=verbose,
    )
    ctx.obj = cli_ctx
    ctx.call_on_close(cli_ctx.close)


cli.add_command(cpf)
cli.add_command(add)
cli.add_command(list_stocks, name="list")
cli.add_command(show)
cli.add_command(check)
cli.add_command(refresh)
cli.add_command(toggle)
cli.add_command(edit)
cli.add_command(note)
cli.add_command(unnote)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


__all__ = ["cli", "main", "CLIContext"]
