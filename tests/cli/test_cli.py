"""Tests for the dailyb3 CLI commands."""

from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from dailyb3.cli import cli
from dailyb3.exceptions import QuoteFetchError
from dailyb3.market_data.quote_client import LiveQuote

CPF = "11144477735"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def paths(tmp_path):
    """Database and session file paths for one test."""
    return {"db": str(tmp_path / "watchlist.db"), "session": str(tmp_path / "session.yaml")}


@pytest.fixture
def quote_client():
    """Patch the CLI's quote client with a fixed quote."""
    with patch("dailyb3.cli.QuoteClient") as client_cls:
        client = client_cls.return_value
        client.get_quote.side_effect = lambda symbol: LiveQuote(
            symbol=symbol.upper(), price=40.0, media200=36.0
        )
        yield client


@pytest.fixture
def invoke(runner, paths, quote_client):
    """Invoke the CLI against the test database and session file."""

    def _invoke(*args):
        return runner.invoke(
            cli, ["--db", paths["db"], "--session-file", paths["session"], *args]
        )

    return _invoke


class TestCPFCommand:
    """Tests for 'dailyb3 cpf'."""

    def test_no_cpf(self, invoke):
        result = invoke("cpf")
        assert result.exit_code == 0
        assert "No CPF set" in result.output

    def test_set_and_show(self, invoke, paths):
        result = invoke("cpf", "111.444.777-35")
        assert result.exit_code == 0
        assert f"CPF set to {CPF}" in result.output

        with open(paths["session"]) as f:
            assert yaml.safe_load(f) == {"dailyb3-cpf": CPF}

        result = invoke("cpf")
        assert f"CPF: {CPF} (valid)" in result.output

    def test_invalid_cpf_warns(self, invoke):
        result = invoke("cpf", "11111111111")
        assert result.exit_code == 0
        assert "CPF inválido" in result.output

    def test_global_option_persists(self, invoke):
        invoke("--cpf", CPF, "list")
        assert f"CPF: {CPF}" in invoke("cpf").output


class TestAddCommand:
    """Tests for 'dailyb3 add'."""

    def test_add(self, invoke):
        result = invoke("--cpf", CPF, "add", "abc3", "--target", "50")

        assert result.exit_code == 0
        assert "Added ABC3" in result.output
        assert "25.00%" in result.output

    def test_add_without_cpf(self, invoke):
        result = invoke("add", "PETR4")
        assert result.exit_code == 1
        assert "No CPF set" in result.output

    def test_add_invalid_cpf(self, invoke):
        result = invoke("--cpf", "11144477734", "add", "PETR4")
        assert result.exit_code == 1
        assert "CPF inválido" in result.output

    def test_add_duplicate(self, invoke):
        invoke("--cpf", CPF, "add", "PETR4")
        result = invoke("add", "petr4")
        assert result.exit_code == 1
        assert "already on the watchlist" in result.output

    def test_add_with_quote_failure(self, invoke, quote_client):
        quote_client.get_quote.side_effect = QuoteFetchError("down")
        result = invoke("--cpf", CPF, "add", "PETR4")
        assert result.exit_code == 0


class TestListCommand:
    """Tests for 'dailyb3 list'."""

    @pytest.fixture
    def loaded(self, invoke):
        invoke("--cpf", CPF, "add", "PETR4", "--target", "60")
        invoke("add", "VALE3", "--target", "44")
        invoke("toggle", "VALE3")
        return invoke

    def test_list(self, loaded):
        result = loaded("list")
        assert result.exit_code == 0
        assert "PETR4" in result.output
        assert "VALE3" in result.output

    def test_list_observer(self, loaded):
        result = loaded("list", "--observer", "V")
        assert "VALE3" in result.output
        assert "PETR4" not in result.output

    def test_list_filter(self, loaded):
        result = loaded("list", "--filter", "symbol=petr")
        assert "PETR4" in result.output
        assert "VALE3" not in result.output

    def test_list_sorted(self, loaded):
        output = loaded("list", "--sort", "upside").output
        assert output.index("PETR4") < output.index("VALE3")

    def test_list_bad_filter(self, loaded):
        result = loaded("list", "--filter", "nope")
        assert result.exit_code != 0

    def test_list_unknown_field(self, loaded):
        result = loaded("list", "--sort", "bogus")
        assert result.exit_code == 1
        assert "Unknown stock field" in result.output

    def test_empty(self, invoke):
        result = invoke("--cpf", CPF, "list")
        assert "No stocks found" in result.output


class TestStockCommands:
    """Tests for check, refresh, toggle, edit and notes."""

    @pytest.fixture
    def with_stock(self, invoke):
        invoke("--cpf", CPF, "add", "PETR4", "--target", "50")
        return invoke

    def test_check(self, with_stock):
        result = with_stock("check", "PETR4", "insider")
        assert result.exit_code == 0
        assert "PETR4 score: 1" in result.output

        show = with_stock("show", "PETR4").output
        assert "[x] Insider" in show

    def test_check_unknown_item(self, with_stock):
        result = with_stock("check", "PETR4", "beta")
        assert result.exit_code == 1

    def test_check_unknown_symbol(self, with_stock):
        result = with_stock("check", "NOPE3", "insider")
        assert result.exit_code == 1
        assert "not on the watchlist" in result.output

    def test_refresh_one(self, with_stock, quote_client):
        quote_client.get_quote.side_effect = None
        quote_client.get_quote.return_value = LiveQuote(symbol="PETR4", price=25.0)

        result = with_stock("refresh", "PETR4")

        assert result.exit_code == 0
        assert "Refreshed PETR4: 25.00" in result.output

    def test_refresh_all(self, with_stock):
        with_stock("add", "VALE3")
        result = with_stock("refresh")
        assert result.exit_code == 0
        assert "Refreshed 2 stocks" in result.output

    def test_toggle(self, with_stock):
        result = with_stock("toggle", "PETR4")
        assert "watched to sell" in result.output

    def test_edit_rent_url(self, with_stock):
        with_stock("edit", "PETR4", "--rent-url", "https://example.com/rent")
        assert "https://example.com/rent" in with_stock("show", "PETR4").output

        result = with_stock("edit", "PETR4", "--rent-url", "")

        assert result.exit_code == 0
        assert "investsite.com.br" in with_stock("show", "PETR4").output

    def test_notes(self, with_stock):
        with_stock("note", "PETR4", "first")
        with_stock("note", "PETR4", "second", "--type", "warning")

        show = with_stock("show", "PETR4").output
        assert show.index("0. [") < show.index("second") < show.index("first")

        result = with_stock("unnote", "PETR4", "1")
        assert "Removed note: first" in result.output

    def test_unnote_out_of_range(self, with_stock):
        result = with_stock("unnote", "PETR4", "5")
        assert result.exit_code == 1
