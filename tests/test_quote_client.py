"""Unit tests for the live quote client."""

from unittest.mock import Mock, patch

import pytest
import requests

from dailyb3.config import QuoteConfig
from dailyb3.exceptions import QuoteFetchError
from dailyb3.market_data.quote_client import LiveQuote, QuoteClient


def scan_response(rows, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = {"totalCount": len(rows), "data": rows}
    response.raise_for_status = Mock()
    return response


class TestQuoteClient:
    """Test suite for QuoteClient."""

    @pytest.fixture
    def config(self):
        return QuoteConfig(timeout=5)

    @pytest.fixture
    def client(self, config):
        return QuoteClient(config)

    def test_client_initialization(self, client, config):
        assert client.config == config
        assert client.BASE_URL == "https://scanner.tradingview.com"
        assert client.session.headers["Accept"] == "application/json"
        assert client.session.headers["User-Agent"].startswith("dailyb3/")

    def test_get_quote_success(self, client):
        response = scan_response([{"s": "BMFBOVESPA:PETR4", "d": [38.12, 36.4]}])

        with patch.object(client, "_request", return_value=response) as mock_request:
            quote = client.get_quote("petr4")

        assert quote == LiveQuote(symbol="PETR4", price=38.12, media200=36.4)
        method, endpoint = mock_request.call_args.args
        assert (method, endpoint) == ("POST", "/brazil/scan")
        payload = mock_request.call_args.kwargs["json_data"]
        assert payload["symbols"]["tickers"] == ["BMFBOVESPA:PETR4"]
        assert payload["columns"] == ["close", "SMA200"]

    def test_picks_matching_ticker_row(self, client):
        response = scan_response([
            {"s": "BMFBOVESPA:PETR3", "d": [40.0, 39.0]},
            {"s": "BMFBOVESPA:PETR4", "d": [38.0, 36.0]},
        ])
        with patch.object(client, "_request", return_value=response):
            quote = client.get_quote("PETR4")
        assert quote.price == 38.0

    def test_missing_average(self, client):
        response = scan_response([{"s": "BMFBOVESPA:ABC3", "d": [10.0, None]}])
        with patch.object(client, "_request", return_value=response):
            quote = client.get_quote("ABC3")
        assert quote.price == 10.0
        assert quote.media200 is None

    def test_unknown_ticker_raises(self, client):
        with patch.object(client, "_request", return_value=scan_response([])):
            with pytest.raises(QuoteFetchError, match="No quote data"):
                client.get_quote("XXXX3")

    def test_rate_limit(self, client):
        with patch.object(client, "_request", return_value=scan_response([], status_code=429)):
            with pytest.raises(QuoteFetchError, match="Rate limit"):
                client.get_quote("PETR4")

    def test_http_error_wrapped(self, client):
        response = scan_response([], status_code=500)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        with patch.object(client, "_request", return_value=response):
            with pytest.raises(QuoteFetchError, match="Quote request failed"):
                client.get_quote("PETR4")

    def test_network_error_wrapped(self, client):
        with patch.object(
            client, "_request", side_effect=requests.exceptions.ConnectionError("down")
        ):
            with pytest.raises(QuoteFetchError):
                client.get_quote("PETR4")

    def test_invalid_json_wrapped(self, client):
        response = scan_response([])
        response.json.side_effect = ValueError("no json")
        with patch.object(client, "_request", return_value=response):
            with pytest.raises(QuoteFetchError, match="Invalid JSON"):
                client.get_quote("PETR4")

    @pytest.mark.parametrize(
        "rows",
        [
            [None],
            ["BMFBOVESPA:PETR4"],
            [{"s": "BMFBOVESPA:PETR4", "d": 5}],
            [{"s": "BMFBOVESPA:PETR4", "d": {"close": 38.0}}],
        ],
    )
    def test_malformed_rows_wrapped(self, client, rows):
        with patch.object(client, "_request", return_value=scan_response(rows)):
            with pytest.raises(QuoteFetchError, match="Malformed quote"):
                client.get_quote("PETR4")

    def test_non_list_data_wrapped(self, client):
        response = scan_response([])
        response.json.return_value = {"data": {"s": "BMFBOVESPA:PETR4"}}
        with patch.object(client, "_request", return_value=response):
            with pytest.raises(QuoteFetchError, match="Malformed quote rows"):
                client.get_quote("PETR4")

    @pytest.mark.parametrize("symbol", ["", None])
    def test_invalid_symbol(self, client, symbol):
        with pytest.raises(ValueError, match="Invalid symbol"):
            client.get_quote(symbol)

    def test_non_alphanumeric_symbol(self, client):
        with pytest.raises(ValueError, match="alphanumeric"):
            client.get_quote("PETR-4")


class TestQuoteConfig:
    """Tests for QuoteConfig."""

    def test_defaults(self):
        config = QuoteConfig()
        assert config.market == "brazil"
        assert config.exchange == "BMFBOVESPA"
        assert config.max_retries == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"base_url": "ftp://x"}, {"timeout": 0}, {"max_retries": -1},
         {"market": ""}, {"retry_delay": 0}],
    )
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            QuoteConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DAILYB3_QUOTE_TIMEOUT", "3")
        monkeypatch.setenv("DAILYB3_QUOTE_MAX_RETRIES", "2")
        monkeypatch.setenv("DAILYB3_QUOTE_BASE_URL", "http://localhost:9000")

        config = QuoteConfig.from_env()

        assert config.timeout == 3
        assert config.max_retries == 2
        assert config.base_url == "http://localhost:9000"
        assert config.market == "brazil"
