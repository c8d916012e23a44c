"""Tests for derived stock metrics."""

import pytest

from dailyb3.market_data.quote_client import LiveQuote
from dailyb3.watchlist.metrics import (
    average_signal,
    compute_average_percent200,
    compute_live_derived,
    compute_score,
    compute_upside,
    has_valid_price,
    reference_links,
    upside_signal,
)
from dailyb3.watchlist.models import Checklist, Stock


def make_stock(**fields) -> Stock:
    return Stock(symbol="ABC3", cpf="11144477735", **fields)


class TestComputeUpside:
    """Tests for compute_upside."""

    def test_positive_upside(self):
        assert compute_upside(50.0, 40.0) == pytest.approx(25.0)

    def test_negative_upside(self):
        assert compute_upside(30.0, 40.0) == pytest.approx(-25.0)

    @pytest.mark.parametrize("price", [0, -1.0, None, float("nan"), float("inf")])
    def test_invalid_price(self, price):
        assert compute_upside(50.0, price) is None

    def test_missing_target(self):
        assert compute_upside(None, 40.0) is None


class TestComputeAveragePercent200:
    """Tests for compute_average_percent200."""

    def test_above_average(self):
        assert compute_average_percent200(100.0, 90.0) == pytest.approx(10.0)

    def test_below_average(self):
        assert compute_average_percent200(80.0, 100.0) == pytest.approx(-25.0)

    def test_missing_average_counts_as_zero(self):
        assert compute_average_percent200(40.0, None) == pytest.approx(100.0)

    def test_invalid_price(self):
        assert compute_average_percent200(0, 90.0) is None


class TestComputeLiveDerived:
    """Tests for compute_live_derived."""

    def test_full_quote(self):
        derived = compute_live_derived(
            {"targetPrice": 120.0}, LiveQuote(symbol="ABC3", price=100.0, media200=90.0)
        )
        assert derived.current_price == 100.0
        assert derived.media200 == 90.0
        assert derived.upside == pytest.approx(20.0)
        assert derived.average_percent200 == pytest.approx(10.0)

    def test_reads_target_from_stock(self):
        derived = compute_live_derived(
            make_stock(target_price=50.0), LiveQuote(symbol="ABC3", price=40.0)
        )
        assert derived.upside == pytest.approx(25.0)

    def test_no_target(self):
        derived = compute_live_derived({}, LiveQuote(symbol="ABC3", price=40.0, media200=36.0))
        assert derived.upside is None
        assert derived.average_percent200 == pytest.approx(10.0)

    def test_missing_price_zeroes(self):
        derived = compute_live_derived(
            {"targetPrice": 50.0}, LiveQuote(symbol="ABC3", price=None, media200=36.0)
        )
        assert derived.current_price == 0
        assert derived.upside is None
        assert derived.average_percent200 is None

    def test_no_quote(self):
        derived = compute_live_derived({"targetPrice": 50.0}, None)
        assert derived.current_price == 0
        assert derived.media200 is None

    def test_to_document_keys(self):
        document = compute_live_derived({}, LiveQuote(symbol="ABC3", price=10.0)).to_document()
        assert set(document) == {"currentPrice", "media200", "upside", "averagePercent200"}


class TestComputeScore:
    """Tests for compute_score."""

    def test_counts_true_flags(self):
        assert compute_score(Checklist(insider=True, volume=True, rent=True)) == 3

    def test_empty(self):
        assert compute_score(Checklist()) == 0

    def test_all_true(self):
        checklist = Checklist(**{name: True for name in Checklist.model_fields})
        assert compute_score(checklist) == 11

    def test_mapping_ignores_truthy_non_bools(self):
        assert compute_score({"insider": True, "volume": 1, "obv": "yes"}) == 1


class TestSignals:
    """Tests for display signals and links."""

    def test_average_signal_above_threshold(self):
        stock = make_stock(average_percent200=12.0, distance_positive=10.0, distance_negative=5.0)
        assert average_signal(stock)

    def test_average_signal_below_threshold(self):
        stock = make_stock(average_percent200=-6.0, distance_positive=10.0, distance_negative=5.0)
        assert average_signal(stock)

    def test_average_signal_inside_band(self):
        stock = make_stock(average_percent200=3.0, distance_positive=10.0, distance_negative=5.0)
        assert not average_signal(stock)

    def test_upside_signal(self):
        assert upside_signal(make_stock(upside=25.0))
        assert not upside_signal(make_stock(upside=20.0))
        assert not upside_signal(make_stock())

    def test_reference_links_default_rent(self):
        links = reference_links(make_stock())
        assert "ABC3" in links["statusinvest"]
        assert "papel=ABC3" in links["insiders"]
        assert "cod_negociacao=ABC3" in links["rent"]

    def test_reference_links_custom_rent(self):
        links = reference_links(make_stock(rent_url="https://example.com/rent"))
        assert links["rent"] == "https://example.com/rent"


class TestHasValidPrice:
    """Tests for has_valid_price."""

    def test_values(self):
        assert has_valid_price(0.01)
        assert not has_valid_price(0)
        assert not has_valid_price(True)
        assert not has_valid_price("10")
