"""Watchlist controller.

Holds the stocks of the active CPF as delivered by the document store
subscription, owns the filter state and the filtered view, and runs the
add / checklist / update / refresh operations against the store and the
quote client.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from dailyb3.exceptions import (
    DuplicateSymbolError,
    InvalidCPFError,
    QuoteFetchError,
    StockNotFoundError,
)
from dailyb3.market_data.quote_client import LiveQuote, QuoteClient
from dailyb3.server.repositories.document_store import (
    DELETE_FIELD,
    DocumentSnapshot,
    DocumentStore,
)
from dailyb3.utils.cpf import validate_cpf
from dailyb3.utils.dates import now_timestamp

from .metrics import compute_live_derived, compute_score, compute_upside
from .models import Annotation, AnnotationType, Checklist, Stock, resolve_checklist_item
from .session import WatchlistSession
from .views import apply_filters, field_alias, sort_stocks

logger = logging.getLogger(__name__)

# Marks an edit_stock() argument the caller did not supply
UNCHANGED: Any = object()


@dataclass
class RefreshReport:
    """Outcome of a bulk refresh.

    Attributes:
        symbols_refreshed: Stocks whose update reached the store
        quote_errors: Symbol -> quote failure (the update went ahead without live fields)
        errors: Symbol -> store failure (the update was lost)
    """

    symbols_refreshed: int = 0
    quote_errors: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


class WatchlistController:
    """Controller for one CPF holder's watchlist.

    Attributes:
        session: Active session context (the CPF)
        store: Document store
        quote_client: Live quote source
        stocks: All stocks of the active CPF, replaced on every snapshot
        filters: Field -> expected value
        stocks_filtered: stocks with filters applied
    """

    def __init__(
        self,
        session: WatchlistSession,
        store: DocumentStore,
        quote_client: QuoteClient,
        max_workers: int = 8,
    ):
        self.session = session
        self.store = store
        self.quote_client = quote_client
        self.max_workers = max_workers

        self.stocks: List[Stock] = []
        self.filters: Dict[str, Any] = {}
        self.stocks_filtered: List[Stock] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def cpf(self) -> str:
        return self.session.cpf

    # --- Lifecycle ---

    def open(self) -> "WatchlistController":
        """Subscribe to the store for the session's CPF.

        Does nothing when no CPF is set or a subscription is already open.
        """
        if self._unsubscribe is not None:
            return self
        if not self.cpf:
            logger.debug("No CPF set, not subscribing")
            return self

        self._unsubscribe = self.store.subscribe(self._on_snapshot, cpf=self.cpf)
        logger.info(f"Watchlist opened ({len(self.stocks)} stocks)")
        return self

    def close(self) -> None:
        """Drop the store subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def switch_cpf(self, cpf: str) -> None:
        """Tear down the current session and open one for another CPF."""
        self.close()
        self.session = WatchlistSession(cpf=cpf, timezone=self.session.timezone)
        self.stocks = []
        self.stocks_filtered = []
        self.open()

    def __enter__(self) -> "WatchlistController":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _on_snapshot(self, documents: List[DocumentSnapshot]) -> None:
        stocks = []
        for doc in documents:
            # The store query is scoped too; this keeps foreign documents out regardless
            if doc.data.get("cpf") != self.cpf:
                continue
            try:
                stocks.append(Stock.from_document(doc.id, doc.data))
            except ValidationError as e:
                logger.warning(f"Skipping malformed document {doc.id}: {e}")

        self.stocks = stocks
        self._apply_filters()

    # --- Lookups ---

    def get_stock(self, symbol: str) -> Stock:
        """Find a stock of the active CPF by symbol.

        Raises:
            StockNotFoundError: If the symbol is not on the watchlist
        """
        symbol = symbol.strip().upper()
        for stock in self.stocks:
            if stock.symbol.upper() == symbol:
                return stock
        raise StockNotFoundError(f"{symbol} is not on the watchlist")

    # --- Add ---

    def add_stock(self, symbol: str, target_price: Optional[float] = None) -> Stock:
        """Add a symbol to the watchlist.

        The new stock starts with an all-false checklist and zeroed metrics,
        then takes live fields from the quote source. A quote failure does
        not block creation.

        Args:
            symbol: Ticker symbol, uppercased
            target_price: Optional desired price

        Returns:
            The created stock

        Raises:
            ValueError: If symbol is empty
            InvalidCPFError: If the session CPF is invalid
            DuplicateSymbolError: If the symbol is already on the watchlist
        """
        symbol = (symbol or "").strip().upper()
        if not symbol:
            raise ValueError("Symbol is required")

        if not validate_cpf(self.cpf):
            raise InvalidCPFError("CPF inválido")

        if any(stock.symbol.upper() == symbol for stock in self.stocks):
            raise DuplicateSymbolError(f"{symbol} is already on the watchlist")

        new_stock: Dict[str, Any] = {
            "symbol": symbol,
            "distanceNegative": 0.0,
            "distancePositive": 0.0,
            "targetPrice": target_price,
            "currentPrice": 0,
            "observerTo": "C",
            "checklist": Checklist().to_document(),
            "score": 0,
            "cpf": self.cpf,
        }

        quote = self._fetch_quote(symbol)
        if quote is not None:
            new_stock.update(compute_live_derived(new_stock, quote).to_document())

        document = {key: value for key, value in new_stock.items() if value is not None}
        self.store.set(symbol, document)
        logger.info(f"Added {symbol} for CPF ending {self.cpf[-2:]}")
        return Stock.from_document(symbol, document)

    # --- Checklist ---

    def toggle_checklist(
        self, symbol: str, item: str, value: Optional[bool] = None
    ) -> Stock:
        """Set one checklist flag (or flip it when value is None).

        Recomputes the score, stamps dateLastCheck and persists the stock.

        Raises:
            StockNotFoundError: If the symbol is not on the watchlist
            ValueError: If item is not a checklist item
        """
        stock = self.get_stock(symbol)
        attr = resolve_checklist_item(item)

        new_value = not getattr(stock.checklist, attr) if value is None else bool(value)
        checklist = stock.checklist.model_copy(update={attr: new_value})

        updated = stock.model_copy(
            update={
                "checklist": checklist,
                "score": compute_score(checklist),
                "date_last_check": now_timestamp(self.session.timezone),
            }
        )
        self.store.update(stock.id or stock.symbol, updated.to_document())
        return updated

    # --- Updates ---

    def _fetch_quote(self, symbol: str) -> Optional[LiveQuote]:
        try:
            return self.quote_client.get_quote(symbol)
        except (QuoteFetchError, ValueError) as e:
            logger.warning(f"Quote unavailable for {symbol}: {e}")
            return None

    def _apply_update(
        self,
        symbol: str,
        updates: Mapping[str, Any],
        quote: Optional[LiveQuote],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(updates)
        if quote is not None:
            payload.update(compute_live_derived(updates, quote).to_document())

        if "rentUrl" in updates and updates["rentUrl"] in (None, ""):
            payload["rentUrl"] = DELETE_FIELD

        sanitized = {key: value for key, value in payload.items() if value is not None}
        self.store.update(symbol, sanitized)
        return sanitized

    def update_stock(
        self, symbol: str, updates: Union[Stock, Mapping[str, Any]]
    ) -> Dict[str, Any]:
        """Refresh live fields and persist a partial update.

        The live quote is merged over ``updates``; a quote failure is logged
        and the update goes ahead without live fields. None values are
        dropped, except ``rentUrl`` set to None or "" which deletes the field.

        Args:
            symbol: Document id
            updates: Stored-key fields to write (or a whole Stock)

        Returns:
            The payload sent to the store

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        if isinstance(updates, Stock):
            updates = updates.to_document()
        symbol = symbol.strip().upper()
        return self._apply_update(symbol, updates, self._fetch_quote(symbol))

    def refresh_stock(self, symbol: str) -> Dict[str, Any]:
        """Manual refresh of one stock, stamping dateLastCheck."""
        stock = self.get_stock(symbol)
        updates = stock.to_document()
        updates["dateLastCheck"] = now_timestamp(self.session.timezone)
        return self.update_stock(stock.symbol, updates)

    def toggle_observer(self, symbol: str) -> Dict[str, Any]:
        """Flip a stock between buy-watch (C) and sell-watch (V)."""
        stock = self.get_stock(symbol)
        updates = stock.to_document()
        updates["observerTo"] = "V" if stock.observer_to == "C" else "C"
        return self.update_stock(stock.symbol, updates)

    def edit_stock(
        self,
        symbol: str,
        current_price: Optional[float] = None,
        target_price: Optional[float] = None,
        distance_negative: Optional[float] = None,
        distance_positive: Optional[float] = None,
        rent_url: Optional[str] = UNCHANGED,
        annotations: Optional[List[Annotation]] = None,
    ) -> Dict[str, Any]:
        """Save the edit form.

        Omitted values keep the stock's current ones. A blank rent_url
        removes the stored link. Setting target_price also recomputes upside
        against the edited price.
        """
        stock = self.get_stock(symbol)
        price = stock.current_price if current_price is None else current_price

        updates: Dict[str, Any] = {
            "currentPrice": price,
            "distanceNegative": (
                stock.distance_negative if distance_negative is None else distance_negative
            ),
            "distancePositive": (
                stock.distance_positive if distance_positive is None else distance_positive
            ),
            "annotations": [
                a.model_dump(by_alias=True)
                for a in (stock.annotations if annotations is None else annotations)
            ],
        }

        if rent_url is not UNCHANGED:
            cleaned = rent_url.strip() if rent_url else ""
            updates["rentUrl"] = cleaned or None

        if target_price is not None:
            updates["targetPrice"] = target_price
            updates["upside"] = compute_upside(target_price, price)

        return self.update_stock(stock.symbol, updates)

    def add_annotation(
        self, symbol: str, text: str, type: AnnotationType = "info"
    ) -> Annotation:
        """Prepend a note to a stock.

        Raises:
            ValueError: If text is blank
        """
        if not text or not text.strip():
            raise ValueError("Annotation text cannot be empty")

        stock = self.get_stock(symbol)
        entry = Annotation(date=now_timestamp(self.session.timezone), text=text, type=type)

        updates = stock.to_document()
        updates["annotations"] = [entry.model_dump(by_alias=True)] + [
            a.model_dump(by_alias=True) for a in stock.annotations
        ]
        self.update_stock(stock.symbol, updates)
        return entry

    def remove_annotation(self, symbol: str, index: int) -> Annotation:
        """Remove a stock's note by position.

        Raises:
            IndexError: If index is out of range
        """
        stock = self.get_stock(symbol)
        if not 0 <= index < len(stock.annotations):
            raise IndexError(f"No annotation {index} on {stock.symbol}")

        removed = stock.annotations[index]
        updates = stock.to_document()
        updates["annotations"] = [
            a.model_dump(by_alias=True)
            for i, a in enumerate(stock.annotations)
            if i != index
        ]
        self.update_stock(stock.symbol, updates)
        return removed

    def refresh_all(self) -> RefreshReport:
        """Refresh the live fields of every stock.

        Quotes are fetched concurrently; each update is written as its
        quote arrives, in completion order. Failures are independent: a
        failed quote still writes the update without live fields, and a
        failed write is recorded without stopping the others.

        Returns:
            RefreshReport with per-symbol failures
        """
        stocks = list(self.stocks)
        report = RefreshReport()
        if not stocks:
            logger.info("Watchlist is empty, nothing to refresh")
            return report

        workers = max(1, min(self.max_workers, len(stocks)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.quote_client.get_quote, stock.symbol): stock
                for stock in stocks
            }
            for future in as_completed(futures):
                stock = futures[future]
                try:
                    quote = future.result()
                except (QuoteFetchError, ValueError) as e:
                    logger.warning(f"Quote unavailable for {stock.symbol}: {e}")
                    report.quote_errors[stock.symbol] = str(e)
                    quote = None
                except Exception as e:
                    logger.error(
                        f"Unexpected quote failure for {stock.symbol}: {e}", exc_info=True
                    )
                    report.quote_errors[stock.symbol] = str(e)
                    quote = None

                try:
                    self._apply_update(stock.id or stock.symbol, stock.to_document(), quote)
                    report.symbols_refreshed += 1
                except Exception as e:
                    logger.error(f"Failed to refresh {stock.symbol}: {e}", exc_info=True)
                    report.errors[stock.symbol] = str(e)

        logger.info(
            f"Refresh complete: {report.symbols_refreshed}/{len(stocks)} stocks, "
            f"{len(report.quote_errors)} quote errors, {len(report.errors)} errors"
        )
        return report

    # --- Filter & sort ---

    def _apply_filters(self) -> None:
        self.stocks_filtered = apply_filters(self.stocks, self.filters, self.session.timezone)

    def set_filter(self, key: str, value: Any) -> List[Stock]:
        """Set one filter and re-apply.

        Raises:
            ValueError: If key is not a stock field
        """
        self.filters = {**self.filters, field_alias(key): value}
        self._apply_filters()
        return self.stocks_filtered

    def set_filters(self, filters: Mapping[str, Any]) -> List[Stock]:
        """Replace all filters and re-apply."""
        self.filters = {field_alias(key): value for key, value in filters.items()}
        self._apply_filters()
        return self.stocks_filtered

    def clear_filters(self) -> List[Stock]:
        """Remove all filters."""
        self.filters = {}
        self._apply_filters()
        return self.stocks_filtered

    def toggle_observer_filter(self) -> List[Stock]:
        """Switch the observer filter between buy-watch and sell-watch."""
        current = self.filters.get("observerTo")
        return self.set_filter("observerTo", "V" if current == "C" else "C")

    def sort(self, field_name: str) -> List[Stock]:
        """Sort the filtered view in place by one field."""
        return sort_stocks(self.stocks_filtered, field_name)
