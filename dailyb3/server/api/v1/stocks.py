"""API endpoints for a CPF holder's watchlist.

Every endpoint works on one controller opened for the CPF in the path:
list with filters and sorting, add, edit, checklist toggles, quick
actions, annotations and bulk refresh.
"""

import logging
from typing import Generator, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from dailyb3.exceptions import (
    DocumentNotFoundError,
    DuplicateSymbolError,
    InvalidCPFError,
    StockNotFoundError,
)
from dailyb3.market_data.quote_client import QuoteClient
from dailyb3.server.config import settings
from dailyb3.server.database.session import get_db
from dailyb3.server.models.stock import (
    AnnotationCreate,
    ChecklistUpdate,
    CPFValidationResponse,
    RefreshReportResponse,
    StockCreate,
    StockEdit,
    StockResponse,
)
from dailyb3.server.repositories.document_store import DocumentStore
from dailyb3.utils.cpf import normalize_cpf, validate_cpf
from dailyb3.watchlist.controller import UNCHANGED, WatchlistController
from dailyb3.watchlist.models import Annotation
from dailyb3.watchlist.session import WatchlistSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["watchlist"])


def get_quote_client() -> Generator[QuoteClient, None, None]:
    """Quote client dependency, closed after the request."""
    client = QuoteClient(settings.quote_config())
    try:
        yield client
    finally:
        client.close()


def get_controller(
    cpf: str,
    db: Session = Depends(get_db),
    quote_client: QuoteClient = Depends(get_quote_client),
) -> Generator[WatchlistController, None, None]:
    """Watchlist controller for the CPF in the path, subscribed for the request."""
    controller = WatchlistController(
        WatchlistSession(cpf=cpf, timezone=settings.timezone),
        DocumentStore(db),
        quote_client,
        max_workers=settings.refresh_max_workers,
    )
    with controller:
        yield controller


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _stock_response(controller: WatchlistController, symbol: str) -> StockResponse:
    try:
        return StockResponse.from_stock(controller.get_stock(symbol))
    except StockNotFoundError as e:
        raise _not_found(e)


@router.get(
    "/cpf/{cpf}/validate",
    response_model=CPFValidationResponse,
    status_code=status.HTTP_200_OK,
    summary="Validate a CPF",
)
def check_cpf(cpf: str) -> CPFValidationResponse:
    """Check a CPF's digits; the add form is only offered for valid ones."""
    return CPFValidationResponse(cpf=normalize_cpf(cpf), valid=validate_cpf(cpf))


@router.get(
    "/watchlists/{cpf}/stocks",
    response_model=List[StockResponse],
    status_code=status.HTTP_200_OK,
    summary="List stocks",
)
def list_stocks(
    symbol: Optional[str] = Query(None, description="Filter by symbol substring"),
    observer_to: Optional[Literal["C", "V"]] = Query(
        None, alias="observerTo", description="Filter by buy (C) or sell (V) watch"
    ),
    date_last_check: Optional[str] = Query(
        None, alias="dateLastCheck", description="Filter by last check calendar day"
    ),
    sort_by: Optional[str] = Query(
        None, description="Sort field (numbers descending, dates ascending)"
    ),
    controller: WatchlistController = Depends(get_controller),
) -> List[StockResponse]:
    """List the CPF's stocks with optional filters and sorting."""
    filters = {
        "symbol": symbol,
        "observerTo": observer_to,
        "dateLastCheck": date_last_check,
    }
    controller.set_filters({k: v for k, v in filters.items() if v is not None})

    if sort_by:
        try:
            controller.sort(sort_by)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
            )

    return [StockResponse.from_stock(stock) for stock in controller.stocks_filtered]


@router.post(
    "/watchlists/{cpf}/stocks",
    response_model=StockResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a stock",
)
def add_stock(
    item: StockCreate,
    controller: WatchlistController = Depends(get_controller),
) -> StockResponse:
    """Add a symbol, pricing it from the live quote source."""
    try:
        stock = controller.add_stock(item.symbol, item.target_price)
    except DuplicateSymbolError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (InvalidCPFError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )
    return StockResponse.from_stock(stock)


@router.post(
    "/watchlists/{cpf}/refresh",
    response_model=RefreshReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh all prices",
)
def refresh_all(
    controller: WatchlistController = Depends(get_controller),
) -> RefreshReportResponse:
    """Refresh live prices for every stock on the watchlist."""
    report = controller.refresh_all()
    if report.errors:
        logger.warning(f"Bulk refresh finished with {len(report.errors)} store errors")
    return RefreshReportResponse.from_report(report)


@router.get(
    "/watchlists/{cpf}/stocks/{symbol}",
    response_model=StockResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a stock",
)
def get_stock(
    symbol: str,
    controller: WatchlistController = Depends(get_controller),
) -> StockResponse:
    return _stock_response(controller, symbol)


@router.patch(
    "/watchlists/{cpf}/stocks/{symbol}",
    response_model=StockResponse,
    status_code=status.HTTP_200_OK,
    summary="Save the edit form",
)
def edit_stock(
    symbol: str,
    edit: StockEdit,
    controller: WatchlistController = Depends(get_controller),
) -> StockResponse:
    """Edit price, target, thresholds, rental link and annotations."""
    rent_url = edit.rent_url if "rent_url" in edit.model_fields_set else UNCHANGED
    try:
        controller.edit_stock(
            symbol,
            current_price=edit.current_price,
            target_price=edit.target_price,
            distance_negative=edit.distance_negative,
            distance_positive=edit.distance_positive,
            rent_url=rent_url,
            annotations=edit.annotations,
        )
    except (StockNotFoundError, DocumentNotFoundError) as e:
        raise _not_found(e)
    return _stock_response(controller, symbol)


@router.put(
    "/watchlists/{cpf}/stocks/{symbol}/checklist/{item}",
    response_model=StockResponse,
    status_code=status.HTTP_200_OK,
    summary="Set a checklist item",
)
def set_checklist_item(
    symbol: str,
    item: str,
    update: ChecklistUpdate,
    controller: WatchlistController = Depends(get_controller),
) -> StockResponse:
    """Set (or flip) one checklist flag; the score follows."""
    try:
        controller.toggle_checklist(symbol, item, update.value)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )
    return _stock_response(controller, symbol)


@router.post(
    "/watchlists/{cpf}/stocks/{symbol}/refresh",
    response_model=StockResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh one stock",
)
def refresh_stock(
    symbol: str,
    controller: WatchlistController = Depends(get_controller),
) -> StockResponse:
    """Refresh the live price of one stock and stamp its last check."""
    try:
        controller.refresh_stock(symbol)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        raise _not_found(e)
    return _stock_response(controller, symbol)


@router.post(
    "/watchlists/{cpf}/stocks/{symbol}/observer",
    response_model=StockResponse,
    status_code=status.HTTP_200_OK,
    summary="Toggle buy/sell watch",
)
def toggle_observer(
    symbol: str,
    controller: WatchlistController = Depends(get_controller),
) -> StockResponse:
    try:
        controller.toggle_observer(symbol)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        raise _not_found(e)
    return _stock_response(controller, symbol)


@router.post(
    "/watchlists/{cpf}/stocks/{symbol}/annotations",
    response_model=Annotation,
    status_code=status.HTTP_201_CREATED,
    summary="Add a note",
)
def add_annotation(
    symbol: str,
    annotation: AnnotationCreate,
    controller: WatchlistController = Depends(get_controller),
) -> Annotation:
    try:
        return controller.add_annotation(symbol, annotation.text, annotation.type)
    except (StockNotFoundError, DocumentNotFoundError) as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )


@router.delete(
    "/watchlists/{cpf}/stocks/{symbol}/annotations/{index}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a note",
)
def remove_annotation(
    symbol: str,
    index: int,
    controller: WatchlistController = Depends(get_controller),
) -> None:
    try:
        controller.remove_annotation(symbol, index)
    except (StockNotFoundError, DocumentNotFoundError, IndexError) as e:
        raise _not_found(e)
