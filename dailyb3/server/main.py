"""FastAPI application for the daily B3 watchlist.

Serves the per-CPF watchlist API under ``/api/v1``, creates the document
table on startup and runs the optional scheduled bulk refresh.
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dailyb3.exceptions import QuoteFetchError, WatchlistError
from dailyb3.server import __version__
from dailyb3.server.api.v1.router import router as v1_router
from dailyb3.server.config import settings
from dailyb3.server.database.session import check_database_connection, create_tables
from dailyb3.server.models.common import ErrorResponse, HealthResponse
from dailyb3.server.services.scheduler_service import get_scheduler_service

logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Per-CPF B3 stock watchlist with live quotes and a buy/sell checklist",
    version=__version__,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router)


@app.on_event("startup")
async def startup_event():
    """Create the stock document table and start the scheduled refresh."""
    logger.info(f"Starting {settings.app_name} v{__version__} on {settings.database_path}")
    create_tables()

    scheduler = get_scheduler_service()
    try:
        scheduler.initialize()
        scheduler.start()
    except Exception as e:
        logger.error(f"Scheduled refresh not started: {e}", exc_info=True)


@app.on_event("shutdown")
async def shutdown_event():
    try:
        get_scheduler_service().shutdown(wait=True)
    except Exception as e:
        logger.error(f"Error stopping scheduled refresh: {e}", exc_info=True)


@app.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["health"],
    summary="Health check endpoint",
)
async def health_check() -> HealthResponse:
    """Report database reachability and whether the scheduled refresh runs.

    The service is "degraded" when the document store cannot be reached.
    """
    database_connected = check_database_connection()
    return HealthResponse(
        status="healthy" if database_connected else "degraded",
        timestamp=datetime.utcnow(),
        database_connected=database_connected,
        scheduler_running=get_scheduler_service().is_running,
    )


@app.get("/", status_code=status.HTTP_200_OK, tags=["root"], summary="API map")
async def root():
    """Entry points of the watchlist API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "info": "/api/v1/info",
        "endpoints": {
            "validate_cpf": "/api/v1/cpf/{cpf}/validate",
            "stocks": "/api/v1/watchlists/{cpf}/stocks",
            "refresh_all": "/api/v1/watchlists/{cpf}/refresh",
            "scheduler": "/api/v1/scheduler/status",
        },
    }


def _error_response(status_code: int, error: str, message: str, detail=None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(WatchlistError)
async def watchlist_error_handler(request: Request, exc: WatchlistError):
    """Watchlist errors not mapped by an endpoint; quote failures are upstream."""
    status_code = (
        status.HTTP_502_BAD_GATEWAY
        if isinstance(exc, QuoteFetchError)
        else status.HTTP_400_BAD_REQUEST
    )
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return _error_response(status_code, type(exc).__name__, str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An unexpected error occurred",
        str(exc) if settings.debug else None,
    )


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "dailyb3.server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
