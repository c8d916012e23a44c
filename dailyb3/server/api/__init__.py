"""API routers for the watchlist server."""
