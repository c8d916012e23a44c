"""FastAPI server for the watchlist."""

from dailyb3 import __version__

__all__ = ["__version__"]
