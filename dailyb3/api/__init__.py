"""HTTP client foundations."""

from .base_client import BaseAPIClient

__all__ = ["BaseAPIClient"]
