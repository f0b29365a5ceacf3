"""Finance forecast exceptions."""

from __future__ import annotations


class ForecastError(Exception):
    """Base exception for forecast operations."""

    pass


class DataAccessError(ForecastError):
    """Raised when an upstream read or write against the store fails.

    A forecast run that hits this aborts as a whole; nothing partial is returned.
    """

    def __init__(self, source: str, message: str = ""):
        self.source = source
        super().__init__(message or f"Failed to access {source}")
