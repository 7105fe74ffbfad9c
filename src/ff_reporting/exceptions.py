"""
Custom exceptions for the ff-reporting package.
"""

from typing import Any, Optional, Sequence


class ReportingError(Exception):
    """Base exception for all ff-reporting errors."""

    pass


class QueryError(ReportingError):
    """Raised when the database fails while executing a built query."""

    def __init__(self, sql: str, params: Optional[Sequence[Any]] = None):
        self.sql = sql
        self.params = list(params or [])
        super().__init__(f"Exception thrown while processing SQL: '{sql}'")


class ConfigurationError(ReportingError):
    """Raised for invalid settings or unsupported driver parameter styles."""

    pass


class ConnectionFailure(ReportingError):
    """Raised when a database connection cannot be established."""

    pass
