"""
ff-reporting: native SQL query building for reporting DAOs.

Features:
- Fluent SELECT builder with positional parameter binding
- Report filter translation (dimension restrictions to SQL predicates)
- Placeholder conversion for any DB-API paramstyle
- Map legend label sequences
"""

# Version is read from package metadata (pyproject.toml is the single source of truth)
try:
    from importlib.metadata import version

    __version__ = version("ff-reporting")
except Exception:
    __version__ = "1.0.0"

from .config import DatabaseSettings
from .db import Postgres, ResultHandler, SqlQueryBuilder, select
from .exceptions import ConfigurationError, ConnectionFailure, QueryError, ReportingError
from .filter import DimensionType, Filter
from .map import ArabicNumberSequence, LabelSequence

__all__ = [
    # Version
    "__version__",
    # Query building
    "SqlQueryBuilder",
    "ResultHandler",
    "select",
    # Filters
    "DimensionType",
    "Filter",
    # Connections
    "Postgres",
    "DatabaseSettings",
    # Map labels
    "LabelSequence",
    "ArabicNumberSequence",
    # Exceptions
    "ReportingError",
    "QueryError",
    "ConfigurationError",
    "ConnectionFailure",
]
