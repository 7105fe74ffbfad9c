"""
Database query building and execution modules.
"""

from .paramstyle import convert_placeholders, detect_paramstyle
from .postgres import Postgres
from .query_builder import JoinBuilder, ResultHandler, SqlQueryBuilder, WhereClauseBuilder, select

__all__ = [
    "SqlQueryBuilder",
    "WhereClauseBuilder",
    "JoinBuilder",
    "ResultHandler",
    "select",
    # Connections
    "Postgres",
    # Placeholder styles
    "convert_placeholders",
    "detect_paramstyle",
]
