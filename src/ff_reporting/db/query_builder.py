"""
Lightweight DSL for building native SQL reporting queries.

The builder accumulates SELECT fragments and their bound parameters, renders
a single qmark-parameterized statement and executes it on a caller-owned
DB-API connection:

    builder = (
        select("Site.SiteId", "Site.Date1")
        .from_("Site")
        .where("Site.ActivityId").in_([1, 2, 3])
        .filtered_by(report_filter)
    )
    builder.order_by("Site.Date1")
    builder.for_each_result(connection, lambda row: rows.append(row))

``from_`` and ``and_`` append trusted SQL verbatim and never bind parameters.
Untrusted values must go through ``where(...).equal_to`` or ``where(...).in_``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Callable, Collection, Dict, List, Optional, Union

from ..exceptions import QueryError
from ..filter import DimensionType, Filter
from .paramstyle import convert_placeholders, detect_paramstyle


class ResultHandler(ABC):
    """Receives the rows of a query executed by ``SqlQueryBuilder.for_each_result``."""

    def init(self, cursor) -> None:
        """Called once with the open cursor before the first row (e.g. to read ``description``)."""
        pass

    @abstractmethod
    def handle(self, row) -> None:
        """Called once per result row."""
        pass


class _CallableResultHandler(ResultHandler):
    def __init__(self, callback: Callable[[Any], None]):
        self.callback = callback

    def handle(self, row) -> None:
        self.callback(row)


class SqlQueryBuilder:
    """
    Accumulates the clauses of a SELECT statement together with its parameters.

    Parameters are tracked per clause (table list, then WHERE) so that the
    Nth ``?`` of the rendered statement always binds the Nth value of
    ``parameters``, whatever order the clauses were built in.

    A builder is meant to be built, executed (or embedded as a subquery) once,
    and is not safe to share between threads.
    """

    # Restricted dimension -> column matched directly against the restriction ids
    DIMENSION_COLUMNS: Dict[DimensionType, str] = {
        DimensionType.ACTIVITY: "Site.ActivityId",
        DimensionType.DATABASE: "Site.DatabaseId",
        DimensionType.PARTNER: "Site.PartnerId",
        DimensionType.SITE: "Site.SiteId",
    }

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._fields: List[str] = []
        self._tables = ""
        self._table_params: List[Any] = []
        self._where = ""
        self._where_params: List[Any] = []
        self._group_by: List[str] = []
        self._order_by: List[str] = []
        self._limit = ""
        self._pending: List[Any] = []

    @classmethod
    def select(cls, *fields: str, logger: Optional[logging.Logger] = None) -> "SqlQueryBuilder":
        """Create a builder with the given fields already in the SELECT list."""
        return cls(logger=logger).select_fields(*fields)

    # ==================== Clause building ====================

    def select_fields(self, *names: str) -> "SqlQueryBuilder":
        for name in names:
            self.append_field(name)
        return self

    def append_field(self, expr: str) -> "SqlQueryBuilder":
        """Append a field, or a comma separated list of fields, to the field list."""
        self._fields.append(expr)
        return self

    def from_(self, from_clause: str) -> "SqlQueryBuilder":
        """
        Append raw SQL to the FROM clause.

        Args:
            from_clause: Valid SQL table list, may include joins. Not validated.
        """
        self._tables += from_clause
        return self

    def left_join(
        self, table: Union[str, "SqlQueryBuilder"], alias: Optional[str] = None
    ) -> "JoinBuilder":
        """
        Start a LEFT JOIN on a table or on a derived table.

        The join is only added to the FROM clause once ``on()`` is called on
        the returned ``JoinBuilder``; until then ``sql()`` raises RuntimeError.

        Args:
            table: Table name, or a builder rendered as a derived table
            alias: Alias of the derived table (required for builders)

        Returns:
            JoinBuilder waiting for the join condition
        """
        if isinstance(table, SqlQueryBuilder):
            if not alias:
                raise ValueError("A derived table requires an alias.")
            return JoinBuilder(self, f" LEFT JOIN ({table.sql()}) AS {alias}", table.parameters)
        return JoinBuilder(self, f" LEFT JOIN {table}", [])

    def where(self, expr: str) -> "WhereClauseBuilder":
        """
        Start a predicate on ``expr``, conjoined with any existing predicate.

        Nothing is added until the returned builder is completed with
        ``equal_to`` or ``in_``; until then ``sql()`` raises RuntimeError.
        """
        return WhereClauseBuilder(self, expr)

    def where_true(self, expr: str) -> "SqlQueryBuilder":
        """Conjoin a complete raw predicate. No parameters are bound."""
        self._append_predicate(expr, [])
        return self

    def and_(self, expr: str) -> "SqlQueryBuilder":
        """Append ``AND (expr)`` to the WHERE clause. Raw SQL, no parameters are bound."""
        if self._where:
            self._where += f" AND ({expr}) "
        else:
            self._where = f"({expr}) "
        return self

    def filtered_by(self, report_filter: Filter) -> "SqlQueryBuilder":
        """
        Add one predicate per restricted dimension of ``report_filter``.

        Dimensions without a known column mapping are skipped.
        """
        for dimension in report_filter.restricted_dimensions:
            restrictions = sorted(report_filter.get_restrictions(dimension))

            if dimension == DimensionType.INDICATOR:
                self.add_indicator_filter(restrictions)
            elif dimension == DimensionType.ADMIN_LEVEL:
                self.add_admin_level_filter(restrictions)
            elif dimension in self.DIMENSION_COLUMNS:
                self.where(self.DIMENSION_COLUMNS[dimension]).in_(restrictions)
            else:
                self.logger.debug(f"Ignoring restriction on unsupported dimension {dimension.value}")
        return self

    def add_indicator_filter(self, indicator_ids: Collection[Any]) -> None:
        self.where("Indicator.IndicatorId").in_(indicator_ids)

    def add_admin_level_filter(self, admin_entity_ids: Collection[Any]) -> None:
        self.where("Site.LocationId").in_(
            SqlQueryBuilder.select("Link.LocationId", logger=self.logger)
            .from_("LocationAdminLink Link")
            .where("Link.AdminEntityId")
            .in_(admin_entity_ids)
        )

    def group_by(self, expr: str) -> "SqlQueryBuilder":
        self._group_by.append(expr)
        return self

    def order_by(self, expr: str) -> "SqlQueryBuilder":
        self._order_by.append(expr)
        return self

    def set_limit_clause(self, clause: str) -> None:
        self._limit = clause

    def _append_predicate(self, text: str, params: List[Any]) -> None:
        if self._where:
            self._where += " AND "
        self._where += text
        self._where_params.extend(params)

    def _append_join(self, text: str, params: List[Any]) -> None:
        self._tables += text
        self._table_params.extend(params)

    def _open(self, continuation) -> None:
        self._pending.append(continuation)

    def _close(self, continuation) -> None:
        if continuation in self._pending:
            self._pending.remove(continuation)

    # ==================== Rendering ====================

    @property
    def parameters(self) -> List[Any]:
        """Bound values in placeholder order."""
        return self._table_params + self._where_params

    def sql(self) -> str:
        """
        Render the statement.

        :raises RuntimeError: If a where() or left_join() was started but not completed.
        """
        if self._pending:
            pending = "; ".join(continuation.describe() for continuation in self._pending)
            raise RuntimeError(f"Query has incomplete clauses: {pending}")

        sql = f"SELECT {', '.join(self._fields)} FROM {self._tables}"

        if self._where:
            sql += f" WHERE {self._where}"
        if self._group_by:
            sql += f" GROUP BY {', '.join(self._group_by)}"
        if self._order_by:
            sql += f" ORDER BY {', '.join(self._order_by)}"
        sql += f" {self._limit}"

        return sql

    def __str__(self) -> str:
        return self.sql()

    # ==================== Execution ====================

    def execute_query(self, connection):
        """
        Execute the statement and return the open cursor.

        The caller owns the cursor and must close it.

        :param connection: Open DB-API connection.
        :return: Cursor positioned before the first row.
        :raises QueryError: If the database rejects the statement.
        """
        return self._execute(connection, self.sql())

    def for_each_result(
        self, connection, handler: Union[ResultHandler, Callable[[Any], None]]
    ) -> None:
        """
        Execute the statement and feed every row to ``handler``.

        ``handler.init`` is called once with the open cursor, then
        ``handler.handle`` once per row. The cursor is closed on every exit
        path. Database errors are raised as ``QueryError``; exceptions raised
        by the handler itself propagate unchanged.

        :param connection: Open DB-API connection.
        :param handler: ResultHandler, or a callable receiving each row.
        :raises QueryError: If executing or fetching fails.
        """
        if not isinstance(handler, ResultHandler):
            handler = _CallableResultHandler(handler)

        sql = self.sql()
        cursor = self._execute(connection, sql)
        try:
            handler.init(cursor)
            while True:
                row = self._fetchone(cursor, sql)
                if row is None:
                    break
                handler.handle(row)
        finally:
            self._close_quietly(cursor)

    def single_scalar_result_or_none(self, connection) -> Any:
        """
        Execute the statement and return the first column of the first row.

        :param connection: Open DB-API connection.
        :return: The value, or None if there are no results.
        :raises QueryError: If executing or fetching fails.
        """
        sql = self.sql()
        cursor = self._execute(connection, sql)
        try:
            row = self._fetchone(cursor, sql)
            return row[0] if row is not None else None
        finally:
            self._close_quietly(cursor)

    def single_date_result_or_none(self, connection) -> Optional[date]:
        """
        Execute the statement and return the first column of the first row as a date.

        Drivers without a native date type (e.g. sqlite3) return ISO strings,
        which are parsed.

        :param connection: Open DB-API connection.
        :return: The date, or None if there are no results or the value is NULL.
        :raises QueryError: If executing or fetching fails.
        :raises TypeError: If the value cannot be read as a date.
        """
        value = self.single_scalar_result_or_none(connection)
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value[:10])
            except ValueError as e:
                raise TypeError(f"Cannot convert result {value!r} to a date") from e
        raise TypeError(f"Cannot convert {type(value).__name__} result to a date")

    def _execute(self, connection, sql: str):
        self.logger.debug(sql)
        statement, params = convert_placeholders(
            sql, self.parameters, detect_paramstyle(connection)
        )

        cursor = None
        try:
            cursor = connection.cursor()
            cursor.execute(statement, params)
            return cursor
        except Exception as e:
            if cursor is not None:
                self._close_quietly(cursor)
            self.logger.error(
                "Query execution failed",
                extra={"sql": sql, "error": str(e)},
                exc_info=True,
            )
            raise QueryError(sql, self.parameters) from e

    def _fetchone(self, cursor, sql: str):
        try:
            return cursor.fetchone()
        except Exception as e:
            self.logger.error(
                "Fetching query results failed",
                extra={"sql": sql, "error": str(e)},
                exc_info=True,
            )
            raise QueryError(sql, self.parameters) from e

    def _close_quietly(self, cursor) -> None:
        try:
            cursor.close()
        except Exception as e:
            self.logger.debug(f"Ignoring error while closing cursor: {e}")


class WhereClauseBuilder:
    """Completes a predicate started with ``SqlQueryBuilder.where``."""

    def __init__(self, builder: SqlQueryBuilder, expr: str):
        self.builder = builder
        self.expr = expr
        builder._open(self)

    def describe(self) -> str:
        return f"WHERE {self.expr} (missing equal_to/in_)"

    def in_(self, values: Union[Collection[Any], SqlQueryBuilder]) -> SqlQueryBuilder:
        """
        Restrict the expression to a collection of values or to a subquery.

        A single value renders ``= ?``; several render ``IN (?, ?, ...)``.

        :raises TypeError: If ``values`` is a string or bytes.
        :raises ValueError: If ``values`` is an empty collection.
        """
        if isinstance(values, SqlQueryBuilder):
            self._complete(f"{self.expr} IN ({values.sql()}) ", values.parameters)
            return self.builder

        if isinstance(values, (str, bytes)):
            self.builder._close(self)
            raise TypeError(
                f"Expected a collection of values for {self.expr}, got {type(values).__name__}"
            )
        values = list(values)
        if not values:
            self.builder._close(self)
            raise ValueError("Cannot match against empty list.")
        if len(values) == 1:
            self._complete(f"{self.expr} = ?", values)
        else:
            placeholders = ", ".join("?" for _ in values)
            self._complete(f"{self.expr} IN ({placeholders})", values)
        return self.builder

    def equal_to(self, value: Any) -> SqlQueryBuilder:
        self._complete(f"{self.expr} = ? ", [value])
        return self.builder

    def _complete(self, text: str, params: List[Any]) -> None:
        self.builder._close(self)
        self.builder._append_predicate(text, params)


class JoinBuilder:
    """Completes a join started with ``SqlQueryBuilder.left_join``."""

    def __init__(self, builder: SqlQueryBuilder, join_clause: str, params: List[Any]):
        self.builder = builder
        self.join_clause = join_clause
        self.params = params
        self.completed = False
        builder._open(self)

    def describe(self) -> str:
        return f"{self.join_clause.strip()} (missing on)"

    def on(self, expr: str) -> SqlQueryBuilder:
        if self.completed:
            raise RuntimeError("Join condition has already been supplied.")
        self.completed = True
        self.builder._close(self)
        self.builder._append_join(f"{self.join_clause} ON ({expr}) ", self.params)
        return self.builder


select = SqlQueryBuilder.select
