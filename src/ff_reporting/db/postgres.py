"""
PostgreSQL connection for running reporting queries.

Query builders never open or close connections themselves; this class owns
one psycopg2 connection and hands it to the builders it runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import psycopg2

from ..config import DatabaseSettings
from ..exceptions import ConnectionFailure
from .query_builder import ResultHandler, SqlQueryBuilder


@dataclass
class Postgres:
    """
    Direct PostgreSQL connection without pooling.

    The connection is opened lazily on first use and stays open until
    ``close_connection`` is called.

    :param dbname: Database name.
    :param user: Database username.
    :param password: Database password.
    :param host: Database host (default: localhost).
    :param port: Database port (default: 5432).
    :param connect_timeout: Seconds to wait for the server (default: 30).
    """

    dbname: str
    user: str
    password: str = field(default="", repr=False)
    host: str = "localhost"
    port: int = 5432
    connect_timeout: int = 30
    connection: Any = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    @classmethod
    def from_settings(
        cls, settings: Optional[DatabaseSettings] = None, logger: Optional[logging.Logger] = None
    ) -> "Postgres":
        """Build a connection from ``DatabaseSettings`` (read from the environment if omitted)."""
        settings = settings or DatabaseSettings()
        db = cls(
            dbname=settings.dbname,
            user=settings.user,
            password=settings.password.get_secret_value(),
            host=settings.host,
            port=settings.port,
            connect_timeout=settings.connect_timeout,
        )
        if logger:
            db.logger = logger
        return db

    def connect(self) -> None:
        """
        Establish the connection if it is not already open.

        :raises ConnectionFailure: If connecting fails.
        """
        if self.connection:
            return

        try:
            self.connection = psycopg2.connect(
                dbname=self.dbname,
                user=self.user,
                password=self.password,
                host=self.host,
                port=self.port,
                connect_timeout=self.connect_timeout,
            )
            self.logger.info(f"Connected to PostgreSQL database: {self.dbname}")
        except psycopg2.Error as e:
            self.logger.error(f"Failed to connect to PostgreSQL: {e}")
            raise ConnectionFailure(f"Error connecting to {self.host}:{self.port}/{self.dbname}") from e

    def close_connection(self) -> None:
        if self.connection:
            self.connection.close()
            self.connection = None
            self.logger.debug("Closed PostgreSQL connection")

    def query(self, builder: SqlQueryBuilder):
        """Execute ``builder`` and return the open cursor. The caller must close it."""
        self.connect()
        return builder.execute_query(self.connection)

    def for_each_result(
        self, builder: SqlQueryBuilder, handler: Union[ResultHandler, Callable[[Any], None]]
    ) -> None:
        self.connect()
        builder.for_each_result(self.connection, handler)

    def single_scalar_result_or_none(self, builder: SqlQueryBuilder) -> Any:
        self.connect()
        return builder.single_scalar_result_or_none(self.connection)
