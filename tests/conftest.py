"""
Shared pytest fixtures for ff-reporting tests.
"""

import sqlite3
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def site_db():
    """
    In-memory sqlite3 database with a small reporting schema.

    sqlite3 uses the qmark paramstyle, so built statements run unchanged.
    """
    conn = sqlite3.connect(":memory:")
    conn.executescript(
        """
        CREATE TABLE Site (
            SiteId INTEGER PRIMARY KEY,
            ActivityId INTEGER,
            PartnerId INTEGER,
            LocationId INTEGER,
            Date1 TEXT
        );
        CREATE TABLE Partner (PartnerId INTEGER PRIMARY KEY, Name TEXT);
        CREATE TABLE LocationAdminLink (LocationId INTEGER, AdminEntityId INTEGER);

        INSERT INTO Partner VALUES (1, 'UNICEF'), (2, 'MSF');
        INSERT INTO Site VALUES (10, 100, 1, 1000, '2024-05-01');
        INSERT INTO Site VALUES (11, 100, 2, 1001, '2024-06-15');
        INSERT INTO Site VALUES (12, 200, 1, 1002, '2024-07-30');
        INSERT INTO LocationAdminLink VALUES (1000, 7), (1001, 8), (1002, 7);
        """
    )
    yield conn
    conn.close()


@pytest.fixture
def mock_connection():
    """DB-API connection mock whose cursor returns no rows by default."""
    connection = MagicMock()
    cursor = MagicMock()
    cursor.fetchone.return_value = None
    connection.cursor.return_value = cursor
    return connection
