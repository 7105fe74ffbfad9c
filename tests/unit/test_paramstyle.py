"""
Unit tests for converting qmark statements to other DB-API paramstyles.
"""

import sqlite3

import pytest

from ff_reporting.db.paramstyle import convert_placeholders, detect_paramstyle
from ff_reporting.exceptions import ConfigurationError

SQL = "SELECT a FROM t WHERE t.x = ? AND t.y IN (?, ?)"
PARAMS = [1, "two", 3]


class TestConvertPlaceholders:
    """Test conversion for each supported paramstyle."""

    def test_qmark_unchanged(self):
        """Test qmark statements pass through untouched."""
        assert convert_placeholders(SQL, PARAMS, "qmark") == (SQL, PARAMS)

    def test_default_is_qmark(self):
        """Test that no paramstyle means qmark."""
        assert convert_placeholders(SQL, tuple(PARAMS)) == (SQL, PARAMS)

    def test_numeric(self):
        """Test numeric placeholders (:1, :2)."""
        sql, params = convert_placeholders(SQL, PARAMS, "numeric")

        assert sql == "SELECT a FROM t WHERE t.x = :1 AND t.y IN (:2, :3)"
        assert params == PARAMS

    def test_named(self):
        """Test named placeholders (:p1, :p2)."""
        sql, params = convert_placeholders(SQL, PARAMS, "named")

        assert sql == "SELECT a FROM t WHERE t.x = :p1 AND t.y IN (:p2, :p3)"
        assert params == {"p1": 1, "p2": "two", "p3": 3}

    def test_format(self):
        """Test format placeholders (%s)."""
        sql, params = convert_placeholders(SQL, PARAMS, "format")

        assert sql == "SELECT a FROM t WHERE t.x = %s AND t.y IN (%s, %s)"
        assert params == PARAMS

    def test_pyformat(self):
        """Test pyformat placeholders (%(p1)s) as used by psycopg2."""
        sql, params = convert_placeholders(SQL, PARAMS, "pyformat")

        assert sql == "SELECT a FROM t WHERE t.x = %(p1)s AND t.y IN (%(p2)s, %(p3)s)"
        assert params == {"p1": 1, "p2": "two", "p3": 3}

    def test_unsupported_style_raises(self):
        """Test unknown paramstyles are rejected."""
        with pytest.raises(ConfigurationError, match="Unsupported paramstyle"):
            convert_placeholders(SQL, PARAMS, "dollar")


class TestLiteralsAndComments:
    """Test that only real placeholders are rewritten."""

    def test_question_mark_in_string_literal_kept(self):
        """Test a ? inside a quoted literal is not a placeholder."""
        sql, _ = convert_placeholders(
            "SELECT a FROM t WHERE t.note = 'why?' AND t.x = ?", [1], "numeric"
        )
        assert sql == "SELECT a FROM t WHERE t.note = 'why?' AND t.x = :1"

    def test_escaped_quote_in_literal(self):
        """Test doubled quotes do not end the literal early."""
        sql, _ = convert_placeholders("SELECT 'it''s ?' FROM t WHERE x = ?", [1], "numeric")
        assert sql == "SELECT 'it''s ?' FROM t WHERE x = :1"

    def test_quoted_identifier_and_comments_kept(self):
        """Test quoted identifiers and comments are copied through."""
        sql, _ = convert_placeholders(
            'SELECT "odd?name" FROM t -- really?\nWHERE x = ? /* or ? */', [1], "numeric"
        )
        assert sql == 'SELECT "odd?name" FROM t -- really?\nWHERE x = :1 /* or ? */'

    def test_percent_escaped_for_format_styles(self):
        """Test literal % signs are doubled for format and pyformat drivers."""
        sql, _ = convert_placeholders("SELECT a FROM t WHERE t.n LIKE 'ab%' AND x = ?", [1], "format")
        assert sql == "SELECT a FROM t WHERE t.n LIKE 'ab%%' AND x = %s"

    def test_percent_untouched_for_other_styles(self):
        """Test % is left alone for non-format drivers."""
        sql, _ = convert_placeholders("SELECT a % 2 FROM t WHERE x = ?", [1], "named")
        assert sql == "SELECT a % 2 FROM t WHERE x = :p1"


class TestDetectParamstyle:
    """Test paramstyle detection from connection objects."""

    def test_sqlite_connection(self):
        """Test sqlite3 connections report qmark."""
        conn = sqlite3.connect(":memory:")
        try:
            assert detect_paramstyle(conn) == "qmark"
        finally:
            conn.close()

    def test_psycopg2_connection(self):
        """Test connections from psycopg2 report pyformat."""
        import psycopg2  # noqa: F401

        class FakePsycopgConnection:
            pass

        FakePsycopgConnection.__module__ = "psycopg2.extensions"

        assert detect_paramstyle(FakePsycopgConnection()) == "pyformat"

    def test_unknown_driver_defaults_to_qmark(self):
        """Test objects without a DB-API driver module fall back to qmark."""

        class UnknownConnection:
            pass

        UnknownConnection.__module__ = "not_a_real_driver.connections"

        assert detect_paramstyle(UnknownConnection()) == "qmark"
