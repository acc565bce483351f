"""Unit tests for the SQLite engine adapter."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Generator

import pytest

from litemap.adapters.outbound import (
    CompileError,
    SQLiteEngine,
    parameter_count,
    split_statements,
)
from litemap.ports.outbound import TransactionContext, result_rows


@pytest.fixture
def engine() -> Generator[SQLiteEngine, None, None]:
    eng = SQLiteEngine.memory()
    yield eng
    eng.close()


@pytest.mark.unit
class TestSplitStatements:
    """Tests for statement list splitting."""

    def test_single(self) -> None:
        assert split_statements("SELECT 1;") == ("SELECT 1;",)

    def test_missing_semicolon_supplied(self) -> None:
        assert split_statements("SELECT 1") == ("SELECT 1;",)

    def test_multiple(self) -> None:
        assert split_statements("DROP TABLE IF EXISTS t; CREATE TABLE t (a INTEGER);") == (
            "DROP TABLE IF EXISTS t;",
            "CREATE TABLE t (a INTEGER);",
        )

    def test_semicolon_in_literal(self) -> None:
        """Semicolons inside string literals do not split."""
        assert split_statements("SELECT 'a;b'; SELECT 2;") == ("SELECT 'a;b';", "SELECT 2;")

    def test_empty(self) -> None:
        with pytest.raises(CompileError, match="empty statement"):
            split_statements("  ;  ")

    def test_unterminated_literal(self) -> None:
        with pytest.raises(CompileError, match="incomplete statement"):
            split_statements("SELECT 'abc")


@pytest.mark.unit
class TestSQLiteEngine:
    """Tests for SQLiteEngine."""

    def test_execute_returns_result_sets(self, engine: SQLiteEngine) -> None:
        """One ResultSet per row-producing statement."""
        compiled = engine.compile(
            "CREATE TABLE t (a INTEGER); INSERT INTO t (a) VALUES (1); SELECT rowid, a FROM t;"
        )

        results = engine.execute(None, compiled)

        assert len(compiled) == 3
        assert len(results) == 1
        assert results[0].columns == ["rowid", "a"]
        assert list(result_rows(results)) == [(1, 1)]

    def test_positional_parameters(self, engine: SQLiteEngine) -> None:
        """?N placeholders are one-based."""
        results = engine.execute(None, engine.compile("SELECT ?2, ?1;"), "x", "y")

        assert results[0].rows == [("y", "x")]

    def test_context_counts_statements(self, engine: SQLiteEngine) -> None:
        context = engine.new_context()
        engine.execute(context, engine.compile("SELECT 1; SELECT 2;"))

        assert isinstance(context, TransactionContext)
        assert context.statements == 2

    def test_syntax_error_is_compile_error(self, engine: SQLiteEngine) -> None:
        with pytest.raises(CompileError, match='near "SELEC": syntax error') as info:
            engine.compile("SELECT 1; SELEC 1;")

        assert isinstance(info.value.__cause__, sqlite3.OperationalError)

    def test_schema_error_surfaces_on_execute(self, engine: SQLiteEngine) -> None:
        """A list may create the objects its later statements use."""
        compiled = engine.compile("CREATE TABLE u (a INTEGER); INSERT INTO u (a) VALUES (?1);")
        engine.execute(None, compiled, 5)

        missing = engine.compile("SELECT a FROM nowhere;")
        with pytest.raises(sqlite3.OperationalError, match="no such table"):
            engine.execute(None, missing)

    def test_shared_parameters(self, engine: SQLiteEngine) -> None:
        """Each statement binds the parameters it uses from the shared tuple."""
        compiled = engine.compile(
            "CREATE TABLE t (a INTEGER, b TEXT);"
            " INSERT INTO t (a) VALUES (?1);"
            " UPDATE t SET b = ?2 WHERE a == ?1;"
            " SELECT a, b FROM t;"
        )

        results = engine.execute(None, compiled, 7, "seven")

        assert compiled.parameter_counts == (0, 1, 2, 0)
        assert results[0].rows == [(7, "seven")]

    def test_autocommit_mode(self, engine: SQLiteEngine) -> None:
        """The engine leaves transaction control to explicit statements."""
        assert engine.connection.isolation_level is None
        engine.execute(None, engine.compile("BEGIN TRANSACTION;"))
        assert engine.connection.in_transaction
        engine.execute(None, engine.compile("ROLLBACK;"))
        assert not engine.connection.in_transaction

    def test_close_is_idempotent(self) -> None:
        eng = SQLiteEngine.memory()

        eng.close()
        eng.close()

        assert eng.closed
        with pytest.raises(sqlite3.ProgrammingError):
            _ = eng.connection

    def test_open_missing_file(self, temp_dir: Path) -> None:
        """Opening without create requires an existing file."""
        with pytest.raises(FileNotFoundError):
            SQLiteEngine.open(temp_dir / "missing.db")

    def test_open_create(self, temp_dir: Path) -> None:
        path = temp_dir / "new.db"
        eng = SQLiteEngine.open(path, create=True)
        try:
            eng.execute(None, eng.compile("CREATE TABLE t (a INTEGER);"))
            assert path.exists()
            assert eng.path == path
        finally:
            eng.close()


@pytest.mark.unit
class TestParameterCount:
    """Tests for placeholder counting."""

    @pytest.mark.parametrize(
        ("statement", "expected"),
        [
            ("SELECT 1;", 0),
            ("SELECT ?1, ?1;", 1),
            ("SELECT ?3;", 3),
            ("SELECT ?, ?;", 2),
            ("SELECT ?2, ?;", 3),
            ("SELECT :a, :b, :a;", 2),
            ("SELECT '?1', \"?2\", [?3] -- ?4\n;", 0),
            ("SELECT /* ?9 */ ?1;", 1),
            ("SELECT 'it''s ?5', ?2;", 2),
        ],
    )
    def test_counts(self, statement: str, expected: int) -> None:
        assert parameter_count(statement) == expected
