"""SQLite implementation of the Engine port.

This adapter drives the standard library sqlite3 module. The connection
runs in autocommit mode (isolation_level=None) so that the mapper's
transaction tracker alone decides when BEGIN, COMMIT and ROLLBACK are
issued.

Compilation:
    A statement list is split into complete ";"-terminated statements
    with sqlite3.complete_statement, which understands string literals,
    comments and trigger bodies. Each statement is then prepared under
    EXPLAIN, which parses it without running it, so syntax errors are
    compile errors. Errors that depend on the schema (no such table) are
    left to execute(), because an earlier statement of the same list may
    create the object.

Parameters:
    All statements of a list share one positional parameter tuple. Each
    statement binds the prefix of the tuple up to the highest ?N it uses.

Thread Safety:
    None. The connection is used from one caller context at a time.
"""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path
from typing import Any

from litemap.infrastructure.logging import get_logger
from litemap.ports.outbound.engine import CompiledStatement, ResultSet, TransactionContext

logger = get_logger(__name__)

# String literals, quoted identifiers and comments are matched whole so that
# placeholders are only recognized outside them.
_LEXEME = re.compile(
    r"""'(?:[^']|'')*'|"(?:[^"]|"")*"|`(?:[^`]|``)*`|\[[^\]]*\]"""
    r"""|--[^\n]*|/\*.*?(?:\*/|\Z)"""
    r"""|\?(?P<number>\d*)|(?<![\w$])(?P<name>[:@$]\w+)""",
    re.DOTALL,
)

_EXPLAIN = re.compile(r"\s*EXPLAIN\b", re.IGNORECASE)

_SYNTAX_MARKERS = ("syntax error", "incomplete input", "unrecognized token")


class CompileError(sqlite3.Error):
    """Statement text could not be split into complete statements."""


def split_statements(text: str) -> tuple[str, ...]:
    """Split text into complete statements, each ending in ";".

    A missing final semicolon is supplied. Empty statements are dropped.

    Raises:
        CompileError: If the text is empty or ends inside an unterminated
            construct such as an open string literal.
    """
    pieces = text.split(";")
    statements: list[str] = []
    buf = ""
    for piece in pieces[:-1]:
        buf += piece + ";"
        if sqlite3.complete_statement(buf):
            stmt = buf.strip()
            if stmt != ";":
                statements.append(stmt)
            buf = ""
    rest = (buf + pieces[-1]).strip()
    if rest:
        stmt = rest if rest.endswith(";") else rest + ";"
        if not sqlite3.complete_statement(stmt):
            raise CompileError(f"incomplete statement: {rest}")
        statements.append(stmt)
    if not statements:
        raise CompileError("empty statement")
    return tuple(statements)


def parameter_count(statement: str) -> int:
    """Return the number of parameters a statement binds.

    This is the highest parameter index, numbered the way SQLite numbers
    them: ?N takes index N, a bare ? and each new :name, @name or $name
    take one more than the highest index so far.
    """
    highest = 0
    names: set[str] = set()
    for match in _LEXEME.finditer(statement):
        number = match.group("number")
        name = match.group("name")
        if number:
            highest = max(highest, int(number))
        elif number is not None:
            highest += 1
        elif name is not None and name not in names:
            names.add(name)
            highest += 1
    return highest


def is_syntax_error(error: sqlite3.Error) -> bool:
    message = str(error)
    return any(marker in message for marker in _SYNTAX_MARKERS)


class SQLiteEngine:
    """Engine backed by a sqlite3 connection.

    Usage:
        engine = SQLiteEngine.open("data/app.db", create=True)
        compiled = engine.compile("SELECT rowid, name FROM rec WHERE rowid == ?1;")
        result_sets = engine.execute(None, compiled, 1)
        engine.close()
    """

    def __init__(self, connection: sqlite3.Connection, path: str | Path | None = None) -> None:
        """Wrap an open connection.

        The connection is switched to autocommit mode; a transaction
        pending on it is committed by sqlite3 as a side effect.

        Args:
            connection: The open sqlite3 connection. Ownership passes to
                the engine, which closes it on close().
            path: Database file path, for diagnostics only.
        """
        connection.isolation_level = None
        self._conn: sqlite3.Connection | None = connection
        self._path = Path(path) if path is not None else None

    @classmethod
    def open(
        cls,
        path: str | Path,
        create: bool = False,
        timeout: float = 5.0,
    ) -> SQLiteEngine:
        """Open a database file.

        Args:
            path: Database file path.
            create: If False, the file must already exist.
            timeout: Seconds to wait on a locked database.

        Raises:
            FileNotFoundError: If the file is missing and create is False.
            sqlite3.Error: If the file cannot be opened.
        """
        path = Path(path)
        if not create and not path.exists():
            raise FileNotFoundError(f"database file not found: {path}")
        conn = sqlite3.connect(path, timeout=timeout, isolation_level=None)
        logger.debug("sqlite_opened", path=str(path), create=create)
        return cls(conn, path)

    @classmethod
    def memory(cls) -> SQLiteEngine:
        """Open a private in-memory database."""
        return cls(sqlite3.connect(":memory:", isolation_level=None))

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        return self._conn

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def closed(self) -> bool:
        return self._conn is None

    def compile(self, text: str) -> CompiledStatement:
        """Split and syntax-check a statement list.

        Raises:
            CompileError: If the text is incomplete or SQLite reports a
                syntax error for one of its statements.
        """
        statements = split_statements(text)
        counts = tuple(parameter_count(stmt) for stmt in statements)
        for stmt, count in zip(statements, counts):
            self._check_syntax(stmt, count)
        return CompiledStatement(text=text, statements=statements, parameter_counts=counts)

    def _check_syntax(self, statement: str, count: int) -> None:
        if _EXPLAIN.match(statement):
            return
        try:
            cursor = self.connection.execute(f"EXPLAIN {statement}", (None,) * count)
        except sqlite3.Error as e:
            if is_syntax_error(e):
                raise CompileError(str(e)) from e
            # Schema errors are reported by execute().
            return
        cursor.close()

    def execute(
        self,
        context: TransactionContext | None,
        compiled: CompiledStatement,
        *params: Any,
    ) -> list[ResultSet]:
        conn = self.connection
        results: list[ResultSet] = []
        for stmt, count in zip(compiled.statements, compiled.parameter_counts):
            cursor = conn.execute(stmt, params[:count])
            try:
                if cursor.description is not None:
                    columns = [d[0] for d in cursor.description]
                    results.append(ResultSet(columns=columns, rows=cursor.fetchall()))
            finally:
                cursor.close()
            if context is not None:
                context.statements += 1
        return results

    def new_context(self) -> TransactionContext:
        return TransactionContext()

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug("sqlite_closed", path=str(self._path) if self._path else ":memory:")

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"SQLiteEngine({str(self._path) if self._path else ':memory:'}, {state})"
