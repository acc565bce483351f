"""The database handle: record-level CRUD over one engine connection.

A Database owns the engine, the descriptor cache, the statement executor
(statement cache and transaction depth) and one latched error. Operations
do not raise for mapping, usage, transaction or engine failures; they
latch the first one and become no-ops until clear_error() is called. This
allows call chains with a single check at the end:

    db = Database.create("data/musketeers.db")
    db.create_table(Musketeer)
    db.insert([Musketeer(name="Athos"), Musketeer(name="Porthos")])
    db.update(athos, "name")
    found: list[Musketeer] = []
    db.retrieve(found, Musketeer, "ORDER BY rowid")
    db.raise_for_error()

Every mutating operation runs inside one transaction scope. Scopes nest:
only the outermost one talks to the engine, so several operations can be
made atomic with

    with db.transaction():
        db.delete(Musketeer, "WHERE name == ?1", "Aramis")
        db.insert([aramis])
"""

from __future__ import annotations

import dataclasses
import sqlite3
from collections.abc import Callable, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, TypeVar

from litemap.adapters.outbound.sqlite_engine import SQLiteEngine
from litemap.application.executor import StatementExecutor
from litemap.domain.entities.descriptor import TypeDescriptor
from litemap.domain.errors import DerivationError, EngineError, MapperError, UsageError
from litemap.domain.services.descriptor_builder import DescriptorBuilder
from litemap.domain.services.error_state import ErrorState
from litemap.infrastructure.config import Config, get_config
from litemap.infrastructure.logging import get_logger
from litemap.infrastructure.metrics import MetricsRegistry, get_metrics
from litemap.infrastructure.tracing import trace_span
from litemap.ports.outbound.engine import Engine, ResultSet, result_rows

logger = get_logger(__name__)

R = TypeVar("R")

ALL_COLUMNS = "*"


class Database:
    """Handle binding record dataclasses to tables of one database."""

    def __init__(self, engine: Engine, metrics: MetricsRegistry | None = None) -> None:
        """Take ownership of an open engine.

        Prefer the attach(), open(), create() and from_config()
        constructors.
        """
        self._engine = engine
        self._metrics = metrics
        self._errors = ErrorState()
        self._descriptors = DescriptorBuilder()
        self._executor = StatementExecutor(engine, self._errors, metrics)

    # Construction

    @classmethod
    def attach(cls, engine: Engine, metrics: MetricsRegistry | None = None) -> Database:
        """Wrap an already open engine. The handle closes it on close()."""
        logger.debug("database_attached", engine=repr(engine))
        return cls(engine, metrics)

    @classmethod
    def open(
        cls,
        path: str | Path,
        timeout: float = 5.0,
        metrics: MetricsRegistry | None = None,
    ) -> Database:
        """Open an existing database file.

        Raises:
            EngineError: If the file does not exist or cannot be opened.
        """
        try:
            engine = SQLiteEngine.open(path, create=False, timeout=timeout)
        except (OSError, sqlite3.Error) as e:
            raise EngineError(str(e)) from e
        logger.debug("database_opened", path=str(path))
        return cls(engine, metrics)

    @classmethod
    def create(
        cls,
        path: str | Path,
        timeout: float = 5.0,
        metrics: MetricsRegistry | None = None,
    ) -> Database:
        """Create a new database file, replacing any existing one.

        Missing parent directories are created.

        Raises:
            EngineError: If the file cannot be removed or created.
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.unlink(missing_ok=True)
            engine = SQLiteEngine.open(path, create=True, timeout=timeout)
        except (OSError, sqlite3.Error) as e:
            raise EngineError(str(e)) from e
        logger.debug("database_created", path=str(path))
        return cls(engine, metrics)

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> Database:
        """Build a handle from configuration (create or open, then trace).

        With observability.metrics_enabled and no explicit registry, the
        process-wide metrics registry is used.
        """
        config = config or get_config()
        if metrics is None and config.observability.metrics_enabled:
            metrics = get_metrics()
        settings = config.database
        factory = cls.create if settings.create else cls.open
        db = factory(settings.path, timeout=settings.timeout_seconds, metrics=metrics)
        db.trace(settings.trace)
        return db

    # Lifecycle

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def closed(self) -> bool:
        return self._engine.closed

    def close(self) -> None:
        """Release the engine. Safe to call twice; the latched error is kept."""
        if self._engine.closed:
            return
        self._engine.close()
        logger.debug("database_closed", depth=self._executor.tracker.depth)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __str__(self) -> str:
        return "litemap"

    def __repr__(self) -> str:
        return f"Database({self._engine!r}, error={self._errors.error!r})"

    # Error state

    @property
    def ok(self) -> bool:
        return self._errors.ok

    @property
    def failed(self) -> bool:
        return self._errors.failed

    @property
    def error(self) -> Exception | None:
        """The latched error, or None."""
        return self._errors.error

    def set_error(self, error: Exception | str | None) -> None:
        """Latch an error unless one is already latched. Strings become MapperError."""
        if isinstance(error, str):
            error = MapperError(error)
        if error is not None:
            self._executor.fail(error)

    def clear_error(self) -> Exception | None:
        """Reset the latch; returns the error it held."""
        return self._errors.clear()

    def raise_for_error(self) -> None:
        self._errors.raise_for_error()

    # Diagnostics

    def trace(self, on: bool = True) -> None:
        """Log every executed statement (event "statement") while on."""
        self._executor.trace = on

    @property
    def tracing(self) -> bool:
        return self._executor.trace

    def descriptor(self, record: Any) -> TypeDescriptor:
        """Return the cached descriptor for a record type or instance.

        Raises:
            DerivationError: If the record shape cannot be mapped.
        """
        dsc = self._descriptors.descriptor(record)
        if self._metrics is not None:
            self._metrics.descriptors_cached.set(len(self._descriptors))
        return dsc

    # Transactions

    def begin(self) -> None:
        """Open a transaction scope; nested scopes share one engine transaction."""
        if self._ready():
            self._executor.begin()

    def commit(self) -> None:
        if self._ready():
            self._executor.commit()

    def rollback(self) -> None:
        """Roll back the innermost scope, also while an error is latched."""
        if self._engine.closed:
            self._executor.fail(UsageError("database is closed"))
            return
        self._executor.rollback()

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """Run a block in one scope: commit on success, roll back on error.

        A latched error counts as failure. Exceptions raised by the block
        propagate after the rollback.
        """
        if not self._ready():
            yield self
            return
        with self._executor.scope():
            yield self

    # Statements

    def execute(self, text: str, *params: Any) -> list[ResultSet]:
        """Run raw statement text with ?N positional parameters.

        Returns one ResultSet per row-producing statement; [] on failure.
        """
        if not self._ready():
            return []
        return self._executor.execute(text, *params)

    def create_table(self, record: Any) -> None:
        """(Re)create the table of a record type, dropping any existing one."""
        if not self._ready():
            return
        dsc = self._derive(record)
        if dsc is None:
            return
        with trace_span("litemap.create_table", {"table": dsc.table}):
            with self._executor.scope() as opened:
                if opened:
                    self._executor.execute(f"{dsc.drop_sql()} {dsc.create_sql()}")

    def insert(self, records: Sequence[Any], record_type: type | None = None) -> None:
        """Insert records in one transaction.

        The key field of each record is ignored; the engine assigns row
        ids. All records must be of one type. An empty sequence with no
        record_type is a no-op.
        """
        if not self._ready():
            return
        if not _is_sequence(records):
            self._executor.fail(
                UsageError(f"insert requires a sequence of records, got {type(records).__name__}")
            )
            return
        if not records and record_type is None:
            return
        dsc = self._derive(record_type if record_type is not None else records[0])
        if dsc is None or not records:
            return
        for record in records:
            if type(record) is not dsc.record_type:
                self._executor.fail(
                    UsageError(
                        f"insert requires records of one type {dsc.record_type.__name__}, "
                        f"got {type(record).__name__}"
                    )
                )
                return

        text = dsc.insert_sql()
        with trace_span("litemap.insert", {"table": dsc.table, "records": len(records)}):
            with self._executor.scope() as opened:
                if not opened:
                    return
                for record in records:
                    values = self._encode(dsc.insert_values, record)
                    if values is None:
                        break
                    self._executor.execute(text, *values)
                    if self._errors.failed:
                        break

    def update(self, record: Any, *columns: str) -> None:
        """Write the named columns of a stored record back to its row.

        A single "*" updates every mapped column and cannot be combined
        with column names. The row is selected by the record's key field.
        """
        if not self._ready():
            return
        if not columns:
            self._executor.fail(UsageError("at least one column name expected"))
            return
        dsc = self._derive(record)
        if dsc is None:
            return
        if isinstance(record, type):
            self._executor.fail(
                UsageError(f"update requires a record instance, got type {record.__name__}")
            )
            return
        if ALL_COLUMNS in columns:
            if len(columns) > 1:
                self._executor.fail(
                    UsageError(f'"{ALL_COLUMNS}" cannot be combined with column names')
                )
                return
            names = dsc.column_names
        else:
            names = list(columns)
        for name in names:
            if name not in dsc.columns:
                self._executor.fail(UsageError(f"unknown column {name} for table {dsc.table}"))
                return

        with trace_span("litemap.update", {"table": dsc.table, "columns": len(names)}):
            with self._executor.scope() as opened:
                if not opened:
                    return
                values = self._encode(lambda r: dsc.update_values(r, names), record)
                if values is not None:
                    self._executor.execute(dsc.update_sql(names), *values)

    def delete(self, record: Any, tail: str = "", *params: Any) -> None:
        """Delete rows of a record's table matching a WHERE tail.

        Only the record's type is used. An empty tail deletes every row.
        """
        if not self._ready():
            return
        dsc = self._derive(record)
        if dsc is None:
            return
        with trace_span("litemap.delete", {"table": dsc.table}):
            with self._executor.scope() as opened:
                if opened:
                    self._executor.execute(dsc.delete_sql(tail), *params)

    def truncate(self, record: Any) -> None:
        """Delete every row of a record's table."""
        self.delete(record)

    def retrieve(
        self,
        records: list[R],
        record_type: type[R],
        tail: str = "",
        *params: Any,
    ) -> None:
        """Append the rows selected by a WHERE/ORDER BY tail to records.

        records is extended, never cleared, and only if every row decodes.
        Unmapped fields of the new records keep their dataclass defaults.
        """
        if not self._ready():
            return
        if not isinstance(records, list):
            self._executor.fail(
                UsageError(f"retrieve expecting list, got {type(records).__name__}")
            )
            return
        dsc = self._derive(record_type)
        if dsc is None:
            return
        with trace_span("litemap.retrieve", {"table": dsc.table}) as span:
            result_sets = self._executor.execute(dsc.select_sql(tail), *params)
            if self._errors.failed:
                return
            found: list[R] = []
            for row in result_rows(result_sets):
                record = self._encode(dsc.decode_row, row)
                if record is None:
                    return
                found.append(record)
            span.set_attribute("rows", len(found))
        records.extend(found)

    # Internals

    def _ready(self) -> bool:
        if self._errors.failed:
            return False
        if self._engine.closed:
            self._executor.fail(UsageError("database is closed"))
            return False
        return True

    def _derive(self, record: Any) -> TypeDescriptor | None:
        try:
            return self.descriptor(record)
        except DerivationError as e:
            self._executor.fail(e)
            return None

    def _encode(self, convert: Callable[[Any], Any], value: Any) -> Any:
        """Apply a codec step, latching conversion failures as EngineError."""
        try:
            return convert(value)
        except (TypeError, ValueError) as e:
            error = EngineError(str(e))
            error.__cause__ = e
            self._executor.fail(error)
            return None


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    if dataclasses.is_dataclass(value):
        return False
    return isinstance(value, Sequence)
