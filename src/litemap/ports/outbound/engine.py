"""Engine port: the relational engine the mapper drives.

This outbound port is the only boundary the mapping layer depends on.
The engine owns storage, query planning and its own transaction
semantics; the mapper only compiles statement text and executes the
compiled form with positional parameters.

Contract:
    - compile(text) parses a statement list once and rejects syntax
      errors. Placeholders are one-based (?1, ?2, ...) and the row
      identifier is addressed as "rowid".
    - execute(context, compiled, *params) runs every statement of the
      list with the same parameter tuple, each statement binding the
      parameters it uses, and returns one ResultSet per row-producing
      statement.
    - new_context() creates the context passed to execute while a
      transaction is open.
    - close() releases the engine handle.

References:
    - SQLite "rowid" tables and "?NNN" parameters
"""

from __future__ import annotations

import itertools
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, Protocol, Sequence

_context_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class CompiledStatement:
    """A statement list parsed once and ready for repeated execution.

    Attributes:
        text: The statement text as submitted.
        statements: The individual statements, each terminated by ";".
        parameter_counts: For each statement, how many leading
            parameters of the shared tuple it binds.
    """

    text: str
    statements: tuple[str, ...]
    parameter_counts: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.statements)


@dataclass(slots=True)
class TransactionContext:
    """Engine-side state of an open transaction."""

    context_id: int = field(default_factory=lambda: next(_context_ids))
    statements: int = 0


@dataclass(slots=True)
class ResultSet:
    """Rows produced by one statement.

    Rows are ordered value tuples matching the statement's column order.
    """

    columns: list[str]
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"ResultSet(columns={self.columns!r}, rows={len(self.rows)})"


class Engine(Protocol):
    """Protocol for the relational engine collaborator.

    Implementations raise their own exceptions; the executor converts
    them to EngineError and latches them.

    Thread Safety:
        Not required. A handle is used from one caller context at a time.
    """

    @abstractmethod
    def compile(self, text: str) -> CompiledStatement:
        """Parse a statement list.

        Args:
            text: One or more ";"-separated statements.

        Returns:
            The compiled form.

        Raises:
            Exception: If the text cannot be compiled.
        """
        ...

    @abstractmethod
    def execute(
        self,
        context: TransactionContext | None,
        compiled: CompiledStatement,
        *params: Any,
    ) -> list[ResultSet]:
        """Run a compiled statement list.

        Args:
            context: Context of the open transaction, or None.
            compiled: The compiled statement list.
            *params: Positional parameters bound to ?1, ?2, ..., shared
                by every statement of the list.

        Returns:
            One ResultSet per statement that produces rows.

        Raises:
            Exception: If any statement fails. Statements before the
                failing one have already run.
        """
        ...

    @abstractmethod
    def new_context(self) -> TransactionContext:
        """Create a context for a new transaction."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the engine handle. Calling close twice is harmless."""
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...


def result_rows(result_sets: Sequence[ResultSet]) -> Iterator[tuple[Any, ...]]:
    """Iterate over the rows of several result sets in order."""
    for rs in result_sets:
        yield from rs
