"""Nesting depth tracking over a single engine transaction.

The engine supports one transaction at a time. Logical transactions nest:
every begin increments the depth and every commit or rollback decrements
it, and only the outermost pair talks to the engine.

State machine:

    depth 0 ──begin──> depth 1 (engine BEGIN, context created)
    depth n ──begin──> depth n+1
    depth n ──commit/rollback──> depth n-1 (n > 1, no engine statement;
                                  rollback marks the transaction rollback-only)
    depth 1 ──commit──> depth 0 (engine COMMIT, or ROLLBACK if rollback-only)
    depth 1 ──rollback──> depth 0 (engine ROLLBACK)
    depth 0 ──commit/rollback──> TransactionError
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from litemap.domain.errors import TransactionError

C = TypeVar("C")


class EndAction(Enum):
    """Engine statement required to end a logical transaction."""

    NONE = "none"
    COMMIT = "COMMIT;"
    ROLLBACK = "ROLLBACK;"


class TransactionTracker(Generic[C]):
    """Depth counter plus the engine transaction context."""

    def __init__(self) -> None:
        self._depth = 0
        self._context: C | None = None
        self._rollback_only = False

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def context(self) -> C | None:
        """Engine context; present only while depth > 0."""
        return self._context

    @property
    def active(self) -> bool:
        return self._context is not None

    @property
    def rollback_only(self) -> bool:
        return self._rollback_only

    def needs_begin(self) -> bool:
        """Return True if the next begin must open an engine transaction."""
        return self._depth == 0

    def began(self, context: C | None = None) -> None:
        """Record a successful begin.

        Args:
            context: The engine context; required for the outermost begin.
        """
        if self._depth == 0:
            if context is None:
                raise ValueError("outermost begin requires an engine context")
            self._context = context
            self._rollback_only = False
        self._depth += 1

    def end_action(self, commit: bool) -> EndAction:
        """Decide which engine statement ends the current scope.

        Raises:
            TransactionError: If no transaction is open.
        """
        if self._depth == 0 or self._context is None:
            raise TransactionError(f"no transaction to {'commit' if commit else 'rollback'}")
        if self._depth > 1:
            if not commit:
                self._rollback_only = True
            return EndAction.NONE
        if commit and not self._rollback_only:
            return EndAction.COMMIT
        return EndAction.ROLLBACK

    def ended(self) -> None:
        """Record the end of the current scope."""
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0:
            self._context = None
            self._rollback_only = False
