"""Statement executor: the single path from statement text to the engine.

Every statement the mapper issues, generated or raw, goes through
StatementExecutor.execute(), which:

    1. returns immediately if an error is latched,
    2. looks the text up in the statement cache and compiles it on a miss
       (only successful compilations are cached),
    3. executes the compiled form with the open transaction's context,
    4. latches the first failure as an EngineError,
    5. logs one trace line per call when tracing is on.

Transactions:
    begin/commit/rollback drive the TransactionTracker and issue BEGIN,
    COMMIT and ROLLBACK only for the outermost scope. finish() ends a
    scope opened by a CRUD operation and rolls back even when an error is
    latched, so a failed operation never leaves an engine transaction open.

Trace line flags (in this order):
    C / -   statement came from the cache
    T / -   a transaction is open
    E / -   an error is latched after the call
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from litemap.domain.errors import EngineError, MapperError, TransactionError, UsageError
from litemap.domain.services.error_state import ErrorState
from litemap.domain.services.statement_cache import StatementCache
from litemap.domain.services.transaction_tracker import EndAction, TransactionTracker
from litemap.infrastructure.logging import get_logger
from litemap.infrastructure.metrics import MetricsRegistry
from litemap.ports.outbound.engine import (
    CompiledStatement,
    Engine,
    ResultSet,
    TransactionContext,
)

logger = get_logger(__name__)

BEGIN = "BEGIN TRANSACTION;"

_KINDS = frozenset(
    {"select", "insert", "update", "delete", "create", "drop", "begin", "commit", "rollback"}
)


def statement_kind(text: str) -> str:
    """Classify a statement by its leading keyword, for metrics labels."""
    words = text.split(None, 1)
    if not words:
        return "other"
    word = words[0].rstrip(";").lower()
    return word if word in _KINDS else "other"


def trace_flags(cached: bool, in_transaction: bool, failed: bool) -> str:
    return (
        ("C" if cached else "-")
        + ("T" if in_transaction else "-")
        + ("E" if failed else "-")
    )


class StatementExecutor:
    """Compiles, caches and runs statements for one database handle."""

    def __init__(
        self,
        engine: Engine,
        errors: ErrorState,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._engine = engine
        self._errors = errors
        self._metrics = metrics
        self._cache: StatementCache[CompiledStatement] = StatementCache()
        self._tracker: TransactionTracker[TransactionContext] = TransactionTracker()
        self.trace = False

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def cache(self) -> StatementCache[CompiledStatement]:
        return self._cache

    @property
    def tracker(self) -> TransactionTracker[TransactionContext]:
        return self._tracker

    def fail(self, error: Exception) -> None:
        """Latch error and count it."""
        if self._errors.set(error) and self._metrics is not None:
            category = getattr(error, "category", "application")
            self._metrics.errors_total.labels(category=category).inc()

    def execute(self, text: str, *params: Any) -> list[ResultSet]:
        """Run a statement list; a no-op returning [] if an error is latched."""
        if self._errors.failed:
            return []
        return self._run(text, params)

    def _run(
        self,
        text: str,
        params: tuple[Any, ...],
        context: TransactionContext | None = None,
    ) -> list[ResultSet]:
        context = context or self._tracker.context
        kind = statement_kind(text)
        cached = False
        results: list[ResultSet] = []
        ok = False
        start = time.perf_counter()
        try:
            if self._engine.closed:
                raise UsageError("database is closed")
            compiled, cached = self._cache.get_or_compile(text, self._engine.compile)
            results = self._engine.execute(context, compiled, *params)
            ok = True
        except MapperError as e:
            self.fail(e)
        except Exception as e:
            error = EngineError(str(e))
            error.__cause__ = e
            self.fail(error)

        if self._metrics is not None:
            self._metrics.statement_cache_total.labels(result="hit" if cached else "miss").inc()
            self._metrics.statements_total.labels(
                kind=kind, status="success" if ok else "error"
            ).inc()
            self._metrics.statement_latency_seconds.labels(kind=kind).observe(
                time.perf_counter() - start
            )
        if self.trace:
            logger.info(
                "statement",
                flags=trace_flags(cached, context is not None, self._errors.failed),
                cached=cached,
                in_transaction=context is not None,
                error=self._errors.failed,
                sql=text,
            )
        return results if ok else []

    # Transactions

    def begin(self) -> bool:
        """Open a (possibly nested) transaction scope.

        Returns:
            True if the scope was opened; False if an error is latched or
            the engine refused BEGIN.
        """
        if self._errors.failed:
            return False
        if self._tracker.needs_begin():
            context = self._engine.new_context()
            self._run(BEGIN, (), context=context)
            if self._errors.failed:
                return False
            self._tracker.began(context)
        else:
            self._tracker.began()
        self._set_depth_gauge()
        return True

    def commit(self) -> None:
        """Commit the innermost scope; a no-op if an error is latched."""
        if self._errors.failed:
            return
        self._end(commit=True)

    def rollback(self) -> None:
        """Roll back the innermost scope.

        Unlike every other operation this also runs while an error is
        latched, so callers can unwind a transaction they opened.
        """
        self._end(commit=False)

    def finish(self, ok: bool) -> None:
        """End a scope: commit if ok and no error is latched, else roll back."""
        self._end(commit=ok and self._errors.ok)

    @contextmanager
    def scope(self) -> Iterator[bool]:
        """Run a block inside one transaction scope.

        Yields whether the scope was opened. The scope commits when the
        block completes with no latched error and rolls back otherwise.
        """
        opened = self.begin()
        ok = False
        try:
            yield opened
            ok = True
        finally:
            if opened:
                self.finish(ok)

    def _end(self, commit: bool) -> None:
        try:
            action = self._tracker.end_action(commit)
        except TransactionError as e:
            self.fail(e)
            return

        if action is not EndAction.NONE:
            self._run(action.value, ())
            if action is EndAction.COMMIT and self._errors.failed:
                # A failed COMMIT can leave the engine transaction open.
                self._run(EndAction.ROLLBACK.value, ())
                action = EndAction.ROLLBACK
            elif action is EndAction.ROLLBACK and commit:
                self.fail(TransactionError("transaction rolled back by nested scope"))
            if self._metrics is not None:
                status = "commit" if action is EndAction.COMMIT else "rollback"
                self._metrics.transactions_total.labels(status=status).inc()

        self._tracker.ended()
        self._set_depth_gauge()

    def _set_depth_gauge(self) -> None:
        if self._metrics is not None:
            self._metrics.transaction_depth.set(self._tracker.depth)
