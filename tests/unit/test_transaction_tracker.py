"""Unit tests for TransactionTracker."""

from __future__ import annotations

import pytest

from litemap.domain.errors import TransactionError
from litemap.domain.services import EndAction, TransactionTracker


@pytest.fixture
def tracker() -> TransactionTracker[str]:
    return TransactionTracker()


@pytest.mark.unit
class TestTransactionTracker:
    """Tests for the nesting state machine."""

    def test_single_scope_commits(self, tracker: TransactionTracker[str]) -> None:
        assert tracker.needs_begin()
        tracker.began("ctx")

        assert tracker.depth == 1
        assert tracker.context == "ctx"
        assert tracker.end_action(commit=True) is EndAction.COMMIT

        tracker.ended()
        assert tracker.depth == 0
        assert tracker.context is None
        assert not tracker.active

    def test_nested_commit_issues_one_commit(self, tracker: TransactionTracker[str]) -> None:
        """Only the outermost scope ends the engine transaction."""
        tracker.began("ctx")
        assert not tracker.needs_begin()
        tracker.began()
        assert tracker.depth == 2

        assert tracker.end_action(commit=True) is EndAction.NONE
        tracker.ended()
        assert tracker.context == "ctx"
        assert tracker.end_action(commit=True) is EndAction.COMMIT

    def test_inner_rollback_poisons_outer_commit(self, tracker: TransactionTracker[str]) -> None:
        """A rollback anywhere in the nest rolls back the whole transaction."""
        tracker.began("ctx")
        tracker.began()

        assert tracker.end_action(commit=False) is EndAction.NONE
        tracker.ended()
        assert tracker.rollback_only

        assert tracker.end_action(commit=True) is EndAction.ROLLBACK
        tracker.ended()
        assert not tracker.rollback_only

    def test_end_without_begin(self, tracker: TransactionTracker[str]) -> None:
        """Commit or rollback at depth 0 is an error."""
        with pytest.raises(TransactionError, match="no transaction to commit"):
            tracker.end_action(commit=True)
        with pytest.raises(TransactionError, match="no transaction to rollback"):
            tracker.end_action(commit=False)

    def test_outermost_begin_requires_context(self, tracker: TransactionTracker[str]) -> None:
        with pytest.raises(ValueError):
            tracker.began()
        assert tracker.depth == 0
