"""Memo table of compiled statements keyed by statement text.

Caveat: entries are never invalidated. A compiled statement is assumed to
stay valid for the lifetime of the database handle, including across
schema changes such as dropping and recreating a table. Callers that
change the schema under a handle reuse cached statements at their own
risk.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class StatementCache(Generic[T]):
    """Append-only map from statement text to its compiled form."""

    def __init__(self) -> None:
        self._entries: dict[str, T] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text: object) -> bool:
        return text in self._entries

    def get_or_compile(self, text: str, compile: Callable[[str], T]) -> tuple[T, bool]:
        """Return the compiled form of text and whether it was cached.

        On a miss the statement is compiled and stored. If compile raises,
        nothing is stored and the exception propagates.
        """
        compiled = self._entries.get(text)
        if compiled is not None:
            self.hits += 1
            return compiled, True
        self.misses += 1
        compiled = compile(text)
        self._entries[text] = compiled
        return compiled, False
