"""Error taxonomy for the mapping layer.

Every failure the mapper can observe belongs to one of four categories.
Public operations never raise these; they latch the first one on the
database handle (see ErrorState) and become no-ops until it is cleared.
"""

from __future__ import annotations


class MapperError(Exception):
    """Base class for all mapping layer errors."""

    category = "application"


class DerivationError(MapperError):
    """A record shape cannot be mapped to a table.

    Raised for unsupported field types, a duplicate or missing table key,
    a key field that is not a 64-bit integer, no managed columns, or an
    argument that is not a record dataclass.
    """

    category = "derivation"


class UsageError(MapperError):
    """An operation was called with arguments it cannot work with."""

    category = "usage"


class TransactionError(MapperError):
    """Commit or rollback without an open transaction."""

    category = "transaction"


class EngineError(MapperError):
    """Compile, execute or decode failure reported by the engine."""

    category = "engine"
