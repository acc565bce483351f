"""Domain layer: record tags, descriptors, column types and errors."""

from litemap.domain.errors import (
    DerivationError,
    EngineError,
    MapperError,
    TransactionError,
    UsageError,
)

__all__ = [
    "DerivationError",
    "EngineError",
    "MapperError",
    "TransactionError",
    "UsageError",
]
