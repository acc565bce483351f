"""
litemap - declarative record mapping for SQLite

Record dataclasses tag their fields with column() and table_key(); a
Database handle derives the table layout once per record type and
generates the CREATE, INSERT, UPDATE, DELETE and SELECT statements for
it. Failures are latched on the handle instead of raised.
"""

__version__ = "0.1.0"

from litemap.adapters.outbound.sqlite_engine import SQLiteEngine
from litemap.application.database import Database
from litemap.domain.entities.record import column, table_key
from litemap.domain.errors import (
    DerivationError,
    EngineError,
    MapperError,
    TransactionError,
    UsageError,
)
from litemap.domain.value_objects.column_types import (
    BigInt,
    Byte,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    "__version__",
    "Database",
    "SQLiteEngine",
    "column",
    "table_key",
    # Errors
    "MapperError",
    "DerivationError",
    "UsageError",
    "TransactionError",
    "EngineError",
    # Width aliases
    "BigInt",
    "Byte",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
]
