"""Outbound adapters - implementations of the engine port.

Exports:
    - SQLiteEngine: Engine backed by the sqlite3 module
    - CompileError: Statement text could not be compiled
    - split_statements, parameter_count: statement list helpers
"""

from litemap.adapters.outbound.sqlite_engine import (
    CompileError,
    SQLiteEngine,
    parameter_count,
    split_statements,
)

__all__ = [
    "CompileError",
    "SQLiteEngine",
    "parameter_count",
    "split_statements",
]
