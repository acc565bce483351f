"""Adapters layer - concrete implementations of ports.

Adapters connect the mapper to external systems. The only one shipped is
the SQLite engine adapter.
"""

from litemap.adapters.outbound import CompileError, SQLiteEngine

__all__ = [
    "CompileError",
    "SQLiteEngine",
]
