"""Application layer for the mapper.

The application layer drives the domain services against an engine.

Exports:
    Database:
        - Database: Handle binding record dataclasses to tables
    Executor:
        - StatementExecutor: Cached statement execution and transaction scopes
"""

from litemap.application.database import Database
from litemap.application.executor import StatementExecutor

__all__ = [
    "Database",
    "StatementExecutor",
]
