"""Outbound ports - interfaces for external dependencies.

The mapper depends on a single external system: the relational engine
that compiles and executes statements.
"""

from litemap.ports.outbound.engine import (
    CompiledStatement,
    Engine,
    ResultSet,
    TransactionContext,
    result_rows,
)

__all__ = [
    "CompiledStatement",
    "Engine",
    "ResultSet",
    "TransactionContext",
    "result_rows",
]
