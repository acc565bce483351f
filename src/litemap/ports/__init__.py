"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts. The
mapper has one outbound port, the relational engine, which adapters
implement with concrete functionality.
"""

from litemap.ports.outbound import (
    CompiledStatement,
    Engine,
    ResultSet,
    TransactionContext,
)

__all__ = [
    "CompiledStatement",
    "Engine",
    "ResultSet",
    "TransactionContext",
]
