"""Value objects for the mapping layer.

Exports:
    Column types:
        - ColumnType: A supported semantic column type with its codec
        - COLUMN_TYPES: Allow-list keyed by semantic name
        - Int8 .. UInt64, Byte, Float32, Float64, BigInt: width aliases
"""

from litemap.domain.value_objects.column_types import (
    COLUMN_TYPES,
    KEY_TYPE,
    BigInt,
    Byte,
    ColumnType,
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
    semantic_name,
    type_name,
)

__all__ = [
    "COLUMN_TYPES",
    "KEY_TYPE",
    "ColumnType",
    "semantic_name",
    "type_name",
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
