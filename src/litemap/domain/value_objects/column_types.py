"""Semantic column types supported by the mapper.

A record field's annotation is resolved to a semantic type name (int32,
string, time, bigint, ...). Only names in the allow-list below can be
mapped; anything else is a derivation error. Each semantic type carries
the declared SQL type used in CREATE TABLE and a codec that converts
between Python values and the values stored by the engine.

Python has a single int and a single float, so fixed widths are spelled
with NewType aliases that behave exactly like the underlying type at
runtime:

    @dataclass
    class Sample:
        id: int = table_key("sample")
        level: Int8 = column()
        ratio: Fraction = column()
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime, timedelta
from fractions import Fraction
from typing import Any, Callable, NewType


Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Byte = NewType("Byte", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)
BigInt = NewType("BigInt", int)
"""Arbitrary-precision integer, stored as decimal text."""

_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True, slots=True)
class ColumnType:
    """A supported semantic column type.

    Attributes:
        name: Semantic type name, as used in error messages and descriptors.
        declared: SQL type used in CREATE TABLE.
        encode: Converts a field value to the value bound as a parameter.
        decode: Converts a stored value back to the field value.
    """

    name: str
    declared: str
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]

    def to_sql(self, value: Any) -> Any:
        if value is None:
            return None
        return self.encode(value)

    def from_sql(self, value: Any) -> Any:
        if value is None:
            return None
        return self.decode(value)


def _integer(name: str, bits: int, signed: bool) -> ColumnType:
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1

    def encode(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expecting int for {name}, got {type(value).__name__}")
        if not low <= value <= high:
            raise ValueError(f"value {value} out of range for {name}")
        # SQLite integers are signed 64-bit
        if bits == 64 and not signed and value > (1 << 63) - 1:
            return value - (1 << 64)
        return value

    def decode(value: Any) -> int:
        value = int(value)
        if bits == 64 and not signed and value < 0:
            return value + (1 << 64)
        return value

    return ColumnType(name, "INTEGER", encode, decode)


def _float32(value: Any) -> float:
    return struct.unpack("<f", struct.pack("<f", float(value)))[0]


def _encode_duration(value: timedelta) -> int:
    return value // _MICROSECOND


def _encode_bigrat(value: Fraction) -> str:
    value = Fraction(value)
    return f"{value.numerator}/{value.denominator}"


def _encode_bigint(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expecting int for bigint, got {type(value).__name__}")
    return str(value)


_TYPES: list[ColumnType] = [
    _integer("int8", 8, True),
    _integer("int16", 16, True),
    _integer("int32", 32, True),
    _integer("int64", 64, True),
    _integer("uint8", 8, False),
    _integer("uint16", 16, False),
    _integer("uint32", 32, False),
    _integer("uint64", 64, False),
    _integer("byte", 8, False),
    ColumnType("float32", "REAL", _float32, float),
    ColumnType("float64", "REAL", float, float),
    ColumnType("bool", "INTEGER", lambda v: 1 if v else 0, bool),
    ColumnType("string", "TEXT", str, str),
    ColumnType("blob", "BLOB", bytes, bytes),
    ColumnType("time", "TEXT", datetime.isoformat, datetime.fromisoformat),
    ColumnType("duration", "INTEGER", _encode_duration, lambda v: timedelta(microseconds=v)),
    ColumnType("bigint", "TEXT", _encode_bigint, int),
    ColumnType("bigrat", "TEXT", _encode_bigrat, Fraction),
]

COLUMN_TYPES: dict[str, ColumnType] = {t.name: t for t in _TYPES}
"""Allow-list of semantic column types, keyed by name."""

# Annotation -> semantic name. Lookup is by identity so bool never
# matches int and the NewType aliases never match their base type.
_ANNOTATIONS: dict[Any, str] = {
    int: "int64",
    Int64: "int64",
    Int8: "int8",
    Int16: "int16",
    Int32: "int32",
    UInt8: "uint8",
    UInt16: "uint16",
    UInt32: "uint32",
    UInt64: "uint64",
    Byte: "byte",
    float: "float64",
    Float64: "float64",
    Float32: "float32",
    bool: "bool",
    str: "string",
    bytes: "blob",
    datetime: "time",
    timedelta: "duration",
    BigInt: "bigint",
    Fraction: "bigrat",
}

KEY_TYPE = "int64"
"""The only semantic type accepted for a table key field."""


def type_name(annotation: Any) -> str:
    """Return a readable name for a field annotation."""
    if isinstance(annotation, type):
        return annotation.__name__
    name = getattr(annotation, "__name__", None)
    if isinstance(name, str):
        return name
    return repr(annotation)


def semantic_name(annotation: Any) -> str | None:
    """Map a resolved annotation to its semantic type name.

    Returns None for annotations outside the allow-list.
    """
    try:
        return _ANNOTATIONS.get(annotation)
    except TypeError:
        return None
