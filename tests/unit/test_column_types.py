"""Unit tests for semantic column types and their codecs."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from fractions import Fraction

import pytest

from litemap.domain.value_objects import (
    COLUMN_TYPES,
    BigInt,
    Byte,
    Float32,
    Int8,
    Int64,
    UInt8,
    UInt64,
    semantic_name,
    type_name,
)


@pytest.mark.unit
class TestSemanticName:
    """Tests for annotation to semantic name resolution."""

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (int, "int64"),
            (Int64, "int64"),
            (Int8, "int8"),
            (UInt64, "uint64"),
            (Byte, "byte"),
            (float, "float64"),
            (Float32, "float32"),
            (bool, "bool"),
            (str, "string"),
            (bytes, "blob"),
            (datetime, "time"),
            (timedelta, "duration"),
            (BigInt, "bigint"),
            (Fraction, "bigrat"),
        ],
    )
    def test_supported(self, annotation: object, expected: str) -> None:
        """Supported annotations map to their semantic names."""
        assert semantic_name(annotation) == expected

    @pytest.mark.parametrize("annotation", [complex, Decimal, list[int], str | None])
    def test_unsupported(self, annotation: object) -> None:
        """Anything outside the allow-list is rejected."""
        assert semantic_name(annotation) is None

    def test_type_name(self) -> None:
        """Readable names for classes and NewType aliases."""
        assert type_name(complex) == "complex"
        assert type_name(Int8) == "Int8"


@pytest.mark.unit
class TestIntegerCodecs:
    """Tests for fixed-width integer codecs."""

    def test_in_range(self) -> None:
        """Values within the width pass unchanged."""
        assert COLUMN_TYPES["int8"].to_sql(-128) == -128
        assert COLUMN_TYPES["uint8"].to_sql(255) == 255

    def test_out_of_range(self) -> None:
        """Values outside the width are rejected."""
        with pytest.raises(ValueError, match="value 300 out of range for int8"):
            COLUMN_TYPES["int8"].to_sql(300)
        with pytest.raises(ValueError):
            COLUMN_TYPES["uint16"].to_sql(-1)

    def test_bool_is_not_int(self) -> None:
        """A bool is not accepted for an integer column."""
        with pytest.raises(TypeError):
            COLUMN_TYPES["int32"].to_sql(True)

    def test_uint64_twos_complement(self) -> None:
        """uint64 values above the signed range round-trip through negative storage."""
        codec = COLUMN_TYPES["uint64"]
        stored = codec.to_sql(2**64 - 1)
        assert stored == -1
        assert codec.from_sql(stored) == 2**64 - 1

    def test_none_passes_through(self) -> None:
        """NULL decodes to None for every type."""
        for codec in COLUMN_TYPES.values():
            assert codec.to_sql(None) is None
            assert codec.from_sql(None) is None


@pytest.mark.unit
class TestOtherCodecs:
    """Tests for the non-integer codecs."""

    def test_float32_rounds(self) -> None:
        """float32 values are rounded to single precision."""
        assert COLUMN_TYPES["float32"].to_sql(0.1) != 0.1
        assert COLUMN_TYPES["float32"].to_sql(0.5) == 0.5

    def test_bool(self) -> None:
        codec = COLUMN_TYPES["bool"]
        assert codec.to_sql(True) == 1
        assert codec.from_sql(0) is False

    def test_time(self) -> None:
        """Times are stored as ISO-8601 text, preserving the offset."""
        codec = COLUMN_TYPES["time"]
        moment = datetime(2024, 2, 29, 12, 30, 15, 250, tzinfo=timezone.utc)
        stored = codec.to_sql(moment)
        assert stored == "2024-02-29T12:30:15.000250+00:00"
        assert codec.from_sql(stored) == moment

    def test_duration(self) -> None:
        """Durations are stored as whole microseconds."""
        codec = COLUMN_TYPES["duration"]
        assert codec.to_sql(timedelta(seconds=1, microseconds=5)) == 1_000_005
        assert codec.from_sql(-1) == timedelta(microseconds=-1)

    def test_bigint(self) -> None:
        """Big integers are stored as decimal text."""
        codec = COLUMN_TYPES["bigint"]
        value = 3**100
        assert codec.to_sql(value) == str(value)
        assert codec.from_sql(str(value)) == value
        assert COLUMN_TYPES["bigint"].declared == "TEXT"

    def test_bigrat(self) -> None:
        """Rationals are stored as n/d text."""
        codec = COLUMN_TYPES["bigrat"]
        assert codec.to_sql(Fraction(-6, 4)) == "-3/2"
        assert codec.from_sql("-3/2") == Fraction(-3, 2)

    def test_blob(self) -> None:
        assert COLUMN_TYPES["blob"].to_sql(bytearray(b"\x00\x01")) == b"\x00\x01"
