"""Type descriptors: how one record shape maps to one table.

A TypeDescriptor is derived once per record type (see DescriptorBuilder)
and never changes afterwards. It holds the field/column correspondence,
the column types, and the SQL fragments every statement for that type is
built from, so that the CRUD operations only append caller data.

Fragments for a record with fields id (table key "rec"), A and B:

    create_columns       "A INTEGER, B TEXT"
    insert_columns       "A, B"
    insert_placeholders  "?1, ?2"
    select_columns       "rowid, A, B"
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Sequence

from litemap.domain.value_objects.column_types import ColumnType

ROW_ID = "rowid"
"""Engine expression for the row identifier."""


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One mapped field of a record type.

    Attributes:
        field_name: Attribute name on the record.
        column: Column name in the table (ROW_ID for the key field).
        column_type: Semantic type and codec.
        getter: Reads the field value from a record.
        init: Whether the field is accepted by the dataclass constructor.
    """

    field_name: str
    column: str
    column_type: ColumnType
    getter: Callable[[Any], Any]
    init: bool = True

    def encode(self, record: Any) -> Any:
        """Read the field from a record and convert it for binding."""
        return self.column_type.to_sql(self.getter(record))

    def decode(self, value: Any) -> Any:
        return self.column_type.from_sql(value)


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Cached mapping between a record type and its table."""

    record_type: type
    table: str
    key: FieldDescriptor
    columns: Mapping[str, FieldDescriptor]
    select_fields: tuple[FieldDescriptor, ...]
    create_columns: str
    insert_columns: str
    insert_placeholders: str
    select_columns: str
    quote: Callable[[str], str]

    @classmethod
    def build(
        cls,
        record_type: type,
        table: str,
        key: FieldDescriptor,
        columns: Iterable[FieldDescriptor],
        select_fields: Sequence[FieldDescriptor],
        quote: Callable[[str], str],
    ) -> TypeDescriptor:
        """Assemble a descriptor and precompute its SQL fragments."""
        column_map = {fd.column: fd for fd in columns}
        inserted = list(column_map.values())
        return cls(
            record_type=record_type,
            table=quote(table),
            key=key,
            columns=MappingProxyType(column_map),
            select_fields=tuple(select_fields),
            create_columns=", ".join(
                f"{quote(fd.column)} {fd.column_type.declared}" for fd in inserted
            ),
            insert_columns=", ".join(quote(fd.column) for fd in inserted),
            insert_placeholders=", ".join(f"?{n}" for n in range(1, len(inserted) + 1)),
            select_columns=", ".join(
                ROW_ID if fd is key else quote(fd.column) for fd in select_fields
            ),
            quote=quote,
        )

    @property
    def column_names(self) -> list[str]:
        """Mapped column names in declaration order."""
        return list(self.columns)

    @property
    def select_types(self) -> list[str]:
        """Semantic type names of the selected columns, key included."""
        return [fd.column_type.name for fd in self.select_fields]

    # Statement text

    def drop_sql(self) -> str:
        return f"DROP TABLE IF EXISTS {self.table};"

    def create_sql(self) -> str:
        return f"CREATE TABLE {self.table} ({self.create_columns});"

    def insert_sql(self) -> str:
        return (
            f"INSERT INTO {self.table} ({self.insert_columns}) "
            f"VALUES ({self.insert_placeholders});"
        )

    def update_sql(self, columns: Sequence[str]) -> str:
        """UPDATE for the given columns; the last placeholder is the row id."""
        assignments = ", ".join(
            f"{self.quote(name)} = ?{pos}" for pos, name in enumerate(columns, start=1)
        )
        return (
            f"UPDATE {self.table} SET {assignments} "
            f"WHERE {ROW_ID} == ?{len(columns) + 1};"
        )

    def delete_sql(self, tail: str = "") -> str:
        return f"DELETE FROM {self.table}{_pre_pad(tail)};"

    def select_sql(self, tail: str = "") -> str:
        return f"SELECT {self.select_columns} FROM {self.table}{_pre_pad(tail)};"

    # Values

    def insert_values(self, record: Any) -> list[Any]:
        """Encoded values of all mapped columns, in insert order."""
        return [fd.encode(record) for fd in self.columns.values()]

    def update_values(self, record: Any, columns: Sequence[str]) -> list[Any]:
        """Encoded values of the named columns followed by the row id."""
        values = [self.columns[name].encode(record) for name in columns]
        values.append(self.key.encode(record))
        return values

    def decode_row(self, row: Sequence[Any]) -> Any:
        """Build a new record from a row in select_columns order.

        Mapped fields are taken from the row; unmapped fields keep their
        dataclass defaults.
        """
        if len(row) != len(self.select_fields):
            raise ValueError(
                f"row has {len(row)} values, expected {len(self.select_fields)}"
            )
        kwargs: dict[str, Any] = {}
        late: list[tuple[str, Any]] = []
        for fd, value in zip(self.select_fields, row):
            decoded = fd.decode(value)
            if fd.init:
                kwargs[fd.field_name] = decoded
            else:
                late.append((fd.field_name, decoded))
        record = self.record_type(**kwargs)
        for name, value in late:
            object.__setattr__(record, name, value)
        return record


def _pre_pad(text: str) -> str:
    return f" {text}" if text else text
