"""Derivation of type descriptors from record dataclasses.

The builder inspects a record type's fields exactly once, validates the
tags and annotations, and caches the resulting TypeDescriptor keyed by the
type itself. Validation runs in field order:

    1. A field tagged column() joins the insert and select column sets.
       Its annotation must resolve to a supported semantic type, and its
       name must not be one of SQLite's row id aliases (rowid, oid,
       _rowid_ in any case), which a real column would shadow.
    2. The first field tagged table_key() names the table and becomes the
       row identifier; it must be annotated int or Int64. A second
       table_key() field is an error.
    3. After all fields: no managed columns is an error, and so is a
       missing table key.

Nothing is cached when derivation fails, so a failing shape fails the
same way every time it is presented.
"""

from __future__ import annotations

import dataclasses
import operator
import typing
from typing import Any

from sqlglot import exp
from sqlglot.tokens import Tokenizer

from litemap.domain.entities.descriptor import ROW_ID, FieldDescriptor, TypeDescriptor
from litemap.domain.entities.record import column_tag, table_key_tag
from litemap.domain.errors import DerivationError
from litemap.domain.value_objects.column_types import (
    COLUMN_TYPES,
    KEY_TYPE,
    semantic_name,
    type_name,
)
from litemap.infrastructure.logging import get_logger

logger = get_logger(__name__)

ROW_ID_ALIASES = frozenset({"rowid", "oid", "_rowid_"})


def quote_identifier(name: str) -> str:
    """Render a table or column name for SQLite.

    Names that are keywords or not plain identifiers are double-quoted.
    """
    keyword = name.upper() in Tokenizer.KEYWORDS
    return exp.to_identifier(name, quoted=keyword or None).sql(dialect="sqlite")


def record_type_of(record: Any) -> type:
    """Return the dataclass type of a record instance or record type.

    Raises:
        DerivationError: If the argument is neither.
    """
    if isinstance(record, type):
        if dataclasses.is_dataclass(record):
            return record
        raise DerivationError(f"expecting record dataclass, got type {record.__name__}")
    if dataclasses.is_dataclass(record):
        return type(record)
    raise DerivationError(f"expecting record dataclass, got {type(record).__name__}")


class DescriptorBuilder:
    """Derives and caches TypeDescriptors for one database handle.

    The cache is append-only: descriptors are added on first derivation
    and never evicted.
    """

    def __init__(self) -> None:
        self._cache: dict[type, TypeDescriptor] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._cache

    def descriptor(self, record: Any) -> TypeDescriptor:
        """Return the descriptor for a record instance or record type.

        Raises:
            DerivationError: If the record shape cannot be mapped.
        """
        return self.descriptor_for_type(record_type_of(record))

    def descriptor_for_type(self, record_type: type) -> TypeDescriptor:
        cached = self._cache.get(record_type)
        if cached is not None:
            return cached
        dsc = self._derive(record_type)
        self._cache[record_type] = dsc
        logger.debug(
            "descriptor_cached",
            record_type=record_type.__qualname__,
            table=dsc.table,
            columns=dsc.column_names,
        )
        return dsc

    def _derive(self, record_type: type) -> TypeDescriptor:
        if not dataclasses.is_dataclass(record_type):
            raise DerivationError(
                f"expecting record dataclass, got type {record_type.__name__}"
            )
        hints = _resolve_hints(record_type)

        columns: list[FieldDescriptor] = []
        select_fields: list[FieldDescriptor] = []
        seen: set[str] = set()
        table: str | None = None
        key: FieldDescriptor | None = None

        for field in dataclasses.fields(record_type):
            annotation = hints.get(field.name, field.type)
            name = column_tag(field)
            if name is not None:
                semantic = semantic_name(annotation)
                if semantic is None:
                    raise DerivationError(
                        f"database does not support fields of type {type_name(annotation)}"
                    )
                if name.lower() in ROW_ID_ALIASES:
                    raise DerivationError(
                        f"column name {name} of {record_type.__name__} is reserved for the row id"
                    )
                if name in seen:
                    raise DerivationError(
                        f"duplicate column name {name} in {record_type.__name__}"
                    )
                seen.add(name)
                fd = FieldDescriptor(
                    field_name=field.name,
                    column=name,
                    column_type=COLUMN_TYPES[semantic],
                    getter=operator.attrgetter(field.name),
                    init=field.init,
                )
                columns.append(fd)
                select_fields.append(fd)
                continue

            tbl = table_key_tag(field)
            if tbl is not None:
                if table is not None:
                    raise DerivationError("multiple occurrence of table_key tag")
                if semantic_name(annotation) != KEY_TYPE:
                    raise DerivationError(f"expecting int64 for id, got {type_name(annotation)}")
                table = tbl
                key = FieldDescriptor(
                    field_name=field.name,
                    column=ROW_ID,
                    column_type=COLUMN_TYPES[KEY_TYPE],
                    getter=operator.attrgetter(field.name),
                    init=field.init,
                )
                select_fields.append(key)
                continue

            if field.init and _has_no_default(field):
                raise DerivationError(
                    f"field {field.name} of {record_type.__name__} is not mapped "
                    f"and has no default"
                )

        if not columns:
            raise DerivationError("no record fields have column tag")
        if table is None or key is None:
            raise DerivationError("missing table_key tag")

        return TypeDescriptor.build(
            record_type=record_type,
            table=table,
            key=key,
            columns=columns,
            select_fields=select_fields,
            quote=quote_identifier,
        )


def _resolve_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError) as e:
        raise DerivationError(
            f"cannot resolve field types of {record_type.__name__}: {e}"
        ) from e


def _has_no_default(field: dataclasses.Field) -> bool:
    return (
        field.default is dataclasses.MISSING
        and field.default_factory is dataclasses.MISSING
    )
