"""Field tags that map a record dataclass to a table.

A record is an ordinary dataclass. Two tags, carried in the field
metadata, tell the mapper what to persist:

    - column(): a managed column. The column name defaults to the field
      name; pass an explicit name to decouple the two.
    - table_key(): the row identifier. Names the table and receives the
      engine-assigned rowid on retrieve. Must be annotated int or Int64.

Example:
    >>> @dataclass
    ... class Musketeer:
    ...     id: int = table_key("rec")
    ...     name: str = column(default="")
    ...     group: Int32 = column("group_num", default=0)
    ...     scratch: int = 0  # not persisted
"""

from __future__ import annotations

import dataclasses
from typing import Any

COLUMN_TAG = "litemap.column"
TABLE_KEY_TAG = "litemap.table_key"
OWN_NAME = "*"
"""Column tag value meaning "use the field's own name"."""


def column(
    name: str | None = None,
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    init: bool = True,
    repr: bool = True,
    compare: bool = True,
) -> Any:
    """Declare a managed column.

    Args:
        name: Column name in the table. None or "*" uses the field name.
        default: Dataclass default value.
        default_factory: Dataclass default factory.
        init: Passed through to dataclasses.field.
        repr: Passed through to dataclasses.field.
        compare: Passed through to dataclasses.field.
    """
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        init=init,
        repr=repr,
        compare=compare,
        metadata={COLUMN_TAG: name or OWN_NAME},
    )


def table_key(table: str, *, default: int = 0) -> Any:
    """Declare the table key field.

    Args:
        table: Name of the table the record maps to.
        default: Value used before the record has been stored.
    """
    if not table:
        raise ValueError("table name must not be empty")
    return dataclasses.field(default=default, metadata={TABLE_KEY_TAG: table})


def column_tag(field: dataclasses.Field) -> str | None:
    """Return the column name a field is tagged with, or None."""
    tag = field.metadata.get(COLUMN_TAG)
    if not tag:
        return None
    return field.name if tag == OWN_NAME else tag


def table_key_tag(field: dataclasses.Field) -> str | None:
    """Return the table name a field is tagged with, or None."""
    return field.metadata.get(TABLE_KEY_TAG) or None
