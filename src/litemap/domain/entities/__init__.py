"""Domain entities for the mapping layer.

Exports:
    Record tags:
        - column: Declare a managed column on a record dataclass
        - table_key: Declare the table key field
    Descriptors:
        - FieldDescriptor: One mapped field
        - TypeDescriptor: Cached mapping between a record type and its table
"""

from litemap.domain.entities.descriptor import ROW_ID, FieldDescriptor, TypeDescriptor
from litemap.domain.entities.record import (
    COLUMN_TAG,
    OWN_NAME,
    TABLE_KEY_TAG,
    column,
    column_tag,
    table_key,
    table_key_tag,
)

__all__ = [
    # Record tags
    "COLUMN_TAG",
    "OWN_NAME",
    "TABLE_KEY_TAG",
    "column",
    "column_tag",
    "table_key",
    "table_key_tag",
    # Descriptors
    "ROW_ID",
    "FieldDescriptor",
    "TypeDescriptor",
]
