"""Domain services for the mapping layer.

Services hold the per-handle state the CRUD operations rely on: the
descriptor cache, the statement cache, the transaction depth and the
latched error.
"""

from litemap.domain.services.descriptor_builder import (
    DescriptorBuilder,
    quote_identifier,
    record_type_of,
)
from litemap.domain.services.error_state import ErrorState
from litemap.domain.services.statement_cache import StatementCache
from litemap.domain.services.transaction_tracker import EndAction, TransactionTracker

__all__ = [
    "DescriptorBuilder",
    "EndAction",
    "ErrorState",
    "StatementCache",
    "TransactionTracker",
    "quote_identifier",
    "record_type_of",
]
