"""
Core module - shared protocols and errors for the vector store.

USAGE:
------
from faq_vectorstore.core import EmbeddingProvider, DimensionMismatch
"""

from faq_vectorstore.core.errors import (
    VectorStoreError,
    DimensionMismatch,
    DuplicateDocumentId,
    CorruptSnapshot,
    ProviderFailure,
    InvalidArgument,
    StoreClosedError,
)
from faq_vectorstore.core.protocols import (
    EmbeddingProvider,
    SnapshotStore,
)

__all__ = [
    # Protocols
    "EmbeddingProvider",
    "SnapshotStore",
    # Errors
    "VectorStoreError",
    "DimensionMismatch",
    "DuplicateDocumentId",
    "CorruptSnapshot",
    "ProviderFailure",
    "InvalidArgument",
    "StoreClosedError",
]
