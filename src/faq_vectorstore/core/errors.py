"""
Error hierarchy for the vector store.

Every failure the store raises derives from VectorStoreError, so callers
at the boundary (CLI, HTTP layer) can catch one type. Each subclass maps
to exactly one failure mode:

- DimensionMismatch: embedding length disagrees with the collection
- DuplicateDocumentId: an id already exists in the collection
- CorruptSnapshot: persisted data cannot be parsed or is inconsistent
- ProviderFailure: the embedding provider call failed
- InvalidArgument: bad caller input, rejected before any work
- StoreClosedError: operation on a service that was closed
"""

from __future__ import annotations

from pathlib import Path


class VectorStoreError(Exception):
    """Base class for all vector store errors."""


class DimensionMismatch(VectorStoreError):
    """Embedding length differs from the collection's dimension."""

    def __init__(self, expected: int, actual: int, document_id: str | None = None):
        self.expected = expected
        self.actual = actual
        self.document_id = document_id
        where = f" for document {document_id!r}" if document_id else ""
        super().__init__(
            f"Embedding dimension mismatch{where}: expected {expected}, got {actual}"
        )


class DuplicateDocumentId(VectorStoreError):
    """A document with this id is already stored."""

    def __init__(self, document_id: str, collection: str | None = None):
        self.document_id = document_id
        self.collection = collection
        where = f" in collection {collection!r}" if collection else ""
        super().__init__(f"Duplicate document id {document_id!r}{where}")


class CorruptSnapshot(VectorStoreError):
    """Snapshot file could not be fully parsed or is inconsistent."""

    def __init__(self, path: Path | str | None, reason: str):
        self.path = Path(path) if path is not None else None
        self.reason = reason
        super().__init__(f"Corrupt snapshot {self.path}: {reason}")


class ProviderFailure(VectorStoreError):
    """The embedding provider failed; no partial results are returned."""


class InvalidArgument(VectorStoreError, ValueError):
    """Caller supplied an invalid argument."""


class StoreClosedError(VectorStoreError):
    """The retrieval service has been closed."""
