"""
Document store - one named collection of embedded documents.

DocumentCollection owns its documents exclusively. Callers only ever get
immutable Document instances and fresh lists, so nothing outside the
collection can break the shared-dimension invariant.

Concurrency:
- a single RLock guards the internal state
- add validates the whole batch, then commits under the lock
- search copies the document list under the lock and scores outside it
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from faq_vectorstore.core.errors import (
    DimensionMismatch,
    DuplicateDocumentId,
    InvalidArgument,
)
from faq_vectorstore.retrieval.document import Document, Fragment, SearchResult
from faq_vectorstore.retrieval.similarity import rank

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "faq"


class DocumentCollection:
    """
    In-memory collection of documents sharing one embedding dimension.

    The dimension is either declared up front (e.g. from the embedding
    provider) or fixed by the first successful add.

    Duplicate ids are rejected with DuplicateDocumentId; the offending
    batch is dropped whole.
    """

    def __init__(self, name: str = DEFAULT_COLLECTION, dimension: int | None = None):
        if not isinstance(name, str) or not name:
            raise InvalidArgument("collection name must be a non-empty string")
        if dimension is not None and (not isinstance(dimension, int) or dimension < 1):
            raise InvalidArgument(f"dimension must be a positive integer, got {dimension!r}")
        self._name = name
        self._dimension = dimension
        self._documents: dict[str, Document] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def dimension(self) -> int | None:
        with self._lock:
            return self._dimension

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        with self._lock:
            return document_id in self._documents

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentCollection):
            return NotImplemented
        return (
            self.name == other.name
            and self.dimension == other.dimension
            and self.all() == other.all()
        )

    def __repr__(self) -> str:
        return (
            f"DocumentCollection(name={self._name!r}, dimension={self.dimension}, "
            f"documents={len(self)})"
        )

    # -----------------------------------------------------------------------
    # WRITES
    # -----------------------------------------------------------------------

    def add(self, fragments: Iterable[Fragment]) -> list[Document]:
        """
        Add embedded fragments as documents.

        Every fragment must already carry an embedding. Fragments without
        an id get a random one.

        Raises:
            InvalidArgument: a fragment has no embedding
            DimensionMismatch: an embedding length differs from the collection's
            DuplicateDocumentId: an id is already stored or repeated in the batch
        """
        documents = [self._to_document(fragment) for fragment in fragments]
        if not documents:
            return []

        with self._lock:
            dimension = self._dimension
            if dimension is None:
                dimension = documents[0].dimension
            seen: set[str] = set()
            for doc in documents:
                if doc.dimension != dimension:
                    raise DimensionMismatch(dimension, doc.dimension, doc.id)
                if doc.id in self._documents or doc.id in seen:
                    raise DuplicateDocumentId(doc.id, self._name)
                seen.add(doc.id)

            self._dimension = dimension
            for doc in documents:
                self._documents[doc.id] = doc
            total = len(self._documents)

        logger.debug(
            f"Added {len(documents)} documents to {self._name!r} ({total} total)"
        )
        return documents

    def replace_all(self, documents: Sequence[Document], dimension: int | None) -> None:
        """
        Install a complete new state, e.g. one read from a snapshot.

        The new state is validated first; on any error nothing changes.
        """
        staged: dict[str, Document] = {}
        for doc in documents:
            if dimension is None:
                dimension = doc.dimension
            if doc.dimension != dimension:
                raise DimensionMismatch(dimension, doc.dimension, doc.id)
            if doc.id in staged:
                raise DuplicateDocumentId(doc.id, self._name)
            staged[doc.id] = doc

        with self._lock:
            self._documents = staged
            self._dimension = dimension

    # -----------------------------------------------------------------------
    # READS
    # -----------------------------------------------------------------------

    def all(self) -> list[Document]:
        """All documents in insertion order (a fresh list)."""
        with self._lock:
            return list(self._documents.values())

    def state(self) -> tuple[int | None, list[Document]]:
        """Dimension and documents, read together under the lock."""
        with self._lock:
            return self._dimension, list(self._documents.values())

    def get(self, document_id: str) -> Document | None:
        """Exact-match lookup. Returns None if not found."""
        with self._lock:
            return self._documents.get(document_id)

    def search(
        self,
        query_vector: Any,
        top_k: int = 5,
        threshold: float = 0.0,
    ) -> list[SearchResult]:
        """Rank stored documents by cosine similarity to the query vector."""
        results = rank(self.all(), query_vector, top_k=top_k, threshold=threshold)
        logger.debug(
            f"Search in {self._name!r} returned {len(results)} results "
            f"(top_k={top_k}, threshold={threshold})"
        )
        return results

    # -----------------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------------

    @staticmethod
    def _to_document(fragment: Fragment) -> Document:
        if not isinstance(fragment, Fragment):
            raise InvalidArgument(f"expected Fragment, got {type(fragment).__name__}")
        if fragment.embedding is None:
            raise InvalidArgument(
                "fragment has no embedding; embed it before adding to the store"
            )
        return Document(
            id=fragment.id or uuid.uuid4().hex,
            content=fragment.content,
            metadata=fragment.metadata,
            embedding=fragment.embedding,
        )
