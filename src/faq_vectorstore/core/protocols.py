"""
Core protocols defining contracts for the vector store.

Infrastructure components implement these protocols, so the retrieval
service can be wired with production or test implementations.

PATTERN:
- Protocol defines the contract
- Production implementation (OpenAIEmbeddings, FileSnapshotStore)
- Test double (MockEmbeddings, InMemorySnapshotStore)
- Factory function for instantiation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from faq_vectorstore.retrieval.store import DocumentCollection


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (production)
    - MockEmbeddings (testing)

    embed_batch is order-preserving and all-or-nothing: one vector per
    input text, or an exception for the whole batch.
    """

    @property
    def dimensions(self) -> int:
        """Length of the vectors this provider produces."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        ...


# ---------------------------------------------------------------------------
# SNAPSHOT STORE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class SnapshotStore(Protocol):
    """
    Contract for collection persistence.

    Implementations:
    - FileSnapshotStore (production)
    - InMemorySnapshotStore (testing)
    """

    def exists(self) -> bool:
        """Whether a snapshot is available to load."""
        ...

    def load(self) -> DocumentCollection:
        """Load the collection. Raises CorruptSnapshot on bad data."""
        ...

    def save(self, collection: DocumentCollection) -> None:
        """Persist the collection."""
        ...
