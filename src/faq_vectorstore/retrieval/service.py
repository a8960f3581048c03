"""
Retrieval service - the facade the HTTP / RAG-answer layer calls into.

Ingestion:  fragments -> TokenTextSplitter -> one embed_batch call -> collection.add
Query:      text -> one embed call -> cosine ranking over collection.all()

The service is an explicit object with an open/close lifecycle; callers
construct it and pass it around. It manages any number of independently
named collections, each with its own snapshot file.

Embedding calls and file I/O never run while a collection lock is held.
Provider and persistence errors propagate unchanged: an empty result list
only ever means that nothing scored above the threshold.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from faq_vectorstore.core.errors import (
    InvalidArgument,
    ProviderFailure,
    StoreClosedError,
    VectorStoreError,
)
from faq_vectorstore.core.protocols import EmbeddingProvider, SnapshotStore
from faq_vectorstore.retrieval.document import Document, Fragment, SearchResult
from faq_vectorstore.retrieval.similarity import validate_search_args
from faq_vectorstore.retrieval.snapshot import FileSnapshotStore
from faq_vectorstore.retrieval.splitter import TokenTextSplitter
from faq_vectorstore.retrieval.store import DEFAULT_COLLECTION, DocumentCollection

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.7
DEFAULT_TOP_K = 5
DEFAULT_FILE_NAME = "vectorstore.json"


class RetrievalService:
    """
    Compose splitter, embedding provider and collections.

    Dependencies are INJECTED, not created internally. This enables
    testing with mock embeddings and in-memory snapshot stores.

    Usage:
        with RetrievalService(embeddings, snapshot_dir="data") as service:
            service.initialize(load_faq_fragments)
            results = service.search("How do I reset my password?", top_k=3)
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        splitter: TokenTextSplitter | None = None,
        snapshot_dir: Path | str = "data",
        file_name: str = DEFAULT_FILE_NAME,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        default_top_k: int = DEFAULT_TOP_K,
        save_on_close: bool = False,
        snapshot_store_factory: Callable[[str], SnapshotStore] | None = None,
    ):
        """
        Args:
            embeddings: Embedding provider (injected, not created here)
            splitter: Text splitter (default: TokenTextSplitter())
            snapshot_dir: Directory holding snapshot files
            file_name: Snapshot file name of the default collection
            similarity_threshold: Default minimum score for queries
            default_top_k: Default result cap for queries
            save_on_close: Save every collection when the service closes
            snapshot_store_factory: Maps a collection name to its snapshot
                store; defaults to a FileSnapshotStore under snapshot_dir
        """
        validate_search_args(default_top_k, similarity_threshold)
        self._embeddings = embeddings
        self._splitter = splitter or TokenTextSplitter()
        self.snapshot_dir = Path(snapshot_dir)
        self.file_name = file_name
        self.similarity_threshold = similarity_threshold
        self.default_top_k = default_top_k
        self.save_on_close = save_on_close
        self._snapshot_store_factory = snapshot_store_factory
        self._collections: dict[str, DocumentCollection] = {}
        self._lock = threading.Lock()
        self._open = False

    # -----------------------------------------------------------------------
    # LIFECYCLE
    # -----------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> RetrievalService:
        """Open the service for use. Idempotent."""
        self._open = True
        logger.debug("Retrieval service opened")
        return self

    def close(self) -> None:
        """
        Close the service, saving collections first if save_on_close is set.

        Empty collections are not saved.
        """
        if not self._open:
            return
        try:
            if self.save_on_close:
                for name in self.collection_names():
                    if len(self.collection(name)):
                        self.save(name)
        finally:
            self._open = False
            logger.debug("Retrieval service closed")

    def __enter__(self) -> RetrievalService:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
            return
        # Keep the in-flight exception; a failed save is only logged
        try:
            self.close()
        except (VectorStoreError, OSError) as e:
            logger.error(f"Failed to save collections while closing: {e}")

    # -----------------------------------------------------------------------
    # COLLECTIONS
    # -----------------------------------------------------------------------

    def collection(self, name: str = DEFAULT_COLLECTION) -> DocumentCollection:
        """Get a collection by name, creating it empty on first use."""
        self._require_open()
        with self._lock:
            if name not in self._collections:
                self._collections[name] = DocumentCollection(name)
            return self._collections[name]

    def _lookup(self, name: str) -> DocumentCollection:
        """Registered collection, or an unregistered empty one for reads."""
        with self._lock:
            found = self._collections.get(name)
        return found if found is not None else DocumentCollection(name)

    def collection_names(self) -> list[str]:
        with self._lock:
            return list(self._collections)

    def snapshot_path(self, name: str = DEFAULT_COLLECTION) -> Path:
        """Snapshot file for a collection: <dir>/<file> or <dir>/<name>-<file>."""
        if name == DEFAULT_COLLECTION:
            return self.snapshot_dir / self.file_name
        return self.snapshot_dir / f"{name}-{self.file_name}"

    def snapshot_store(self, name: str = DEFAULT_COLLECTION) -> SnapshotStore:
        if self._snapshot_store_factory is not None:
            return self._snapshot_store_factory(name)
        return FileSnapshotStore(self.snapshot_path(name))

    # -----------------------------------------------------------------------
    # INGESTION
    # -----------------------------------------------------------------------

    def ingest(
        self,
        fragments: Iterable[Fragment],
        collection: str = DEFAULT_COLLECTION,
    ) -> list[Document]:
        """
        Split, embed (one batch call) and store fragments.

        Raises:
            ProviderFailure: the embedding call failed or returned the
                wrong number of vectors
            DimensionMismatch / DuplicateDocumentId: from the collection
        """
        self._require_open()
        target = self.collection(collection)
        embedded = self._embed_fragments(fragments)
        if not embedded:
            logger.info(f"Nothing to ingest into {collection!r}")
            return []

        documents = target.add(embedded)
        logger.info(
            f"Ingested {len(documents)} chunks into {collection!r} ({len(target)} total)"
        )
        return documents

    def _embed_fragments(self, fragments: Iterable[Fragment]) -> list[Fragment]:
        """Split fragments and embed every chunk in one batch call."""
        chunks = self._splitter.split_all(fragments)
        if not chunks:
            return []

        vectors = self._embeddings.embed_batch([chunk.content for chunk in chunks])
        if len(vectors) != len(chunks):
            raise ProviderFailure(
                f"Provider returned {len(vectors)} embeddings for {len(chunks)} texts"
            )
        return [chunk.with_embedding(vector) for chunk, vector in zip(chunks, vectors)]

    def initialize(
        self,
        source: Callable[[], Iterable[Fragment]],
        collection: str = DEFAULT_COLLECTION,
        rebuild: bool = False,
    ) -> DocumentCollection:
        """
        Startup policy: load the snapshot if one exists, otherwise build.

        Building calls `source()` for the raw fragments, ingests them and
        saves a snapshot, so later starts skip embedding entirely.
        `rebuild=True` ignores any existing snapshot.

        The new contents are built and saved in a staging collection and
        only then installed, so a failed build leaves the live collection
        and its snapshot as they were.
        """
        self._require_open()
        store = self.snapshot_store(collection)
        if not rebuild and store.exists():
            logger.info(f"Snapshot found for {collection!r}, skipping embedding")
            return self.load(collection)

        logger.info(f"Building collection {collection!r} from source data")
        staged = DocumentCollection(collection)
        staged.add(self._embed_fragments(source()))
        store.save(staged)

        dimension, documents = staged.state()
        target = self.collection(collection)
        target.replace_all(documents, dimension)
        logger.info(f"Built {collection!r} with {len(target)} documents")
        return target

    # -----------------------------------------------------------------------
    # QUERY
    # -----------------------------------------------------------------------

    def query(
        self,
        text: str,
        top_k: int | None = None,
        threshold: float | None = None,
        collection: str = DEFAULT_COLLECTION,
    ) -> list[SearchResult]:
        """
        Embed the query text (one call) and rank the collection against it.

        Arguments are validated before the provider is called.
        """
        self._require_open()
        if not isinstance(text, str) or not text.strip():
            raise InvalidArgument("Query cannot be empty")
        k = top_k if top_k is not None else self.default_top_k
        t = threshold if threshold is not None else self.similarity_threshold
        validate_search_args(k, t)

        logger.debug(f"Searching {collection!r} for: {text}")
        query_vector = self._embeddings.embed(text)
        return self._lookup(collection).search(query_vector, top_k=k, threshold=t)

    def search(self, query: str, top_k: int | None = None) -> list[SearchResult]:
        """Search the default collection with the configured threshold."""
        return self.query(query, top_k=top_k)

    # -----------------------------------------------------------------------
    # PERSISTENCE
    # -----------------------------------------------------------------------

    def save(self, collection: str = DEFAULT_COLLECTION) -> None:
        """Persist one collection to its snapshot store."""
        self._require_open()
        self.snapshot_store(collection).save(self.collection(collection))

    def load(self, collection: str = DEFAULT_COLLECTION) -> DocumentCollection:
        """
        Replace a collection's contents with its snapshot.

        The snapshot is parsed before anything is installed: on
        CorruptSnapshot or FileNotFoundError the collection is unchanged.
        """
        self._require_open()
        loaded = self.snapshot_store(collection).load()
        if loaded.name != collection:
            logger.warning(
                f"Snapshot for {collection!r} was saved as {loaded.name!r}"
            )
        dimension, documents = loaded.state()
        target = self.collection(collection)
        target.replace_all(documents, dimension)
        return target

    def _require_open(self) -> None:
        if not self._open:
            raise StoreClosedError("Retrieval service is not open")
