"""
Retrieval module - embedded vector store for RAG.

This module provides:
- Fragment / Document / SearchResult: the data model
- TokenTextSplitter: bounded chunking before embedding
- DocumentCollection: thread-safe in-memory store
- rank / cosine_similarity: exact similarity search
- FileSnapshotStore / InMemorySnapshotStore: persistence
- RetrievalService: the facade callers use

ARCHITECTURE:
-------------
1. Protocols define the contracts (in core.protocols)
2. Production and test implementations side by side
3. Factory functions for instantiation
4. The service composes them with injected dependencies
"""

from faq_vectorstore.retrieval.document import Document, Fragment, SearchResult
from faq_vectorstore.retrieval.splitter import TokenTextSplitter, count_tokens
from faq_vectorstore.retrieval.similarity import cosine_similarity, rank
from faq_vectorstore.retrieval.store import DEFAULT_COLLECTION, DocumentCollection
from faq_vectorstore.retrieval.snapshot import (
    FileSnapshotStore,
    InMemorySnapshotStore,
    get_snapshot_store,
    load_snapshot,
    save_snapshot,
)
from faq_vectorstore.retrieval.service import RetrievalService

__all__ = [
    # Model
    "Document",
    "Fragment",
    "SearchResult",
    # Splitting
    "TokenTextSplitter",
    "count_tokens",
    # Search
    "cosine_similarity",
    "rank",
    # Store
    "DEFAULT_COLLECTION",
    "DocumentCollection",
    # Persistence
    "FileSnapshotStore",
    "InMemorySnapshotStore",
    "get_snapshot_store",
    "load_snapshot",
    "save_snapshot",
    # Facade
    "RetrievalService",
]
