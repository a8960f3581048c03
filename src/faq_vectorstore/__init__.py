"""
faq-vectorstore - embedded vector store for FAQ retrieval.

Holds text fragments as embedding vectors, persists them to a JSON
snapshot, and answers cosine-similarity queries under a score threshold
and a result-count cap.

QUICK START:
------------
from faq_vectorstore import RetrievalService, MockEmbeddings, Fragment

with RetrievalService(MockEmbeddings(), snapshot_dir="data") as service:
    service.ingest([Fragment("Question: ...\\nAnswer: ...")])
    results = service.search("...", top_k=3)
"""

from faq_vectorstore.core import (
    VectorStoreError,
    DimensionMismatch,
    DuplicateDocumentId,
    CorruptSnapshot,
    ProviderFailure,
    InvalidArgument,
    StoreClosedError,
)
from faq_vectorstore.embeddings import (
    MockEmbeddings,
    OpenAIEmbeddings,
    get_embedding_provider,
)
from faq_vectorstore.retrieval import (
    Document,
    DocumentCollection,
    Fragment,
    RetrievalService,
    SearchResult,
    TokenTextSplitter,
)
from faq_vectorstore.config import VectorStoreConfig, build_service

__version__ = "0.1.0"

__all__ = [
    "VectorStoreError",
    "DimensionMismatch",
    "DuplicateDocumentId",
    "CorruptSnapshot",
    "ProviderFailure",
    "InvalidArgument",
    "StoreClosedError",
    "MockEmbeddings",
    "OpenAIEmbeddings",
    "get_embedding_provider",
    "Document",
    "DocumentCollection",
    "Fragment",
    "RetrievalService",
    "SearchResult",
    "TokenTextSplitter",
    "VectorStoreConfig",
    "build_service",
]
