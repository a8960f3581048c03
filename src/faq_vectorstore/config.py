"""
Vector store configuration.

Loads settings from environment variables and wires a RetrievalService
from them.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from faq_vectorstore.core.errors import InvalidArgument
from faq_vectorstore.embeddings import get_embedding_provider
from faq_vectorstore.retrieval.service import RetrievalService
from faq_vectorstore.retrieval.splitter import TokenTextSplitter

_TRUE = ("true", "1", "yes")

T = TypeVar("T")


def _env_number(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise InvalidArgument(f"{name} must be a number, got {raw!r}") from e


@dataclass
class VectorStoreConfig:
    """Configuration for the vector store.

    Environment Variables:
        VECTORSTORE_SNAPSHOT_DIR: Directory for snapshot files (default: data)
        VECTORSTORE_FILE_NAME: Snapshot file name (default: vectorstore.json)
        VECTORSTORE_SIMILARITY_THRESHOLD: Minimum score for results (default: 0.7)
        VECTORSTORE_TOP_K: Default number of results (default: 5)
        VECTORSTORE_CHUNK_SIZE: Max approximate tokens per chunk (default: 1000)
        VECTORSTORE_EMBEDDING_MODEL: OpenAI embedding model (default: text-embedding-3-small)
        USE_MOCK_EMBEDDINGS: Use deterministic fake embeddings (default: false)
        VECTORSTORE_FAQ_FILE: FAQ source file (default: docs/faq.txt)
        VECTORSTORE_SAVE_ON_CLOSE: Save collections on close (default: false)
    """

    snapshot_dir: str = "data"
    file_name: str = "vectorstore.json"
    similarity_threshold: float = 0.7
    default_top_k: int = 5
    chunk_size: int = 1000
    embedding_model: str = "text-embedding-3-small"
    use_mock_embeddings: bool = False
    faq_file_path: str = "docs/faq.txt"
    save_on_close: bool = False

    @classmethod
    def from_env(cls) -> "VectorStoreConfig":
        """Load config from environment variables."""
        return cls(
            snapshot_dir=os.environ.get("VECTORSTORE_SNAPSHOT_DIR", "data"),
            file_name=os.environ.get("VECTORSTORE_FILE_NAME", "vectorstore.json"),
            similarity_threshold=_env_number("VECTORSTORE_SIMILARITY_THRESHOLD", 0.7, float),
            default_top_k=_env_number("VECTORSTORE_TOP_K", 5, int),
            chunk_size=_env_number("VECTORSTORE_CHUNK_SIZE", 1000, int),
            embedding_model=os.environ.get("VECTORSTORE_EMBEDDING_MODEL", "text-embedding-3-small"),
            use_mock_embeddings=os.environ.get("USE_MOCK_EMBEDDINGS", "false").lower() in _TRUE,
            faq_file_path=os.environ.get("VECTORSTORE_FAQ_FILE", "docs/faq.txt"),
            save_on_close=os.environ.get("VECTORSTORE_SAVE_ON_CLOSE", "false").lower() in _TRUE,
        )


def build_service(config: VectorStoreConfig | None = None) -> RetrievalService:
    """
    Create a RetrievalService from configuration (not yet opened).

    Args:
        config: Settings to use (default: VectorStoreConfig.from_env())
    """
    config = config or VectorStoreConfig.from_env()
    embeddings = get_embedding_provider(
        use_mock=config.use_mock_embeddings,
        model=config.embedding_model,
    )
    return RetrievalService(
        embeddings=embeddings,
        splitter=TokenTextSplitter(chunk_size=config.chunk_size),
        snapshot_dir=config.snapshot_dir,
        file_name=config.file_name,
        similarity_threshold=config.similarity_threshold,
        default_top_k=config.default_top_k,
        save_on_close=config.save_on_close,
    )
