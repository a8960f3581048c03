"""
Snapshot persistence - save a collection to JSON and restore it.

Following the gold standard pattern:
1. Protocol defines the interface (core.protocols.SnapshotStore)
2. FileSnapshotStore for production (persistent)
3. InMemorySnapshotStore for testing (fast, no I/O)
4. Factory function for convenience

Snapshot format (version 1):

    {
      "format_version": 1,
      "collection": "faq",
      "dimension": 1536,
      "documents": [
        {"id": "...", "content": "...", "metadata": {...}, "embedding": [...]}
      ]
    }

Saves are atomic: the JSON is written to a temp file next to the target,
fsynced, then moved into place. A crash mid-write leaves the previous
snapshot intact rather than a truncated file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ValidationError

from faq_vectorstore.core.errors import (
    CorruptSnapshot,
    DimensionMismatch,
    DuplicateDocumentId,
    InvalidArgument,
)
from faq_vectorstore.core.protocols import SnapshotStore
from faq_vectorstore.retrieval.document import Document
from faq_vectorstore.retrieval.store import DocumentCollection

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


# ---------------------------------------------------------------------------
# SNAPSHOT SCHEMA
# ---------------------------------------------------------------------------


class SnapshotEntry(BaseModel):
    """One persisted document."""

    id: str
    content: str
    metadata: dict[str, str]
    embedding: list[float]


class SnapshotFile(BaseModel):
    """Whole-file snapshot of one collection."""

    format_version: int
    collection: str
    dimension: int | None
    documents: list[SnapshotEntry]


# ---------------------------------------------------------------------------
# SERIALIZATION
# ---------------------------------------------------------------------------


def dumps_snapshot(collection: DocumentCollection) -> str:
    """Serialize a collection to snapshot JSON."""
    dimension, documents = collection.state()
    payload = {
        "format_version": FORMAT_VERSION,
        "collection": collection.name,
        "dimension": dimension,
        "documents": [doc.to_dict() for doc in documents],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False, allow_nan=False)


def loads_snapshot(text: str | bytes, source: Path | str | None = None) -> DocumentCollection:
    """
    Parse snapshot JSON into a new collection.

    Raises:
        CorruptSnapshot: unparseable JSON, schema violations, unknown
            format version, duplicate ids or inconsistent dimensions
    """
    try:
        snapshot = SnapshotFile.model_validate_json(text)
    except ValidationError as e:
        raise CorruptSnapshot(source, f"invalid snapshot data: {e}") from e

    if snapshot.format_version != FORMAT_VERSION:
        raise CorruptSnapshot(
            source, f"unsupported format version {snapshot.format_version}"
        )

    try:
        collection = DocumentCollection(snapshot.collection, snapshot.dimension)
        documents = [
            Document(
                id=entry.id,
                content=entry.content,
                metadata=entry.metadata,
                embedding=entry.embedding,
            )
            for entry in snapshot.documents
        ]
        collection.replace_all(documents, snapshot.dimension)
    except (InvalidArgument, DimensionMismatch, DuplicateDocumentId) as e:
        raise CorruptSnapshot(source, str(e)) from e

    return collection


def save_snapshot(collection: DocumentCollection, path: Path | str) -> Path:
    """Atomically write the collection to `path`. Returns the path."""
    path = Path(path)
    text = dumps_snapshot(collection)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Saved {len(collection)} documents of {collection.name!r} to {path}")
    return path


def load_snapshot(path: Path | str) -> DocumentCollection:
    """
    Read a snapshot file into a new collection.

    Raises:
        FileNotFoundError: no file at `path`
        CorruptSnapshot: the file exists but cannot be fully loaded
    """
    path = Path(path)
    data = path.read_bytes()
    collection = loads_snapshot(data, source=path)
    logger.info(f"Loaded {len(collection)} documents of {collection.name!r} from {path}")
    return collection


# ---------------------------------------------------------------------------
# FILE-BASED IMPLEMENTATION (Production)
# ---------------------------------------------------------------------------


class FileSnapshotStore:
    """Production snapshot store using a JSON file.

    Lets startup skip re-embedding once a snapshot has been written.
    """

    def __init__(self, file_path: Path | str):
        self._path = Path(file_path)

    @property
    def path(self) -> Path:
        """Get the snapshot file path."""
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> DocumentCollection:
        """Load the collection from the JSON file."""
        return load_snapshot(self._path)

    def save(self, collection: DocumentCollection) -> None:
        """Save the collection to the JSON file."""
        save_snapshot(collection, self._path)


# ---------------------------------------------------------------------------
# IN-MEMORY IMPLEMENTATION (Testing)
# ---------------------------------------------------------------------------


class InMemorySnapshotStore:
    """Test snapshot store - no file I/O.

    Keeps the serialized JSON text, so loads go through the same parsing
    and validation as the file store.
    """

    def __init__(self, initial_text: str | None = None):
        self._text = initial_text
        self._save_count = 0

    @property
    def save_count(self) -> int:
        """Number of saves (for test assertions)."""
        return self._save_count

    @property
    def text(self) -> str | None:
        """Current serialized snapshot (for test assertions)."""
        return self._text

    def exists(self) -> bool:
        return self._text is not None

    def load(self) -> DocumentCollection:
        if self._text is None:
            raise FileNotFoundError("No snapshot saved")
        return loads_snapshot(self._text, source="<memory>")

    def save(self, collection: DocumentCollection) -> None:
        self._text = dumps_snapshot(collection)
        self._save_count += 1


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_snapshot_store(
    use_file: bool = True,
    file_path: Path | str | None = None,
    initial_text: str | None = None,
) -> SnapshotStore:
    """
    Factory function for snapshot stores.

    Args:
        use_file: If True, use FileSnapshotStore. If False, use InMemorySnapshotStore.
        file_path: Path for FileSnapshotStore (required when use_file is True).
        initial_text: Initial snapshot JSON for InMemorySnapshotStore.
    """
    if use_file:
        if file_path is None:
            raise InvalidArgument("file_path is required for a file snapshot store")
        return FileSnapshotStore(file_path)
    return InMemorySnapshotStore(initial_text)
