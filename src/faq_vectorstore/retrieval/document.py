"""
Document model for the retrieval system.

Single responsibility: Define the structure of fragments and documents
stored in a collection.

Fragment is the mutable-by-replacement input unit (splitter and store
input). Document is the immutable stored unit: callers can hand it around
freely without being able to corrupt the collection it came from.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from faq_vectorstore.core.errors import InvalidArgument


def _validate_metadata(metadata: Mapping[str, str] | None) -> MappingProxyType:
    """Copy metadata into a read-only str -> str mapping."""
    if metadata is None:
        return MappingProxyType({})
    if not isinstance(metadata, Mapping):
        raise InvalidArgument(f"metadata must be a mapping, got {type(metadata).__name__}")
    checked: dict[str, str] = {}
    for key, value in metadata.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidArgument(
                f"metadata must map str to str, got {key!r}: {value!r}"
            )
        checked[key] = value
    return MappingProxyType(checked)


def _validate_embedding(embedding: Sequence[float] | Any) -> tuple[float, ...]:
    """Copy an embedding (list, tuple or numpy array) into a tuple of floats."""
    try:
        values = tuple(float(x) for x in embedding)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"embedding must be a sequence of numbers: {e}") from e
    if not values:
        raise InvalidArgument("embedding must not be empty")
    if not all(math.isfinite(x) for x in values):
        raise InvalidArgument("embedding contains NaN or infinite values")
    return values


@dataclass(frozen=True)
class Fragment:
    """
    A piece of text on its way into a collection.

    id and embedding are optional: the splitter produces fragments
    without embeddings, the retrieval service attaches them, and the
    store assigns an id when none was supplied.
    """

    content: str
    metadata: Mapping[str, str] = field(default_factory=dict)
    id: str | None = None
    embedding: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.content, str):
            raise InvalidArgument("fragment content must be a string")
        if self.id is not None and (not isinstance(self.id, str) or not self.id):
            raise InvalidArgument("fragment id must be a non-empty string")
        object.__setattr__(self, "metadata", _validate_metadata(self.metadata))
        if self.embedding is not None:
            object.__setattr__(self, "embedding", _validate_embedding(self.embedding))

    def with_embedding(self, embedding: Sequence[float] | Any) -> Fragment:
        """Return a copy of this fragment carrying the given embedding."""
        return replace(self, embedding=embedding)


@dataclass(frozen=True)
class Document:
    """
    A stored document with its embedding.

    Immutable: metadata is a read-only view over a private copy and the
    embedding is a tuple. Two documents are equal when all four fields
    are equal.
    """

    id: str
    content: str
    metadata: Mapping[str, str]
    embedding: tuple[float, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidArgument("document id must be a non-empty string")
        if not isinstance(self.content, str):
            raise InvalidArgument("document content must be a string")
        object.__setattr__(self, "metadata", _validate_metadata(self.metadata))
        object.__setattr__(self, "embedding", _validate_embedding(self.embedding))

    __hash__ = None  # metadata is a mapping

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "content": self.content,
            "metadata": dict(self.metadata),
            "embedding": list(self.embedding),
        }


@dataclass(frozen=True)
class SearchResult:
    """A retrieved document with its cosine similarity score."""

    document: Document
    score: float

    @property
    def id(self) -> str:
        return self.document.id

    @property
    def content(self) -> str:
        return self.document.content

    @property
    def metadata(self) -> Mapping[str, str]:
        return self.document.metadata

    def to_dict(self) -> dict:
        """Serializable form without the embedding."""
        return {
            "id": self.document.id,
            "content": self.document.content,
            "metadata": dict(self.document.metadata),
            "score": self.score,
        }
