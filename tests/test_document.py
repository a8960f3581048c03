"""
Unit Tests for the Document Model

Tests Fragment / Document / SearchResult construction and validation.
"""

import math

import numpy as np
import pytest

from faq_vectorstore.core.errors import InvalidArgument
from faq_vectorstore.retrieval.document import Document, Fragment, SearchResult


class TestFragment:
    """Test Fragment dataclass."""

    def test_defaults(self):
        fragment = Fragment("Question: What is X?")

        assert dict(fragment.metadata) == {}
        assert fragment.id is None
        assert fragment.embedding is None

    def test_with_embedding_accepts_numpy(self):
        fragment = Fragment("text", {"source": "faq.txt"}, id="a")

        embedded = fragment.with_embedding(np.array([0.5, 0.25]))

        assert embedded.embedding == (0.5, 0.25)
        assert embedded.id == "a"
        assert dict(embedded.metadata) == {"source": "faq.txt"}
        assert fragment.embedding is None

    def test_rejects_empty_id(self):
        with pytest.raises(InvalidArgument):
            Fragment("text", id="")

    def test_rejects_non_string_content(self):
        with pytest.raises(InvalidArgument):
            Fragment(42)


class TestDocument:
    """Test Document dataclass."""

    def test_to_dict(self):
        doc = Document(id="d1", content="c", metadata={"k": "v"}, embedding=[1, 2])

        assert doc.to_dict() == {
            "id": "d1",
            "content": "c",
            "metadata": {"k": "v"},
            "embedding": [1.0, 2.0],
        }

    def test_dimension(self):
        assert Document(id="d1", content="c", metadata={}, embedding=(1.0, 2.0, 3.0)).dimension == 3

    def test_equality_by_fields(self):
        a = Document(id="d1", content="c", metadata={"k": "v"}, embedding=(1.0,))
        b = Document(id="d1", content="c", metadata={"k": "v"}, embedding=[1.0])

        assert a == b

    @pytest.mark.parametrize("embedding", [[], [math.nan], [math.inf, 1.0], ["x"], None])
    def test_rejects_invalid_embedding(self, embedding):
        with pytest.raises(InvalidArgument):
            Document(id="d1", content="c", metadata={}, embedding=embedding)

    def test_rejects_non_string_metadata_values(self):
        with pytest.raises(InvalidArgument):
            Document(id="d1", content="c", metadata={"n": 1}, embedding=(1.0,))

    def test_not_hashable(self):
        with pytest.raises(TypeError):
            hash(Document(id="d1", content="c", metadata={}, embedding=(1.0,)))


class TestSearchResult:
    """Test SearchResult accessors."""

    def test_accessors_and_to_dict(self):
        doc = Document(id="d1", content="c", metadata={"category": "General"}, embedding=(1.0,))
        result = SearchResult(document=doc, score=0.9)

        assert result.id == "d1"
        assert result.content == "c"
        assert result.metadata["category"] == "General"
        assert result.to_dict() == {
            "id": "d1",
            "content": "c",
            "metadata": {"category": "General"},
            "score": 0.9,
        }
