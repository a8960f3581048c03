"""
Unit Tests for the Document Store

Tests DocumentCollection add/get/all, the dimension guard, duplicate-id
policy, immutability of returned documents and thread safety.

STAFF ENGINEER PATTERNS:
------------------------
1. Verify failed writes leave the collection unchanged
2. Verify callers cannot mutate stored state through returned objects
3. Hammer the store from several threads
"""

import dataclasses
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from faq_vectorstore.core.errors import (
    DimensionMismatch,
    DuplicateDocumentId,
    InvalidArgument,
)
from faq_vectorstore.retrieval.document import Document, Fragment
from faq_vectorstore.retrieval.store import DocumentCollection


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def collection():
    """Collection with three 2-D documents."""
    coll = DocumentCollection("faq")
    coll.add([
        Fragment("Question: How do I reset my password?", {"category": "Account"}, id="pw", embedding=[1.0, 0.0]),
        Fragment("Question: Where is my invoice?", {"category": "Billing"}, id="inv", embedding=[0.0, 1.0]),
        Fragment("Question: Can I change my email?", {"category": "Account"}, id="mail", embedding=[0.7, 0.7]),
    ])
    return coll


# ---------------------------------------------------------------------------
# ADD
# ---------------------------------------------------------------------------


class TestAdd:
    """Test adding embedded fragments."""

    def test_add_returns_documents(self, collection):
        docs = collection.add([Fragment("new", id="new", embedding=[0.5, 0.5])])

        assert len(docs) == 1
        assert isinstance(docs[0], Document)
        assert docs[0].id == "new"
        assert len(collection) == 4

    def test_add_assigns_ids_when_missing(self):
        coll = DocumentCollection()

        docs = coll.add([Fragment("a", embedding=[1.0]), Fragment("b", embedding=[2.0])])

        assert all(len(d.id) == 32 for d in docs)
        assert docs[0].id != docs[1].id
        assert coll.get(docs[0].id) == docs[0]

    def test_first_add_fixes_dimension(self):
        coll = DocumentCollection()
        assert coll.dimension is None

        coll.add([Fragment("a", embedding=[1.0, 2.0, 3.0])])

        assert coll.dimension == 3

    def test_add_empty_batch_is_noop(self, collection):
        assert collection.add([]) == []
        assert len(collection) == 3

    def test_add_requires_embedding(self, collection):
        with pytest.raises(InvalidArgument):
            collection.add([Fragment("not embedded")])
        assert len(collection) == 3

    def test_add_rejects_non_fragments(self, collection):
        with pytest.raises(InvalidArgument):
            collection.add([{"content": "x", "embedding": [1.0, 0.0]}])

    def test_insertion_order_preserved(self, collection):
        assert [d.id for d in collection.all()] == ["pw", "inv", "mail"]


# ---------------------------------------------------------------------------
# DIMENSION GUARD
# ---------------------------------------------------------------------------


class TestDimensionGuard:
    """Adding a wrong-length embedding fails and changes nothing."""

    def test_mismatch_raises_and_leaves_collection_unchanged(self, collection):
        before = collection.all()

        with pytest.raises(DimensionMismatch) as exc_info:
            collection.add([Fragment("3-D", id="bad", embedding=[1.0, 0.0, 0.0])])

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3
        assert collection.all() == before
        assert collection.dimension == 2

    def test_mismatch_anywhere_in_batch_rejects_whole_batch(self, collection):
        with pytest.raises(DimensionMismatch):
            collection.add([
                Fragment("ok", id="ok", embedding=[1.0, 1.0]),
                Fragment("bad", id="bad", embedding=[1.0]),
            ])

        assert "ok" not in collection
        assert len(collection) == 3

    def test_mixed_first_batch_does_not_fix_dimension(self):
        coll = DocumentCollection()

        with pytest.raises(DimensionMismatch):
            coll.add([Fragment("a", embedding=[1.0, 0.0]), Fragment("b", embedding=[1.0])])

        assert coll.dimension is None
        assert len(coll) == 0

    def test_declared_dimension_is_enforced(self):
        coll = DocumentCollection("docs", dimension=3)

        with pytest.raises(DimensionMismatch):
            coll.add([Fragment("a", embedding=[1.0, 0.0])])

    def test_invalid_declared_dimension(self):
        with pytest.raises(InvalidArgument):
            DocumentCollection("docs", dimension=0)


# ---------------------------------------------------------------------------
# DUPLICATE IDS
# ---------------------------------------------------------------------------


class TestDuplicateIds:
    """Duplicate ids are rejected, never overwritten."""

    def test_existing_id_rejected(self, collection):
        original = collection.get("pw")

        with pytest.raises(DuplicateDocumentId) as exc_info:
            collection.add([Fragment("replacement", id="pw", embedding=[0.0, 1.0])])

        assert exc_info.value.document_id == "pw"
        assert collection.get("pw") == original

    def test_duplicate_within_batch_rejected(self):
        coll = DocumentCollection()

        with pytest.raises(DuplicateDocumentId):
            coll.add([
                Fragment("a", id="same", embedding=[1.0]),
                Fragment("b", id="same", embedding=[2.0]),
            ])

        assert len(coll) == 0


# ---------------------------------------------------------------------------
# READS
# ---------------------------------------------------------------------------


class TestReads:
    """get / all / contains."""

    def test_get_existing(self, collection):
        doc = collection.get("inv")

        assert doc.content == "Question: Where is my invoice?"
        assert doc.metadata["category"] == "Billing"
        assert doc.embedding == (0.0, 1.0)

    def test_get_missing_returns_none(self, collection):
        assert collection.get("nope") is None

    def test_contains(self, collection):
        assert "pw" in collection
        assert "nope" not in collection

    def test_all_returns_fresh_list(self, collection):
        docs = collection.all()
        docs.clear()

        assert len(collection.all()) == 3

    def test_search_ranks_stored_documents(self, collection):
        results = collection.search([1.0, 0.1], top_k=2, threshold=0.5)

        assert [r.id for r in results] == ["pw", "mail"]


# ---------------------------------------------------------------------------
# IMMUTABILITY
# ---------------------------------------------------------------------------


class TestImmutability:
    """Callers cannot corrupt stored documents."""

    def test_document_fields_are_frozen(self, collection):
        doc = collection.get("pw")

        with pytest.raises(dataclasses.FrozenInstanceError):
            doc.embedding = (1.0, 2.0, 3.0)

    def test_document_metadata_is_read_only(self, collection):
        doc = collection.get("pw")

        with pytest.raises(TypeError):
            doc.metadata["category"] = "Hacked"

    def test_caller_metadata_is_copied(self):
        metadata = {"source": "faq.txt"}
        coll = DocumentCollection()
        coll.add([Fragment("a", metadata, id="a", embedding=[1.0])])

        metadata["source"] = "changed"

        assert coll.get("a").metadata["source"] == "faq.txt"

    def test_caller_embedding_list_is_copied(self):
        embedding = [1.0, 0.0]
        coll = DocumentCollection()
        coll.add([Fragment("a", id="a", embedding=embedding)])

        embedding.append(5.0)

        assert coll.get("a").embedding == (1.0, 0.0)

    def test_metadata_must_be_strings(self):
        with pytest.raises(InvalidArgument):
            Fragment("a", {"count": 3})


# ---------------------------------------------------------------------------
# REPLACE / EQUALITY
# ---------------------------------------------------------------------------


class TestReplaceAll:
    """Installing a whole new state."""

    def test_replace_all_swaps_contents(self, collection):
        new_docs = [Document(id="x", content="x", metadata={}, embedding=(1.0, 2.0, 3.0))]

        collection.replace_all(new_docs, 3)

        assert [d.id for d in collection.all()] == ["x"]
        assert collection.dimension == 3

    def test_replace_all_validates_first(self, collection):
        bad = [
            Document(id="x", content="x", metadata={}, embedding=(1.0, 2.0)),
            Document(id="y", content="y", metadata={}, embedding=(1.0,)),
        ]

        with pytest.raises(DimensionMismatch):
            collection.replace_all(bad, None)

        assert len(collection) == 3

    def test_equality(self, collection):
        other = DocumentCollection("faq")
        other.replace_all(collection.all(), collection.dimension)

        assert other == collection
        assert DocumentCollection("other") != collection


# ---------------------------------------------------------------------------
# CONCURRENCY
# ---------------------------------------------------------------------------


class TestConcurrency:
    """Concurrent writers and readers."""

    def test_concurrent_adds_are_all_stored(self):
        coll = DocumentCollection()

        def add_batch(worker):
            coll.add([
                Fragment(f"w{worker}-{i}", id=f"w{worker}-{i}", embedding=[float(worker), float(i)])
                for i in range(25)
            ])

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(add_batch, range(8)))

        assert len(coll) == 200
        assert coll.dimension == 2

    def test_readers_run_while_writing(self):
        coll = DocumentCollection()
        coll.add([Fragment("seed", id="seed", embedding=[1.0, 0.0])])
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                try:
                    results = coll.search([1.0, 0.0], top_k=5, threshold=0.0)
                    assert results[0].id == "seed"
                except Exception as e:  # collected and asserted below
                    errors.append(e)
                    return

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(200):
            coll.add([Fragment(f"doc {i}", id=f"doc-{i}", embedding=[0.5, 1.0])])
        stop.set()
        for t in threads:
            t.join()

        assert errors == []
        assert len(coll) == 201
