"""Tests for corpus retrieval."""

import pytest

from fakes import FakeVectorStore
from ragchat.core.errors import RetrievalDegraded
from ragchat.core.models.evidence import EvidenceItem, EvidenceStatus
from ragchat.core.services.retriever import (
    CONTEXT_HEADER,
    NO_DOCUMENTS_CONTEXT,
    NO_RELEVANT_CONTEXT,
    RETRIEVAL_ERROR_CONTEXT,
    Retriever,
    format_context,
)
from ragchat.core.services.retry import RetryPolicy


def _index(store: FakeVectorStore, document_id: str, filename: str, *texts: str) -> None:
    store.add(
        ids=[f"{document_id}_chunk_{i}" for i in range(len(texts))],
        texts=list(texts),
        metadatas=[
            {"documentId": document_id, "chunkIndex": i, "filename": filename}
            for i in range(len(texts))
        ],
    )


def test_retrieve_returns_ok_bundle_with_grouped_context() -> None:
    store = FakeVectorStore(distance=0.4)
    _index(store, "d1", "ai.txt", "AI is the simulation of intelligence.", "It has subfields.")

    bundle = Retriever(store, k=5).retrieve("What is AI?")

    assert bundle.status is EvidenceStatus.OK
    assert bundle.sources == ["ai.txt"]
    assert [round(i.score, 2) for i in bundle.items] == [0.8, 0.8]
    assert bundle.context.startswith(CONTEXT_HEADER)
    assert "--- Source: ai.txt ---" in bundle.context
    assert "[Chunk 1] AI is the simulation of intelligence." in bundle.context
    assert store.queries[0] == {"query_text": "What is AI?", "k": 5, "where": None}


def test_empty_index_gives_empty_bundle() -> None:
    bundle = Retriever(FakeVectorStore()).retrieve("anything")

    assert bundle.status is EvidenceStatus.EMPTY
    assert bundle.items == []
    assert bundle.context == NO_DOCUMENTS_CONTEXT


def test_hits_below_relevance_floor_are_dropped() -> None:
    store = FakeVectorStore(distance=1.6)  # score 0.2
    _index(store, "d1", "ai.txt", "unrelated text")

    bundle = Retriever(store, relevance_floor=0.3).retrieve("What is AI?")

    assert bundle.status is EvidenceStatus.EMPTY
    assert bundle.context == NO_RELEVANT_CONTEXT


def test_index_failure_is_reported_on_bundle() -> None:
    store = FakeVectorStore()
    store.fail_query = ConnectionError("chroma down")

    bundle = Retriever(store).retrieve("What is AI?")

    assert bundle.status is EvidenceStatus.FAILED
    assert bundle.items == []
    assert bundle.context == RETRIEVAL_ERROR_CONTEXT
    assert isinstance(bundle.error, RetrievalDegraded)
    assert bundle.error.message == "chroma down"
    assert isinstance(bundle.error.__cause__, ConnectionError)


def test_document_filter_is_passed_to_index() -> None:
    store = FakeVectorStore()
    _index(store, "d1", "a.txt", "alpha")
    _index(store, "d2", "b.txt", "beta")

    bundle = Retriever(store).retrieve("q", k=3, document_id="d2")

    assert store.queries[0]["where"] == {"documentId": "d2"}
    assert store.queries[0]["k"] == 3
    assert bundle.sources == ["b.txt"]


def test_retrieve_with_threshold_overfetches_and_applies_min_score() -> None:
    store = FakeVectorStore(distance=0.4)  # score 0.8
    _index(store, "d1", "a.txt", *[f"chunk {i}" for i in range(8)])
    retriever = Retriever(store)

    strict = retriever.retrieve_with_threshold("q", min_score=0.9, max_chunks=5)
    loose = retriever.retrieve_with_threshold("q", min_score=0.5, max_chunks=3)

    assert store.queries[0]["k"] == 10
    assert strict.status is EvidenceStatus.EMPTY
    assert "minimum score: 0.9" in strict.context
    assert len(loose.items) == 3


def test_retry_policy_recovers_transient_index_error() -> None:
    store = FakeVectorStore()
    _index(store, "d1", "a.txt", "alpha")
    calls = {"n": 0}
    query = store.query

    def flaky(**kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise TimeoutError("slow")
        return query(**kwargs)

    store.query = flaky
    retriever = Retriever(store, retry=RetryPolicy(retries=1, backoff_min_ms=0, backoff_max_ms=0))

    bundle = retriever.retrieve("q")

    assert bundle.status is EvidenceStatus.OK
    assert calls["n"] == 2


def test_format_context_groups_by_document_and_orders_chunks() -> None:
    items = [
        EvidenceItem(content="second", source="a.txt", score=0.9, document_id="d1", chunk_index=1),
        EvidenceItem(content="other", source="b.txt", score=0.8, document_id="d2", chunk_index=0),
        EvidenceItem(content="first", source="a.txt", score=0.7, document_id="d1", chunk_index=0),
    ]

    context = format_context(items)

    a_pos = context.index("--- Source: a.txt ---")
    b_pos = context.index("--- Source: b.txt ---")
    assert a_pos < b_pos
    assert context.index("[Chunk 1] first") < context.index("[Chunk 2] second") < b_pos


def test_floor_drops_only_low_scoring_hits() -> None:
    distances = {"close": 0.2, "edge": 1.4, "far": 1.5, "opposite": 2.5}
    store = FakeVectorStore()
    store.distance_fn = lambda text, metadata: distances[text]
    _index(store, "d1", "a.txt", *distances)

    bundle = Retriever(store, k=10, relevance_floor=0.3).retrieve("q")

    assert bundle.status is EvidenceStatus.OK
    assert all(i.score >= 0.3 for i in bundle.items)
    assert sorted(i.content for i in bundle.items) == ["close", "edge"]
    assert [i.score for i in bundle.items if i.content == "edge"] == [pytest.approx(0.3)]


def test_format_context_orders_unindexed_chunks_by_score() -> None:
    items = [
        EvidenceItem(content="mid-low", source="a.txt", score=0.5, document_id="d1"),
        EvidenceItem(content="best", source="a.txt", score=0.9, document_id="d1"),
        EvidenceItem(content="mid-high", source="a.txt", score=0.7, document_id="d1"),
    ]

    context = format_context(items)

    assert "[Chunk 1] best" in context
    assert "[Chunk 2] mid-high" in context
    assert "[Chunk 3] mid-low" in context


def test_index_crash_inside_retry_keeps_cause() -> None:
    store = FakeVectorStore()
    store.fail_query = ConnectionError("reset by peer")
    retriever = Retriever(store, retry=RetryPolicy(retries=1, backoff_min_ms=0, backoff_max_ms=0))

    bundle = retriever.retrieve("q")

    assert len(store.queries) == 2
    assert isinstance(bundle.error, RetrievalDegraded)
    assert str(bundle.error.__cause__) == "reset by peer"
