"""Shared pytest fixtures."""

import pytest

from fakes import FakeExtractor, FakeLLM, FakeVectorStore, FakeWebSearch
from ragchat.core.protocols.web_search import WebResult
from ragchat.core.services.assembler import ConversationAssembler
from ragchat.core.services.chunker import TextChunker
from ragchat.core.services.ingest_service import IngestService
from ragchat.core.services.orchestrator import Orchestrator
from ragchat.core.services.retriever import Retriever
from ragchat.core.services.thread_service import ThreadService
from ragchat.core.services.web_search_service import WebSearchService
from ragchat.infrastructure.storage import InMemoryConversationStore


@pytest.fixture
def store():
    return InMemoryConversationStore()


@pytest.fixture
def vector_store():
    return FakeVectorStore()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def web_client():
    return FakeWebSearch(
        results=[
            WebResult(
                url="https://example.com/ai",
                title="What is AI",
                content="Artificial intelligence is the simulation of human intelligence.",
            ),
            WebResult(
                url="https://example.org/ml",
                title="Machine learning",
                content="Machine learning is a subfield of AI.",
            ),
        ],
        answer="AI is the field of building intelligent machines.",
    )


@pytest.fixture
def ingest(vector_store, store):
    return IngestService(
        vector_store=vector_store,
        store=store,
        extractor=FakeExtractor(),
        chunker=TextChunker(chunk_size=200, chunk_overlap=40),
    )


@pytest.fixture
def make_orchestrator(vector_store, store, llm, ingest):
    """Build an orchestrator around the shared fakes with a chosen web client."""

    def _make(web_client=None, history_limit: int = 5) -> Orchestrator:
        return Orchestrator(
            llm=llm,
            store=store,
            retriever=Retriever(vector_store=vector_store, k=5),
            web_search=WebSearchService(client=web_client, max_results=3),
            threads=ThreadService(store),
            ingest=ingest,
            assembler=ConversationAssembler(history_limit=history_limit),
        )

    return _make
