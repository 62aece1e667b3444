import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def override(self, interface: type[T], instance: T) -> None:
        """Pin a ready-made instance (fakes in tests)."""
        self._factories[interface] = lambda: instance
        self._singleton_flags.add(interface)
        self._singletons[interface] = instance

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


def configure_container(settings: Settings) -> Container:
    """Build a container with every adapter and service.

    Adapters are created once, on first resolve, and injected into the
    services through their constructors.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.conversation_store import ConversationStoreProtocol
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.extractor import ExtractorProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.protocols.web_search import WebSearchProtocol
    from .core.services.assembler import ConversationAssembler
    from .core.services.chunker import TextChunker
    from .core.services.ingest_service import IngestService
    from .core.services.orchestrator import Orchestrator
    from .core.services.retriever import Retriever
    from .core.services.retry import RetryPolicy
    from .core.services.thread_service import ThreadService
    from .core.services.web_search_service import WebSearchService
    from .infrastructure.document_loaders import CompositeLoader
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )
    from .infrastructure.llm.openai_client import OpenAICompatibleClient
    from .infrastructure.storage import InMemoryConversationStore, SqlConversationStore
    from .infrastructure.vector_stores.chroma_store import ChromaVectorStore
    from .infrastructure.web_search import TavilySearchClient

    container = Container()

    retry = RetryPolicy(
        retries=settings.adapter_retries,
        backoff_min_ms=settings.retry_backoff_min_ms,
        backoff_max_ms=settings.retry_backoff_max_ms,
    )

    container.register(
        EmbedderProtocol,
        lambda: SentenceTransformerEmbedder(
            settings.embedding_model, batch_size=settings.embedding_batch_size
        ),
        singleton=True,
    )

    container.register(
        VectorStoreProtocol,
        lambda: ChromaVectorStore(
            embedder=container.resolve(EmbedderProtocol),
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
            tenant=settings.chroma_tenant,
            database=settings.chroma_database,
        ),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: OpenAICompatibleClient(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout,
        ),
        singleton=True,
    )

    container.register(
        WebSearchProtocol,
        lambda: TavilySearchClient(
            api_key=settings.tavily_api_key,
            url=settings.web_search_url,
            timeout=settings.web_search_timeout,
        ),
        singleton=True,
    )

    container.register(ExtractorProtocol, CompositeLoader, singleton=True)

    container.register(
        ConversationStoreProtocol,
        lambda: (
            SqlConversationStore.from_url(settings.database_url)
            if settings.database_url
            else InMemoryConversationStore()
        ),
        singleton=True,
    )

    container.register(
        Retriever,
        lambda: Retriever(
            vector_store=container.resolve(VectorStoreProtocol),
            k=settings.retrieval_k,
            relevance_floor=settings.relevance_floor,
            retry=retry,
        ),
        singleton=True,
    )

    container.register(
        WebSearchService,
        lambda: WebSearchService(
            client=container.resolve(WebSearchProtocol),
            max_results=settings.web_search_max_results,
            retry=retry,
        ),
        singleton=True,
    )

    container.register(
        ThreadService,
        lambda: ThreadService(
            store=container.resolve(ConversationStoreProtocol),
            title_max_length=settings.title_max_length,
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            vector_store=container.resolve(VectorStoreProtocol),
            store=container.resolve(ConversationStoreProtocol),
            extractor=container.resolve(ExtractorProtocol),
            chunker=TextChunker(settings.chunk_size, settings.chunk_overlap),
            retry=retry,
        ),
        singleton=True,
    )

    container.register(
        Orchestrator,
        lambda: Orchestrator(
            llm=container.resolve(LLMProtocol),
            store=container.resolve(ConversationStoreProtocol),
            retriever=container.resolve(Retriever),
            web_search=container.resolve(WebSearchService),
            threads=container.resolve(ThreadService),
            ingest=container.resolve(IngestService),
            assembler=ConversationAssembler(history_limit=settings.history_limit),
            retrieval_k=settings.retrieval_k,
            retry=retry,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
