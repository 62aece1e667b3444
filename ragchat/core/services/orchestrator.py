"""Orchestrator - per-request pipeline from query to persisted answer."""

import asyncio
import logging
from typing import Optional

from ..errors import (
    ConfigurationMissing,
    ModelInvocationFailed,
    RetrievalDegraded,
    ValidationError,
    WebSearchDegraded,
)
from ..models.chat import (
    ASSISTANT,
    USER,
    ChatRequest,
    ChatResponse,
    Page,
    Thread,
    ThreadDetail,
    UploadResult,
)
from ..models.document import Document
from ..models.evidence import EvidenceBundle, EvidenceStatus
from ..protocols.conversation_store import ConversationStoreProtocol
from ..protocols.llm import LLMProtocol
from .assembler import ConversationAssembler
from .fusion import ContextFusionEngine
from .ingest_service import IngestService
from .retriever import Retriever
from .retry import RetryPolicy
from .thread_service import ThreadService
from .web_search_service import WebSearchService

logger = logging.getLogger(__name__)


class Orchestrator:
    """Coordinates retrieval, web search, fusion, the LLM and the store.

    Request lifecycle:
        resolve thread → persist user message → retrieve (corpus ‖ web)
        → fuse → assemble → invoke model → persist assistant message
        → recount thread messages → respond
    """

    def __init__(
        self,
        llm: LLMProtocol,
        store: ConversationStoreProtocol,
        retriever: Retriever,
        web_search: WebSearchService,
        threads: ThreadService,
        ingest: IngestService,
        fusion: Optional[ContextFusionEngine] = None,
        assembler: Optional[ConversationAssembler] = None,
        retrieval_k: int = 5,
        retry: Optional[RetryPolicy] = None,
    ):
        """Initialize orchestrator.

        Args:
            llm: LLM client.
            store: Conversation store.
            retriever: Corpus retriever.
            web_search: Web search service.
            threads: Thread service.
            ingest: Ingest service.
            fusion: Fusion engine.
            assembler: Conversation assembler.
            retrieval_k: Number of chunks requested per query.
            retry: Retry policy for model calls.
        """
        self._llm = llm
        self._store = store
        self._retriever = retriever
        self._web_search = web_search
        self._threads = threads
        self._ingest = ingest
        self._fusion = fusion or ContextFusionEngine()
        self._assembler = assembler or ConversationAssembler()
        self._retrieval_k = retrieval_k
        self._retry = retry or RetryPolicy()

    async def submit(self, request: ChatRequest) -> ChatResponse:
        """Answer one user query.

        Raises:
            ValidationError: Empty or non-string message.
            ThreadNotFound: Unknown ``thread_id``.
            ModelInvocationFailed: The LLM call failed; nothing is persisted
                for the assistant.
            ConfigurationMissing: The LLM has no credentials.
        """
        message = request.message
        if not message or not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required and must be a string")

        thread = self._threads.resolve(request.thread_id, message)
        self._store.append_message(thread.id, USER, message, sources=[], web_search_used=False)

        doc_bundle, web_bundle = await self._gather_evidence(
            message, request.document_id, request.enable_web_search
        )

        fused = self._fusion.fuse(doc_bundle, web_bundle, message)
        history = self._threads.recent_history(thread.id, self._assembler.history_limit)
        messages = self._assembler.assemble(fused, history, message)

        try:
            answer = await self._invoke(messages)
        finally:
            # Keep the count honest even when no assistant message follows.
            self._threads.refresh_message_count(thread.id)

        web_search_used = web_bundle.succeeded
        # Persisted sources are document ids; URLs only go back in the response.
        document_ids = self._source_document_ids(doc_bundle)

        assistant = self._store.append_message(
            thread.id,
            ASSISTANT,
            answer,
            sources=document_ids,
            web_search_used=web_search_used,
        )
        self._threads.refresh_message_count(thread.id)

        sources = list(doc_bundle.sources)
        if web_search_used:
            sources += web_bundle.sources

        logger.info(
            f"Answered '{message[:50]}...' in thread {thread.id}: "
            f"{len(doc_bundle.items)} chunks, web={web_search_used}"
        )

        return ChatResponse(
            message=answer,
            thread_id=thread.id,
            sources=sources,
            chunk_count=len(doc_bundle.items),
            web_search_used=web_search_used,
            message_id=assistant.id,
        )

    async def _gather_evidence(
        self,
        query: str,
        document_id: Optional[str],
        enable_web_search: bool,
    ) -> tuple[EvidenceBundle, EvidenceBundle]:
        """Run corpus retrieval and web search concurrently."""
        corpus = asyncio.to_thread(
            self._retriever.retrieve, query, self._retrieval_k, document_id
        )
        if enable_web_search:
            web = self._web_search.search(query)
        else:
            web = _disabled_web_search()

        doc_result, web_result = await asyncio.gather(corpus, web, return_exceptions=True)

        if isinstance(doc_result, BaseException):
            logger.error(f"Corpus retrieval crashed: {doc_result}")
            doc_result = EvidenceBundle.empty(
                "",
                status=EvidenceStatus.FAILED,
                error=RetrievalDegraded.wrap(doc_result),
            )
        if isinstance(web_result, BaseException):
            logger.error(f"Web search crashed: {web_result}")
            web_result = EvidenceBundle.empty(
                "",
                status=EvidenceStatus.FAILED,
                error=WebSearchDegraded.wrap(web_result),
            )

        return doc_result, web_result

    async def _invoke(self, messages: list[dict]) -> str:
        try:
            answer = await self._retry.acall(
                lambda: self._llm.invoke(messages), name="llm.invoke"
            )
        except ConfigurationMissing:
            raise
        except Exception as e:
            logger.error(f"LLM invocation failed: {e}")
            raise ModelInvocationFailed(f"Failed to generate response: {e}") from e

        if not answer or not answer.strip():
            raise ModelInvocationFailed("Failed to generate response: empty reply")
        return answer

    def _source_document_ids(self, doc_bundle: EvidenceBundle) -> list[str]:
        if not doc_bundle.sources:
            return []
        documents = self._store.find_documents_by_filenames(doc_bundle.sources)
        return [d.id for d in documents]

    # Pass-throughs for the outer surface

    def upload_document(
        self, data: bytes, filename: str, declared_type: Optional[str] = None
    ) -> UploadResult:
        return self._ingest.upload(data, filename, declared_type)

    async def upload_document_async(
        self, data: bytes, filename: str, declared_type: Optional[str] = None
    ) -> UploadResult:
        """Upload from async callers; embedding and index writes run in a worker thread."""
        return await asyncio.to_thread(self._ingest.upload, data, filename, declared_type)

    def list_documents(self) -> list[Document]:
        return self._ingest.list_documents()

    def indexed_chunk_count(self) -> int:
        return self._ingest.indexed_chunk_count()

    def delete_document(self, document_id: str) -> Document:
        return self._ingest.delete_document(document_id)

    def create_thread(self, title: str) -> Thread:
        return self._threads.create(title)

    def rename_thread(self, thread_id: str, title: str) -> Thread:
        return self._threads.rename(thread_id, title)

    def delete_thread(self, thread_id: str) -> int:
        return self._threads.delete(thread_id)

    def list_threads(self, skip: int = 0, limit: int = 10) -> Page[Thread]:
        return self._threads.list_threads(skip=skip, limit=limit)

    def get_thread(self, thread_id: str, skip: int = 0, limit: int = 10) -> ThreadDetail:
        return self._threads.detail(thread_id, skip=skip, limit=limit)


async def _disabled_web_search() -> EvidenceBundle:
    return EvidenceBundle.empty("", status=EvidenceStatus.DISABLED)
