"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .vector_store import VectorStoreProtocol
from .llm import LLMProtocol
from .web_search import WebResult, WebSearchProtocol, WebSearchResponse
from .extractor import ExtractorProtocol
from .conversation_store import ConversationStoreProtocol

__all__ = [
    "EmbedderProtocol",
    "VectorStoreProtocol",
    "LLMProtocol",
    "WebResult",
    "WebSearchProtocol",
    "WebSearchResponse",
    "ExtractorProtocol",
    "ConversationStoreProtocol",
]
