"""Core business services."""
from .assembler import ConversationAssembler
from .chunker import TextChunker, split_text
from .fusion import ContextFusionEngine, FusionBranch
from .ingest_service import IngestService, detect_file_type
from .orchestrator import Orchestrator
from .retriever import Retriever
from .retry import RetryPolicy
from .thread_service import ThreadService
from .web_search_service import WebSearchService

__all__ = [
    "ConversationAssembler",
    "TextChunker",
    "split_text",
    "ContextFusionEngine",
    "FusionBranch",
    "IngestService",
    "detect_file_type",
    "Orchestrator",
    "Retriever",
    "RetryPolicy",
    "ThreadService",
    "WebSearchService",
]
