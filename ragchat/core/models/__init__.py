"""Domain models."""
from .document import Chunk, Document, DocumentType, IndexHit
from .evidence import EvidenceBundle, EvidenceItem, EvidenceStatus
from .chat import (
    ChatHistory,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Message,
    Page,
    Thread,
    ThreadDetail,
    UploadResult,
)

__all__ = [
    "Chunk",
    "Document",
    "DocumentType",
    "IndexHit",
    "EvidenceBundle",
    "EvidenceItem",
    "EvidenceStatus",
    "ChatHistory",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Message",
    "Page",
    "Thread",
    "ThreadDetail",
    "UploadResult",
]
