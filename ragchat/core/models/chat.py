"""Chat domain models."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

USER = "user"
ASSISTANT = "assistant"
SYSTEM = "system"

HISTORY_ROLES = (USER, ASSISTANT)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Thread:
    """Persisted conversation."""
    id: str
    title: str
    message_count: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Message:
    """Persisted message. Append-only."""
    id: str
    thread_id: str
    role: str  # "user" | "assistant"
    content: str
    # Document ids only; web URLs are returned in ChatResponse.sources, not persisted.
    sources: list[str] = field(default_factory=list)
    web_search_used: bool = False
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class ChatMessage:
    """Role-tagged message sent to the LLM."""
    role: str  # "user" | "assistant" | "system"
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatHistory:
    """Chat history with limit."""
    messages: list[ChatMessage] = field(default_factory=list)
    max_messages: int = 5

    def add(self, message: ChatMessage) -> None:
        """Add message to history, dropping anything but user/assistant."""
        if message.role not in HISTORY_ROLES:
            return
        self.messages.append(message)
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]

    def to_list(self) -> list[dict]:
        """Convert to list of dicts for LLM."""
        return [m.to_dict() for m in self.messages]


@dataclass
class ChatRequest:
    message: str
    thread_id: Optional[str] = None
    document_id: Optional[str] = None
    enable_web_search: bool = True


@dataclass
class ChatResponse:
    message: str
    thread_id: str
    sources: list[str]
    chunk_count: int
    web_search_used: bool
    message_id: str


@dataclass
class UploadResult:
    document_id: str
    filename: str
    chunk_count: int


@dataclass
class Page(Generic[T]):
    """One page of a paginated listing."""
    items: list[T]
    total: int
    skip: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.skip + self.limit < self.total


@dataclass
class ThreadDetail:
    """Thread with one page of its messages."""
    thread: Thread
    messages: Page[Message]
    # message id -> filenames of its source documents
    source_documents: dict[str, list[str]] = field(default_factory=dict)
