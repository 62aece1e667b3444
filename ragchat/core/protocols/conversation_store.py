"""Conversation store protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.chat import Message, Thread
from ..models.document import Document


@runtime_checkable
class ConversationStoreProtocol(Protocol):
    """Durable storage for threads, messages and document records.

    Getters return None for missing rows; raising not-found errors is the
    caller's job.
    """

    def create_thread(self, title: str) -> Thread:
        ...

    def get_thread(self, thread_id: str) -> Optional[Thread]:
        ...

    def update_thread_title(self, thread_id: str, title: str) -> Optional[Thread]:
        ...

    def set_message_count(self, thread_id: str, count: int) -> Optional[Thread]:
        """Store the message count and bump ``updated_at``."""
        ...

    def delete_thread(self, thread_id: str) -> int:
        """Delete a thread and its messages. Returns deleted message count."""
        ...

    def count_threads(self) -> int:
        ...

    def list_threads(self, skip: int = 0, limit: int = 10) -> list[Thread]:
        """Threads ordered by most recently updated first."""
        ...

    def append_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        sources: Optional[list[str]] = None,
        web_search_used: bool = False,
    ) -> Message:
        ...

    def count_messages(self, thread_id: str) -> int:
        ...

    def list_messages(
        self,
        thread_id: str,
        skip: int = 0,
        limit: int = 10,
        newest_first: bool = False,
    ) -> list[Message]:
        """Messages in chronological order, or reverse when ``newest_first``."""
        ...

    def add_document(self, document: Document) -> Document:
        ...

    def get_document(self, document_id: str) -> Optional[Document]:
        ...

    def find_documents_by_filenames(self, filenames: list[str]) -> list[Document]:
        ...

    def get_documents(self, document_ids: list[str]) -> list[Document]:
        ...

    def list_documents(self) -> list[Document]:
        """Documents ordered newest first."""
        ...

    def delete_document(self, document_id: str) -> bool:
        ...
