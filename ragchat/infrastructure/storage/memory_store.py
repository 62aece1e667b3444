"""In-memory conversation store."""

import itertools
import threading
import uuid
from dataclasses import replace
from typing import Optional

from ragchat.core.models.chat import Message, Thread, utcnow
from ragchat.core.models.document import Document


class InMemoryConversationStore:
    """Process-local implementation of ConversationStoreProtocol."""

    def __init__(self) -> None:
        self._threads: dict[str, Thread] = {}
        self._messages: dict[str, list[Message]] = {}
        self._documents: dict[str, Document] = {}
        # Tie-breaker for messages sharing a timestamp.
        self._sequence = itertools.count()
        self._order: dict[str, int] = {}
        self._lock = threading.Lock()

    # Threads

    def create_thread(self, title: str) -> Thread:
        thread = Thread(id=str(uuid.uuid4()), title=title)
        with self._lock:
            self._threads[thread.id] = thread
            self._messages[thread.id] = []
        return replace(thread)

    def get_thread(self, thread_id: str) -> Optional[Thread]:
        thread = self._threads.get(thread_id)
        return replace(thread) if thread else None

    def update_thread_title(self, thread_id: str, title: str) -> Optional[Thread]:
        with self._lock:
            thread = self._threads.get(thread_id)
            if thread is None:
                return None
            thread.title = title
            thread.updated_at = utcnow()
            return replace(thread)

    def set_message_count(self, thread_id: str, count: int) -> Optional[Thread]:
        with self._lock:
            thread = self._threads.get(thread_id)
            if thread is None:
                return None
            thread.message_count = count
            thread.updated_at = utcnow()
            return replace(thread)

    def delete_thread(self, thread_id: str) -> int:
        with self._lock:
            messages = self._messages.pop(thread_id, [])
            for message in messages:
                self._order.pop(message.id, None)
            self._threads.pop(thread_id, None)
            return len(messages)

    def count_threads(self) -> int:
        return len(self._threads)

    def list_threads(self, skip: int = 0, limit: int = 10) -> list[Thread]:
        threads = sorted(self._threads.values(), key=lambda t: t.updated_at, reverse=True)
        return [replace(t) for t in threads[skip : skip + limit]]

    # Messages

    def append_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        sources: Optional[list[str]] = None,
        web_search_used: bool = False,
    ) -> Message:
        message = Message(
            id=str(uuid.uuid4()),
            thread_id=thread_id,
            role=role,
            content=content,
            sources=list(sources or []),
            web_search_used=web_search_used,
        )
        with self._lock:
            if thread_id not in self._threads:
                raise KeyError(f"Unknown thread: {thread_id}")
            self._messages[thread_id].append(message)
            self._order[message.id] = next(self._sequence)
        return message

    def count_messages(self, thread_id: str) -> int:
        return len(self._messages.get(thread_id, []))

    def list_messages(
        self,
        thread_id: str,
        skip: int = 0,
        limit: int = 10,
        newest_first: bool = False,
    ) -> list[Message]:
        messages = sorted(
            self._messages.get(thread_id, []),
            key=lambda m: (m.timestamp, self._order.get(m.id, 0)),
            reverse=newest_first,
        )
        return messages[skip : skip + limit]

    # Documents

    def add_document(self, document: Document) -> Document:
        with self._lock:
            self._documents[document.id] = document
        return document

    def get_document(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    def find_documents_by_filenames(self, filenames: list[str]) -> list[Document]:
        wanted = set(filenames)
        return [d for d in self._documents.values() if d.filename in wanted]

    def get_documents(self, document_ids: list[str]) -> list[Document]:
        return [self._documents[i] for i in document_ids if i in self._documents]

    def list_documents(self) -> list[Document]:
        return sorted(self._documents.values(), key=lambda d: d.uploaded_at, reverse=True)

    def delete_document(self, document_id: str) -> bool:
        with self._lock:
            return self._documents.pop(document_id, None) is not None
