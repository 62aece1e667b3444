"""Thread service - conversation lifecycle on top of the conversation store."""

import logging
from typing import Optional

from ..errors import ThreadNotFound, ValidationError
from ..models.chat import Message, Page, Thread, ThreadDetail
from ..protocols.conversation_store import ConversationStoreProtocol

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200


def derive_title(message: str, max_length: int = 50) -> str:
    """Title for a new thread: the first ``max_length`` chars of the query."""
    if len(message) > max_length:
        return message[:max_length] + "..."
    return message


def _clean_title(title: Optional[str]) -> str:
    if not title or not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required and must be a string")
    return title.strip()[:MAX_TITLE_LENGTH]


def _check_page(skip: int, limit: int) -> None:
    if skip < 0:
        raise ValidationError(f"skip must be >= 0, got {skip}")
    if limit <= 0:
        raise ValidationError(f"limit must be > 0, got {limit}")


class ThreadService:
    """Thread CRUD with authoritative message counts."""

    def __init__(self, store: ConversationStoreProtocol, title_max_length: int = 50):
        self._store = store
        self._title_max_length = title_max_length

    def resolve(self, thread_id: Optional[str], first_message: str) -> Thread:
        """Return the existing thread or start a new one titled from the query.

        Raises:
            ThreadNotFound: If ``thread_id`` is given but unknown.
        """
        if thread_id:
            return self.get(thread_id)

        thread = self._store.create_thread(
            derive_title(first_message, self._title_max_length)
        )
        logger.info(f"Created thread {thread.id}: '{thread.title}'")
        return thread

    def get(self, thread_id: str) -> Thread:
        thread = self._store.get_thread(thread_id)
        if thread is None:
            raise ThreadNotFound(thread_id)
        return thread

    def create(self, title: str) -> Thread:
        return self._store.create_thread(_clean_title(title))

    def rename(self, thread_id: str, title: str) -> Thread:
        cleaned = _clean_title(title)
        thread = self._store.update_thread_title(thread_id, cleaned)
        if thread is None:
            raise ThreadNotFound(thread_id)
        return thread

    def delete(self, thread_id: str) -> int:
        """Delete a thread and all its messages.

        Returns:
            Number of deleted messages.
        """
        self.get(thread_id)
        deleted = self._store.delete_thread(thread_id)
        logger.info(f"Deleted thread {thread_id} with {deleted} messages")
        return deleted

    def refresh_message_count(self, thread_id: str) -> Thread:
        """Recount messages from the store rather than incrementing."""
        count = self._store.count_messages(thread_id)
        thread = self._store.set_message_count(thread_id, count)
        if thread is None:
            raise ThreadNotFound(thread_id)
        return thread

    def list_threads(self, skip: int = 0, limit: int = 10) -> Page[Thread]:
        _check_page(skip, limit)
        return Page(
            items=self._store.list_threads(skip=skip, limit=limit),
            total=self._store.count_threads(),
            skip=skip,
            limit=limit,
        )

    def list_messages(self, thread_id: str, skip: int = 0, limit: int = 10) -> Page[Message]:
        _check_page(skip, limit)
        self.get(thread_id)
        return Page(
            items=self._store.list_messages(thread_id, skip=skip, limit=limit),
            total=self._store.count_messages(thread_id),
            skip=skip,
            limit=limit,
        )

    def detail(self, thread_id: str, skip: int = 0, limit: int = 10) -> ThreadDetail:
        """Thread with a page of messages and their source filenames."""
        thread = self.get(thread_id)
        page = self.list_messages(thread_id, skip=skip, limit=limit)

        source_documents: dict[str, list[str]] = {}
        for message in page.items:
            documents = self._store.get_documents(message.sources) if message.sources else []
            source_documents[message.id] = [d.filename for d in documents]

        return ThreadDetail(thread=thread, messages=page, source_documents=source_documents)

    def recent_history(self, thread_id: str, limit: int) -> list[Message]:
        """Newest-first slice of the thread."""
        return self._store.list_messages(thread_id, skip=0, limit=limit, newest_first=True)
