"""SQL implementation of the conversation store."""

import logging
import uuid
from typing import Optional

from sqlalchemy import Engine, create_engine, delete, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ragchat.core.models.chat import Message, Thread, utcnow
from ragchat.core.models.document import Document, DocumentType

from .models import Base, DocumentRow, MessageRow, ThreadRow

logger = logging.getLogger(__name__)


def create_engine_from_url(database_url: str) -> Engine:
    """Create SQLAlchemy engine; in-memory SQLite shares one connection."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


class SqlConversationStore:
    """SQLAlchemy implementation of ConversationStoreProtocol."""

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        if create_schema:
            Base.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlConversationStore":
        logger.info(f"Opening conversation store: {database_url.split('://')[0]}")
        return cls(create_engine_from_url(database_url))

    # Threads

    def create_thread(self, title: str) -> Thread:
        now = utcnow()
        row = ThreadRow(
            id=str(uuid.uuid4()), title=title, message_count=0, created_at=now, updated_at=now
        )
        with self._sessions() as session:
            session.add(row)
            session.commit()
            return _thread(row)

    def get_thread(self, thread_id: str) -> Optional[Thread]:
        with self._sessions() as session:
            row = session.get(ThreadRow, thread_id)
            return _thread(row) if row else None

    def update_thread_title(self, thread_id: str, title: str) -> Optional[Thread]:
        with self._sessions() as session:
            row = session.get(ThreadRow, thread_id)
            if row is None:
                return None
            row.title = title
            row.updated_at = utcnow()
            session.commit()
            return _thread(row)

    def set_message_count(self, thread_id: str, count: int) -> Optional[Thread]:
        with self._sessions() as session:
            row = session.get(ThreadRow, thread_id)
            if row is None:
                return None
            row.message_count = count
            row.updated_at = utcnow()
            session.commit()
            return _thread(row)

    def delete_thread(self, thread_id: str) -> int:
        with self._sessions() as session, session.begin():
            result = session.execute(delete(MessageRow).where(MessageRow.thread_id == thread_id))
            session.execute(delete(ThreadRow).where(ThreadRow.id == thread_id))
            return result.rowcount or 0

    def count_threads(self) -> int:
        with self._sessions() as session:
            return session.scalar(select(func.count()).select_from(ThreadRow)) or 0

    def list_threads(self, skip: int = 0, limit: int = 10) -> list[Thread]:
        stmt = (
            select(ThreadRow)
            .order_by(ThreadRow.updated_at.desc())
            .offset(skip)
            .limit(limit)
        )
        with self._sessions() as session:
            return [_thread(row) for row in session.scalars(stmt)]

    # Messages

    def append_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        sources: Optional[list[str]] = None,
        web_search_used: bool = False,
    ) -> Message:
        row = MessageRow(
            id=str(uuid.uuid4()),
            thread_id=thread_id,
            role=role,
            content=content,
            sources=list(sources or []),
            web_search_used=web_search_used,
            timestamp=utcnow(),
        )
        with self._sessions() as session:
            if session.get(ThreadRow, thread_id) is None:
                raise KeyError(f"Unknown thread: {thread_id}")
            session.add(row)
            session.commit()
            return _message(row)

    def count_messages(self, thread_id: str) -> int:
        stmt = select(func.count()).select_from(MessageRow).where(MessageRow.thread_id == thread_id)
        with self._sessions() as session:
            return session.scalar(stmt) or 0

    def list_messages(
        self,
        thread_id: str,
        skip: int = 0,
        limit: int = 10,
        newest_first: bool = False,
    ) -> list[Message]:
        order = (
            (MessageRow.timestamp.desc(), MessageRow.seq.desc())
            if newest_first
            else (MessageRow.timestamp.asc(), MessageRow.seq.asc())
        )
        stmt = (
            select(MessageRow)
            .where(MessageRow.thread_id == thread_id)
            .order_by(*order)
            .offset(skip)
            .limit(limit)
        )
        with self._sessions() as session:
            return [_message(row) for row in session.scalars(stmt)]

    # Documents

    def add_document(self, document: Document) -> Document:
        row = DocumentRow(
            id=document.id,
            filename=document.filename,
            file_type=document.file_type.value,
            chunk_count=document.chunk_count,
            vector_store_id=document.vector_store_id,
            uploaded_at=document.uploaded_at,
        )
        with self._sessions() as session:
            session.add(row)
            session.commit()
            return _document(row)

    def get_document(self, document_id: str) -> Optional[Document]:
        with self._sessions() as session:
            row = session.get(DocumentRow, document_id)
            return _document(row) if row else None

    def find_documents_by_filenames(self, filenames: list[str]) -> list[Document]:
        if not filenames:
            return []
        stmt = select(DocumentRow).where(DocumentRow.filename.in_(filenames))
        with self._sessions() as session:
            return [_document(row) for row in session.scalars(stmt)]

    def get_documents(self, document_ids: list[str]) -> list[Document]:
        if not document_ids:
            return []
        stmt = select(DocumentRow).where(DocumentRow.id.in_(document_ids))
        with self._sessions() as session:
            return [_document(row) for row in session.scalars(stmt)]

    def list_documents(self) -> list[Document]:
        stmt = select(DocumentRow).order_by(DocumentRow.uploaded_at.desc())
        with self._sessions() as session:
            return [_document(row) for row in session.scalars(stmt)]

    def delete_document(self, document_id: str) -> bool:
        with self._sessions() as session, session.begin():
            result = session.execute(delete(DocumentRow).where(DocumentRow.id == document_id))
            return bool(result.rowcount)


def _thread(row: ThreadRow) -> Thread:
    return Thread(
        id=row.id,
        title=row.title,
        message_count=row.message_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _message(row: MessageRow) -> Message:
    return Message(
        id=row.id,
        thread_id=row.thread_id,
        role=row.role,
        content=row.content,
        sources=list(row.sources or []),
        web_search_used=row.web_search_used,
        timestamp=row.timestamp,
    )


def _document(row: DocumentRow) -> Document:
    return Document(
        id=row.id,
        filename=row.filename,
        file_type=DocumentType(row.file_type),
        chunk_count=row.chunk_count,
        vector_store_id=row.vector_store_id,
        uploaded_at=row.uploaded_at,
    )
