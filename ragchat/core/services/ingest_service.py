"""Ingest service - document upload, chunking and indexing."""

import logging
import uuid
from pathlib import Path
from typing import Optional

from ..errors import (
    DocumentNotFound,
    IngestionEmpty,
    IngestionFailed,
    IngestionNoChunks,
    UnsupportedFileType,
    ValidationError,
)
from ..models.chat import UploadResult
from ..models.document import Chunk, Document, DocumentType
from ..protocols.conversation_store import ConversationStoreProtocol
from ..protocols.extractor import ExtractorProtocol
from ..protocols.vector_store import VectorStoreProtocol
from .chunker import TextChunker
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

_MIME_HINTS = (
    ("pdf", DocumentType.PDF),
    ("wordprocessingml", DocumentType.DOCX),
    ("markdown", DocumentType.MD),
    ("text/plain", DocumentType.TXT),
)


def detect_file_type(filename: str, declared_type: Optional[str] = None) -> DocumentType:
    """Resolve the document type from extension, declared type or MIME type.

    Raises:
        UnsupportedFileType: If nothing maps to a supported type.
    """
    extension = Path(filename).suffix.lower().lstrip(".")
    declared = (declared_type or "").lower().strip()

    for candidate in (extension, declared):
        if not candidate:
            continue
        if candidate == "markdown":
            return DocumentType.MD
        try:
            return DocumentType(candidate)
        except ValueError:
            pass

    for hint, file_type in _MIME_HINTS:
        if hint in declared:
            return file_type

    raise UnsupportedFileType(extension or declared or "unknown")


class IngestService:
    """Service for indexing uploaded documents into the vector store."""

    def __init__(
        self,
        vector_store: VectorStoreProtocol,
        store: ConversationStoreProtocol,
        extractor: ExtractorProtocol,
        chunker: TextChunker,
        batch_size: int = 50,
        retry: Optional[RetryPolicy] = None,
    ):
        """Initialize ingest service.

        Args:
            vector_store: Vector store.
            store: Store holding document records.
            extractor: File-to-text extractor.
            chunker: Text chunker.
            batch_size: Batch size for indexing.
            retry: Retry policy for index writes.
        """
        self._vector_store = vector_store
        self._store = store
        self._extractor = extractor
        self._chunker = chunker
        self._batch_size = batch_size
        self._retry = retry or RetryPolicy()

    def upload(
        self,
        data: bytes,
        filename: str,
        declared_type: Optional[str] = None,
    ) -> UploadResult:
        """Ingest an uploaded file.

        The document record is written only after every chunk is indexed.

        Args:
            data: Raw file bytes.
            filename: Original filename.
            declared_type: Declared type or MIME type.

        Returns:
            Upload result with document ID and chunk count.

        Raises:
            ValidationError: Missing filename or file.
            UnsupportedFileType: Type outside pdf/txt/docx/md.
            IngestionEmpty: No text could be extracted.
            IngestionNoChunks: Chunker produced nothing.
            IngestionFailed: Indexing stopped part way.
        """
        if not filename or not filename.strip():
            raise ValidationError("No file provided")
        if data is None:
            raise ValidationError("No file provided")

        file_type = detect_file_type(filename, declared_type)

        if not data:
            raise IngestionEmpty(filename)

        try:
            text = self._extractor.extract(data, file_type)
        except Exception as e:
            logger.error(f"Failed to extract {filename}: {e}")
            raise IngestionEmpty(filename) from e

        if not text or not text.strip():
            raise IngestionEmpty(filename)

        document_id = str(uuid.uuid4())
        chunks = self._chunker.chunk(
            document_id,
            text,
            metadata={"filename": filename, "fileType": file_type.value},
        )
        if not chunks:
            raise IngestionNoChunks(filename)

        self._index(document_id, filename, chunks)

        document = self._store.add_document(
            Document(
                id=document_id,
                filename=filename,
                file_type=file_type,
                chunk_count=len(chunks),
                vector_store_id=document_id,
            )
        )
        logger.info(f"Ingested {filename}: {len(chunks)} chunks (id={document.id})")

        return UploadResult(
            document_id=document.id, filename=filename, chunk_count=len(chunks)
        )

    def ingest_file(self, file_path: str | Path) -> UploadResult:
        """Ingest a file from disk.

        Raises:
            ValidationError: The path is missing or unreadable.
        """
        path = Path(file_path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ValidationError(f"Cannot read file {path}: {e.strerror or e}") from e
        return self.upload(data, path.name)

    def _index(self, document_id: str, filename: str, chunks: list[Chunk]) -> None:
        total_indexed = 0
        try:
            for i in range(0, len(chunks), self._batch_size):
                batch = chunks[i : i + self._batch_size]
                self._retry.call(
                    lambda: self._vector_store.add(
                        ids=[c.id for c in batch],
                        texts=[c.content for c in batch],
                        metadatas=[c.metadata for c in batch],
                    ),
                    name="index.add",
                )
                total_indexed += len(batch)
                logger.info(f"Indexed batch: {total_indexed}/{len(chunks)}")
        except Exception as e:
            logger.error(
                f"Indexing {filename} failed after {total_indexed}/{len(chunks)} chunks: {e}"
            )
            self._rollback(document_id)
            raise IngestionFailed(
                f"Failed to index {filename}: {total_indexed}/{len(chunks)} chunks stored"
            ) from e

    def _rollback(self, document_id: str) -> None:
        try:
            self._vector_store.delete(where={"documentId": document_id})
        except Exception as e:
            logger.error(f"Rollback of {document_id} failed: {e}")

    def list_documents(self) -> list[Document]:
        return self._store.list_documents()

    def indexed_chunk_count(self) -> int:
        """Number of chunks currently held by the index."""
        return self._vector_store.count()

    def get_document(self, document_id: str) -> Document:
        document = self._store.get_document(document_id)
        if document is None:
            raise DocumentNotFound(document_id)
        return document

    def delete_document(self, document_id: str) -> Document:
        """Delete a document record and all of its indexed chunks."""
        document = self.get_document(document_id)
        self._retry.call(
            lambda: self._vector_store.delete(where={"documentId": document.vector_store_id}),
            name="index.delete",
        )
        self._store.delete_document(document_id)
        logger.info(f"Deleted document {document.filename} ({document_id})")
        return document
