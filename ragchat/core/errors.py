"""Error taxonomy for the chat pipeline.

Each error carries a ``status_code`` so an outer HTTP layer can map it
without knowing the pipeline internals:

- 400: the caller must fix the request (validation, unsupported file).
- 404: the referenced thread or document does not exist.
- 422: the uploaded document could not be turned into chunks.
- 502: an external capability failed in a way that is fatal for the request.
- 500: configuration problems.

``RetrievalDegraded`` and ``WebSearchDegraded`` are never raised out of the
evidence services; they are stored on the returned bundle's ``error`` with
the adapter exception as ``__cause__``.
"""


class RagChatError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @classmethod
    def wrap(cls, cause: Exception) -> "RagChatError":
        """Build this error from an adapter exception, keeping it as the cause."""
        error = cls(str(cause))
        error.__cause__ = cause
        return error


class ValidationError(RagChatError):
    """Missing or malformed required field."""

    status_code = 400


class ThreadNotFound(RagChatError):
    status_code = 404

    def __init__(self, thread_id: str):
        super().__init__(f"Thread not found: {thread_id}")
        self.thread_id = thread_id


class DocumentNotFound(RagChatError):
    status_code = 404

    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class IngestionError(RagChatError):
    """Document was rejected before it became available."""

    status_code = 422


class UnsupportedFileType(IngestionError):
    status_code = 400

    def __init__(self, file_type: str):
        super().__init__(
            f"Invalid file type '{file_type}'. Supported: PDF, TXT, DOCX, MD"
        )
        self.file_type = file_type


class IngestionEmpty(IngestionError):
    def __init__(self, filename: str):
        super().__init__(f"Document is empty or unparseable: {filename}")
        self.filename = filename


class IngestionNoChunks(IngestionError):
    def __init__(self, filename: str):
        super().__init__(f"No chunks created from document: {filename}")
        self.filename = filename


class IngestionFailed(IngestionError):
    """Indexing stopped before every chunk was confirmed."""

    status_code = 502


class RetrievalDegraded(RagChatError):
    status_code = 502


class WebSearchDegraded(RagChatError):
    status_code = 502


class ModelInvocationFailed(RagChatError):
    status_code = 502


class ConfigurationMissing(RagChatError):
    def __init__(self, setting: str):
        super().__init__(f"Required setting is not configured: {setting}")
        self.setting = setting
