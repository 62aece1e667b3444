import logging

from ragchat.core.errors import UnsupportedFileType
from ragchat.core.models.document import DocumentType

from .pdf_loader import PDFLoader
from .docx_loader import DocxLoader
from .text_loader import TextLoader

logger = logging.getLogger(__name__)


class CompositeLoader:

    def __init__(self):
        self._loaders = [
            PDFLoader(),
            DocxLoader(),
            TextLoader(),
        ]

    def supports(self, file_type: DocumentType) -> bool:
        return any(loader.supports(file_type) for loader in self._loaders)

    def extract(self, data: bytes, file_type: DocumentType) -> str:
        for loader in self._loaders:
            if loader.supports(file_type):
                text = loader.load(data)
                logger.debug(f"Extracted {len(text)} chars from {file_type.value}")
                return text
        raise UnsupportedFileType(file_type.value)
