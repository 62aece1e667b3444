from io import BytesIO

from docx import Document

from ragchat.core.models.document import DocumentType


class DocxLoader:

    def supports(self, file_type: DocumentType) -> bool:
        return file_type is DocumentType.DOCX

    def load(self, data: bytes) -> str:
        doc = Document(BytesIO(data))
        paragraphs = [p.text.strip() for p in doc.paragraphs if p.text.strip()]
        return "\n\n".join(paragraphs)
