from io import BytesIO

from pypdf import PdfReader

from ragchat.core.models.document import DocumentType


class PDFLoader:

    def supports(self, file_type: DocumentType) -> bool:
        return file_type is DocumentType.PDF

    def load(self, data: bytes) -> str:
        reader = PdfReader(BytesIO(data))
        text_parts = []
        for page in reader.pages:
            text = page.extract_text()
            if text:
                text_parts.append(text.strip())
        return "\n\n".join(text_parts)
