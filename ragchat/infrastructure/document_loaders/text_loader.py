from ragchat.core.models.document import DocumentType


class TextLoader:

    TYPES = {DocumentType.TXT, DocumentType.MD}

    def supports(self, file_type: DocumentType) -> bool:
        return file_type in self.TYPES

    def load(self, data: bytes) -> str:
        return data.decode("utf-8-sig", errors="replace")
