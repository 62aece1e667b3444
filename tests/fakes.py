"""In-process fakes for every external capability."""

from typing import Callable, Optional

import numpy as np

from ragchat.core.models.document import IndexHit, ensure_scalar_metadata
from ragchat.core.protocols.web_search import WebResult, WebSearchResponse


class FakeEmbedder:
    def __init__(self, dims: int = 4):
        self.dims = dims
        self.calls: list = []

    def encode(self, texts):
        self.calls.append(texts)
        if isinstance(texts, str):
            return np.full(self.dims, 0.5)
        return np.full((len(texts), self.dims), 0.5)

    def warmup(self) -> None:
        pass


class FakeVectorStore:
    """Keeps entries in a list; every entry is returned at ``distance``."""

    def __init__(self, distance: float = 0.4):
        self.distance = distance
        self.entries: list[tuple[str, str, dict]] = []
        self.queries: list[dict] = []
        self.deletes: list[dict] = []
        self.add_calls = 0
        self.fail_query: Optional[Exception] = None
        self.fail_add_after: Optional[int] = None
        self.distance_fn: Optional[Callable[[str, dict], float]] = None

    def add(self, ids, texts, metadatas) -> None:
        if self.fail_add_after is not None and self.add_calls >= self.fail_add_after:
            raise ConnectionError("index unavailable")
        self.add_calls += 1
        for metadata in metadatas:
            ensure_scalar_metadata(metadata)
        self.entries.extend(zip(ids, texts, metadatas))

    def query(self, query_text, k=5, where=None):
        self.queries.append({"query_text": query_text, "k": k, "where": where})
        if self.fail_query is not None:
            raise self.fail_query
        hits = []
        for _, text, metadata in self.entries:
            if where and any(metadata.get(key) != value for key, value in where.items()):
                continue
            distance = self.distance_fn(text, metadata) if self.distance_fn else self.distance
            hits.append(IndexHit(content=text, metadata=dict(metadata), distance=distance))
        hits.sort(key=lambda h: h.distance)
        return hits[:k]

    def delete(self, where) -> None:
        self.deletes.append(dict(where))
        self.entries = [
            e for e in self.entries
            if any(e[2].get(key) != value for key, value in where.items())
        ]

    def count(self) -> int:
        return len(self.entries)


class FakeLLM:
    def __init__(self, reply: str = "Here is the answer.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[dict]] = []

    async def invoke(self, messages: list[dict]) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeWebSearch:
    def __init__(
        self,
        results: Optional[list[WebResult]] = None,
        answer: Optional[str] = None,
        configured: bool = True,
        error: Optional[Exception] = None,
    ):
        self.results = results or []
        self.answer = answer
        self.configured = configured
        self.error = error
        self.calls: list[tuple[str, int]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def search(self, query: str, max_results: int = 3) -> WebSearchResponse:
        self.calls.append((query, max_results))
        if self.error is not None:
            raise self.error
        return WebSearchResponse(results=self.results[:max_results], answer=self.answer)


class FakeExtractor:
    """Decodes bytes as UTF-8 regardless of declared type."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error

    def extract(self, data: bytes, file_type) -> str:
        if self.error is not None:
            raise self.error
        return data.decode("utf-8")
