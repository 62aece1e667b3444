import logging
from typing import Optional

import requests

from ragchat.core.models.document import IndexHit, Metadata, ensure_scalar_metadata
from ragchat.core.protocols.embedder import EmbedderProtocol

logger = logging.getLogger(__name__)


class ChromaVectorStore:
    """Vector store using ChromaDB HTTP API with local embeddings."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "documents",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 30.0,
    ):
        """Initialize ChromaDB client.

        Args:
            embedder: Embedding service for texts and queries.
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            tenant: Tenant name.
            database: Database name.
            timeout: Per-request timeout in seconds.
        """
        self._embedder = embedder
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._collection_id: Optional[str] = None
        self._timeout = timeout

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _ensure_collection(self) -> str:
        """Get or create collection, return ID."""
        if self._collection_id:
            return self._collection_id

        resp = requests.get(self._collections_url, timeout=self._timeout)
        if resp.status_code == 200:
            for col in resp.json():
                if col["name"] == self._collection_name:
                    self._collection_id = col["id"]
                    return self._collection_id

        resp = requests.post(
            self._collections_url,
            json={"name": self._collection_name, "metadata": {"hnsw:space": "cosine"}},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        self._collection_id = resp.json()["id"]
        logger.info(f"Created collection: {self._collection_name}")
        return self._collection_id

    def add(
        self,
        ids: list[str],
        texts: list[str],
        metadatas: list[Metadata],
    ) -> None:
        """Embed and add texts to collection."""
        if not (len(ids) == len(texts) == len(metadatas)):
            raise ValueError("ids, texts and metadatas must have the same length")
        for metadata in metadatas:
            ensure_scalar_metadata(metadata)
        if not ids:
            return

        embeddings = self._embedder.encode(texts).tolist()

        col_id = self._ensure_collection()
        resp = requests.post(
            f"{self._collections_url}/{col_id}/add",
            json={
                "ids": ids,
                "embeddings": embeddings,
                "documents": texts,
                "metadatas": metadatas,
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()

    def query(
        self,
        query_text: str,
        k: int = 5,
        where: Optional[Metadata] = None,
    ) -> list[IndexHit]:
        """Search by text."""
        query_embedding = self._embedder.encode(query_text).tolist()

        payload = {
            "query_embeddings": [query_embedding],
            "n_results": k,
            "include": ["documents", "metadatas", "distances"],
        }
        if where:
            payload["where"] = _to_where(where)

        col_id = self._ensure_collection()
        resp = requests.post(
            f"{self._collections_url}/{col_id}/query",
            json=payload,
            timeout=self._timeout,
        )
        resp.raise_for_status()

        data = resp.json()
        results = []

        if data.get("ids") and data["ids"][0]:
            for i in range(len(data["ids"][0])):
                results.append(
                    IndexHit(
                        content=data["documents"][0][i] or "",
                        metadata=data["metadatas"][0][i] or {},
                        distance=float(data["distances"][0][i]),
                    )
                )

        return results

    def delete(self, where: Metadata) -> None:
        """Delete entries matching the metadata filter."""
        if not where:
            raise ValueError("Refusing to delete with an empty filter")

        col_id = self._ensure_collection()
        resp = requests.post(
            f"{self._collections_url}/{col_id}/delete",
            json={"where": _to_where(where)},
            timeout=self._timeout,
        )
        resp.raise_for_status()

    def count(self) -> int:
        """Get entry count."""
        col_id = self._ensure_collection()
        resp = requests.get(f"{self._collections_url}/{col_id}/count", timeout=self._timeout)
        return resp.json() if resp.status_code == 200 else 0


def _to_where(where: Metadata) -> dict:
    """Chroma accepts a single field directly, several need ``$and``."""
    ensure_scalar_metadata(where)
    clauses = [{key: {"$eq": value}} for key, value in where.items()]
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}
