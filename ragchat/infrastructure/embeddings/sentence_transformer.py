import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Local embeddings for chunks and queries.

    Vectors are L2-normalized so the index's cosine distance stays in 0..2.
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        batch_size: int = 32,
    ):
        self._model_name = model_name
        self._batch_size = batch_size

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        return SentenceTransformer(self._model_name)

    def warmup(self) -> None:
        _ = self.model
        logger.info(
            f"Embedding model warmed up ({self.model.get_sentence_embedding_dimension()} dims)"
        )

    def encode(self, texts: str | list[str]) -> np.ndarray:
        if isinstance(texts, list) and not texts:
            dims = self.model.get_sentence_embedding_dimension()
            return np.empty((0, dims), dtype=np.float32)

        return self.model.encode(
            texts,
            batch_size=self._batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
