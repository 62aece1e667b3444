from unittest.mock import MagicMock, patch

import numpy as np

from ragchat.infrastructure.embeddings.sentence_transformer import SentenceTransformerEmbedder


@patch("ragchat.infrastructure.embeddings.sentence_transformer.SentenceTransformer")
def test_model_loads_lazily_and_normalizes(model_cls) -> None:
    model = MagicMock()
    model.encode.return_value = np.ones((2, 3))
    model_cls.return_value = model
    embedder = SentenceTransformerEmbedder("test-model", batch_size=8)

    model_cls.assert_not_called()
    vectors = embedder.encode(["a", "b"])

    model_cls.assert_called_once_with("test-model")
    assert vectors.shape == (2, 3)
    kwargs = model.encode.call_args.kwargs
    assert kwargs["normalize_embeddings"] is True
    assert kwargs["batch_size"] == 8


@patch("ragchat.infrastructure.embeddings.sentence_transformer.SentenceTransformer")
def test_empty_batch_skips_the_model(model_cls) -> None:
    model_cls.return_value.get_sentence_embedding_dimension.return_value = 384

    vectors = SentenceTransformerEmbedder().encode([])

    assert vectors.shape == (0, 384)
    model_cls.return_value.encode.assert_not_called()
