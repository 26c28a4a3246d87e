"""Embedding generation with the OpenAI embeddings API."""

from typing import List, Sequence

from openai import OpenAI

from .errors import DimensionMismatchError
from .log import get_logger
from .retry import with_retries

logger = get_logger("embeddings")


class OpenAIEmbedder:
    """
    Embed texts with one fixed model so ingestion and query vectors stay
    comparable. Every returned vector is checked against `dimension`.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str,
        dimension: int,
        batch_size: int = 64,
        max_retries: int = 3,
    ) -> None:
        self._client = client
        self.model = model
        self.dimension = dimension
        self._batch_size = max(1, batch_size)
        self._max_retries = max_retries

    def _request_kwargs(self) -> dict:
        kwargs = {"model": self.model}
        # Only the text-embedding-3 family accepts a reduced output size
        if self.model.startswith("text-embedding-3"):
            kwargs["dimensions"] = self.dimension
        return kwargs

    def _embed_batch(self, inputs: List[str]) -> List[List[float]]:
        resp = with_retries(
            lambda: self._client.embeddings.create(input=inputs, **self._request_kwargs()),
            max_attempts=self._max_retries,
        )
        vectors = [d.embedding for d in resp.data]
        if len(vectors) != len(inputs):
            raise ValueError(f"Embedding response size mismatch: expected {len(inputs)}, got {len(vectors)}")
        for vector in vectors:
            self._check_dimension(vector)
        return vectors

    def _check_dimension(self, vector: Sequence[float]) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector), model=self.model)

    def embed_documents(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed texts in order, batching requests."""
        if not texts:
            return []

        logger.info(f"Embedding {len(texts)} texts: model={self.model}, batch_size={self._batch_size}")
        out: List[List[float]] = []
        for start in range(0, len(texts), self._batch_size):
            out.extend(self._embed_batch(list(texts[start : start + self._batch_size])))
        return out

    def embed_query(self, text: str) -> List[float]:
        return self._embed_batch([text])[0]
