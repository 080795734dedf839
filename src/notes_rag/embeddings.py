"""
Embedding clients.

`EmbeddingClient.embed` owns the contract checks shared by every backend:
input validation, positional alignment and a fixed dimensionality that is
established by the first successful call. Backends only implement `_embed`.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from sentence_transformers import SentenceTransformer

from .errors import EmbeddingFailure, ValidationFailure
from .models import EmbeddingVector

logger = logging.getLogger(__name__)


def _as_floats(vector: Sequence[float]) -> List[float]:
    if isinstance(vector, (str, bytes)):
        raise TypeError(f"expected a sequence of numbers, got {type(vector).__name__}")
    return [float(x) for x in vector]


class EmbeddingClient(ABC):
    def __init__(self) -> None:
        self._dimension: Optional[int] = None

    @property
    def dimension(self) -> Optional[int]:
        """Vector size fixed by the first successful call, or None before it."""
        return self._dimension

    async def embed(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        if isinstance(texts, str) or not texts:
            raise ValidationFailure("embed() needs a non-empty sequence of texts")
        if any(not isinstance(t, str) or not t for t in texts):
            raise ValidationFailure("embed() received an empty text")

        try:
            vectors = await self._embed(list(texts))
        except EmbeddingFailure:
            raise
        except Exception as exc:
            raise EmbeddingFailure(f"Embedding model call failed: {exc}") from exc

        try:
            rows = [_as_floats(vector) for vector in vectors]
        except (TypeError, ValueError) as exc:
            raise EmbeddingFailure(f"Embedding model returned malformed vectors: {exc}") from exc

        if not rows:
            raise EmbeddingFailure("Embedding model returned no data")
        if len(rows) != len(texts):
            raise EmbeddingFailure(
                f"Embedding model returned {len(rows)} vectors for {len(texts)} texts"
            )

        expected = self._dimension if self._dimension is not None else len(rows[0])
        if expected == 0:
            raise EmbeddingFailure("Embedding model returned an empty vector")
        for row in rows:
            if len(row) != expected:
                raise EmbeddingFailure(
                    f"Embedding dimension mismatch: expected {expected}, got {len(row)}"
                )

        if self._dimension is None:
            self._dimension = expected
            logger.info("Embedding dimension established: %d", expected)

        return rows

    @abstractmethod
    async def _embed(self, texts: List[str]) -> Sequence[Sequence[float]]:
        """Call the underlying model; one vector per text, same order."""


class SentenceTransformerEmbeddingClient(EmbeddingClient):
    """Local sentence-transformers model, loaded on first use."""

    def __init__(self, model_name: str) -> None:
        super().__init__()
        self.model_name = model_name
        self._model: Optional[SentenceTransformer] = None

    @property
    def model(self) -> SentenceTransformer:
        if self._model is None:
            logger.info("Loading embedding model: %s", self.model_name)
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def _encode(self, texts: List[str]) -> List[List[float]]:
        embeddings = self.model.encode(texts, batch_size=32, convert_to_numpy=True)
        return embeddings.astype("float32").tolist()

    async def _embed(self, texts: List[str]) -> Sequence[Sequence[float]]:
        return await asyncio.to_thread(self._encode, texts)


__all__ = ["EmbeddingClient", "SentenceTransformerEmbeddingClient"]
