"""
Exact in-memory VectorStore backed by a numpy matrix.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np

from silicon_oracle.vector_store.base import Chunk, VectorStore, check_dimensions

logger = logging.getLogger(__name__)


class InMemoryVectorStore(VectorStore):
    def __init__(self, chunks: Sequence[Chunk]) -> None:
        self._chunks: Tuple[Chunk, ...] = tuple(chunks)
        self._dimension = check_dimensions(self._chunks)

        if self._chunks:
            matrix = np.asarray([chunk.vector for chunk in self._chunks], dtype=np.float64)
            norms = np.linalg.norm(matrix, axis=1, keepdims=True)
            # Zero vectors stay zero and score 0 against any query.
            self._normalized = np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)
        else:
            self._normalized = np.zeros((0, 0), dtype=np.float64)

        logger.info("InMemoryVectorStore initialised", extra={"chunks": len(self._chunks), "dimension": self._dimension})

    @classmethod
    def from_chunks(cls, chunks: Sequence[Chunk]) -> "InMemoryVectorStore":
        return cls(chunks)

    @property
    def size(self) -> int:
        return len(self._chunks)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        return self._chunks

    def search(self, query_vector: Sequence[float], top_k: int) -> List[Tuple[Chunk, float]]:
        if top_k <= 0 or not self._chunks:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        if query.shape != (self._dimension,):
            raise ValueError(f"Query dimension {query.size} does not match index dimension {self._dimension}")

        norm = np.linalg.norm(query)
        if norm == 0:
            scores = np.zeros(len(self._chunks), dtype=np.float64)
        else:
            scores = self._normalized @ (query / norm)

        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [(self._chunks[i], float(scores[i])) for i in order]


__all__ = ["InMemoryVectorStore"]
