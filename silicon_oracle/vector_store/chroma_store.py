"""
Chroma-based VectorStore implementation (HNSW, cosine space).
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Sequence, Tuple

import chromadb

from silicon_oracle.vector_store.base import Chunk, VectorStore, check_dimensions

CHROMA_COLLECTION_PREFIX = "lore"

logger = logging.getLogger(__name__)


class ChromaVectorStore(VectorStore):
    """
    Ephemeral Chroma collection holding one index snapshot.

    Each instance owns its own collection, so a rebuilt snapshot never
    shares state with the one it replaces.
    """

    def __init__(self, chunks: Sequence[Chunk], client=None, collection_prefix: str = CHROMA_COLLECTION_PREFIX) -> None:
        self._chunks: Tuple[Chunk, ...] = tuple(chunks)
        self._dimension = check_dimensions(self._chunks)
        self.client = client or chromadb.EphemeralClient()
        self.collection_name = f"{collection_prefix}_{uuid.uuid4().hex[:12]}"
        self.collection = self.client.get_or_create_collection(
            self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )

        if self._chunks:
            self.collection.add(
                ids=[self._chunk_id(i) for i in range(len(self._chunks))],
                embeddings=[list(chunk.vector) for chunk in self._chunks],
                metadatas=[{"source_label": chunk.source_label, "position": i} for i, chunk in enumerate(self._chunks)],
                documents=[chunk.text for chunk in self._chunks],
            )

        logger.info(
            "ChromaVectorStore initialised",
            extra={"collection": self.collection_name, "chunks": len(self._chunks)},
        )

    @classmethod
    def from_chunks(cls, chunks: Sequence[Chunk]) -> "ChromaVectorStore":
        return cls(chunks)

    @staticmethod
    def _chunk_id(position: int) -> str:
        return f"chunk_{position:06d}"

    @property
    def size(self) -> int:
        return len(self._chunks)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def search(self, query_vector: Sequence[float], top_k: int) -> List[Tuple[Chunk, float]]:
        if top_k <= 0 or not self._chunks:
            return []
        if len(query_vector) != self._dimension:
            raise ValueError(f"Query dimension {len(query_vector)} does not match index dimension {self._dimension}")

        result = self.collection.query(
            query_embeddings=[list(query_vector)],
            n_results=min(top_k, len(self._chunks)),
            include=["metadatas", "distances"],
        )

        metadatas = result["metadatas"][0] if result.get("metadatas") else []
        distances = result["distances"][0] if result.get("distances") else []

        hits: List[Tuple[int, float]] = []
        for metadata, distance in zip(metadatas, distances):
            position = int((metadata or {}).get("position", -1))
            if 0 <= position < len(self._chunks):
                # Chroma returns cosine distance (lower is better).
                hits.append((position, 1.0 - float(distance)))

        hits.sort(key=lambda hit: (-hit[1], hit[0]))
        return [(self._chunks[position], score) for position, score in hits]


__all__ = ["ChromaVectorStore", "CHROMA_COLLECTION_PREFIX"]
