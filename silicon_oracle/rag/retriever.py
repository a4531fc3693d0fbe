"""
Retriever: embed the user query and pull the closest lore chunks.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from silicon_oracle.config import settings
from silicon_oracle.embeddings.client import EmbeddingsClient
from silicon_oracle.exceptions import EmbeddingServiceError, RetrievalUnavailable
from silicon_oracle.indexing.pipeline import IndexService
from silicon_oracle.vector_store.base import Chunk

CHUNK_DELIMITER = "\n\n---\n\n"
DEFAULT_TOP_K = settings.retrieval_top_k

logger = logging.getLogger(__name__)


class Retriever:
    def __init__(
        self,
        index_service: IndexService,
        embeddings_client: EmbeddingsClient,
        top_k: int = DEFAULT_TOP_K,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.index_service = index_service
        self.embeddings_client = embeddings_client
        self.top_k = top_k
        self.logger = logger_ or logging.getLogger(__name__)

    async def search(self, query: str, k: int | None = None) -> List[Tuple[Chunk, float]]:
        """
        Return the ranked (chunk, score) pairs for ``query``.

        Empty queries and an index that is missing, still building or empty
        give an empty result without calling the embedding service.
        """
        k = self.top_k if k is None else k
        if not query or not query.strip():
            return []

        store = self.index_service.snapshot
        if store is None or store.size == 0:
            self.logger.warning("Lore index is not available for retrieval", extra={"state": self.index_service.state.value})
            return []

        try:
            query_vector = await self.embeddings_client.embed_text(query)
        except EmbeddingServiceError as exc:
            raise RetrievalUnavailable(f"Query embedding failed: {exc.message}") from exc

        # A rebuild may have swapped the snapshot while the query was embedded.
        store = self.index_service.snapshot or store
        results = store.search(query_vector, top_k=k)
        self.logger.info(
            "Retrieved chunks",
            extra={
                "requested": k,
                "returned": len(results),
                "top_score": round(results[0][1], 3) if results else None,
                "sources": [chunk.source_label for chunk, _ in results],
            },
        )
        return results

    async def retrieve(self, query: str, k: int | None = None) -> str:
        results = await self.search(query, k)
        if not results:
            return ""
        return CHUNK_DELIMITER.join(chunk.text for chunk, _ in results)

    async def retrieve_and_augment(self, query: str, k: int | None = None) -> str:
        """Retrieved lore for ``query``, or an empty string when none is available."""
        try:
            return await self.retrieve(query, k)
        except RetrievalUnavailable as exc:
            self.logger.warning("Retrieval unavailable, continuing without context", extra={"error": exc.message})
            return ""


__all__ = ["Retriever", "CHUNK_DELIMITER", "DEFAULT_TOP_K"]
