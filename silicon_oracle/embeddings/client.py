"""
OpenAI embeddings client.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from openai import AsyncOpenAI, OpenAIError

from silicon_oracle.config import openai_api_key, settings
from silicon_oracle.exceptions import EmbeddingServiceError

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name
DEFAULT_EMBEDDING_DIMENSIONS = settings.embedding_dimensions
DEFAULT_EMBED_BATCH_SIZE = settings.embed_batch_size

logger = logging.getLogger(__name__)


class EmbeddingsClient:
    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.dimensions = dimensions
        self.batch_size = batch_size
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # Created on first use so the service can start without credentials.
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=openai_api_key(),
                timeout=settings.openai_timeout_sec,
                max_retries=settings.openai_max_retries,
            )
        return self._client

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []

        embeddings: List[List[float]] = []
        for i in range(0, len(texts), self.batch_size):
            batch = list(texts[i : i + self.batch_size])
            embeddings.extend(await self._embed_batch(batch))
        return embeddings

    async def embed_text(self, text: str) -> List[float]:
        vectors = await self.embed_texts([text])
        return vectors[0]

    async def _embed_batch(self, batch: List[str]) -> List[List[float]]:
        try:
            response = await self.client.embeddings.create(model=self.model, input=batch)
        except OpenAIError as exc:
            logger.warning("Embedding request failed", extra={"model": self.model, "batch": len(batch)})
            raise EmbeddingServiceError(
                f"Embedding request failed: {exc}",
                details={"model": self.model, "batch": len(batch)},
            ) from exc

        vectors = [list(item.embedding) for item in response.data]
        if len(vectors) != len(batch):
            raise EmbeddingServiceError(
                f"Expected {len(batch)} embeddings, got {len(vectors)}",
                details={"model": self.model},
            )
        for vector in vectors:
            if len(vector) != self.dimensions:
                raise EmbeddingServiceError(
                    f"Embedding dimension {len(vector)} does not match configured {self.dimensions}",
                    details={"model": self.model},
                )
        return vectors


__all__ = ["EmbeddingsClient", "DEFAULT_EMBEDDING_MODEL", "DEFAULT_EMBEDDING_DIMENSIONS"]
