"""
Vector store abstractions and factories.
"""

from typing import Sequence

from silicon_oracle.config import settings
from silicon_oracle.vector_store.base import Chunk, VectorStore
from silicon_oracle.vector_store.memory_store import InMemoryVectorStore

DEFAULT_VECTOR_STORE_BACKEND = settings.vector_store_backend


def build_vector_store(chunks: Sequence[Chunk], backend: str | None = None) -> VectorStore:
    """
    Factory building a read-only VectorStore snapshot from embedded chunks.
    Supports the exact in-memory backend and Chroma.
    """
    backend = (backend or DEFAULT_VECTOR_STORE_BACKEND).lower()
    if backend == "memory":
        return InMemoryVectorStore.from_chunks(chunks)
    if backend == "chroma":
        from silicon_oracle.vector_store.chroma_store import ChromaVectorStore

        return ChromaVectorStore.from_chunks(chunks)
    raise ValueError(f"Unsupported vector store backend: {backend}")


__all__ = ["DEFAULT_VECTOR_STORE_BACKEND", "build_vector_store", "Chunk", "VectorStore", "InMemoryVectorStore"]
