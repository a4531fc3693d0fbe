"""
Vector store interface and shared types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class Chunk:
    text: str
    source_label: str
    vector: Tuple[float, ...]


class VectorStore(Protocol):
    """Read-only similarity index over a fixed set of chunks."""

    @property
    def size(self) -> int:
        ...

    @property
    def dimension(self) -> int | None:
        ...

    def search(self, query_vector: Sequence[float], top_k: int) -> List[Tuple[Chunk, float]]:
        ...


def check_dimensions(chunks: Sequence[Chunk]) -> int | None:
    """Return the shared vector length of ``chunks`` or raise if they disagree."""
    if not chunks:
        return None
    dimension = len(chunks[0].vector)
    for idx, chunk in enumerate(chunks):
        if len(chunk.vector) != dimension:
            raise ValueError(f"Chunk {idx} has dimension {len(chunk.vector)}, expected {dimension}")
    return dimension


__all__ = ["Chunk", "VectorStore", "check_dimensions"]
