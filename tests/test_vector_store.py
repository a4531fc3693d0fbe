"""Unit tests for the vector store backends."""

import pytest

from silicon_oracle.vector_store import build_vector_store
from silicon_oracle.vector_store.base import Chunk
from silicon_oracle.vector_store.memory_store import InMemoryVectorStore


def make_chunk(text, vector, label="manuale"):
    return Chunk(text=text, source_label=label, vector=tuple(vector))


@pytest.fixture
def chunks():
    return [
        make_chunk("nord", [1.0, 0.0, 0.0]),
        make_chunk("est", [0.0, 1.0, 0.0]),
        make_chunk("nord-est", [1.0, 1.0, 0.0]),
        make_chunk("alto", [0.0, 0.0, 1.0]),
    ]


class TestInMemoryVectorStore:
    def test_returns_most_similar_first(self, chunks):
        store = InMemoryVectorStore.from_chunks(chunks)

        results = store.search([1.0, 0.1, 0.0], top_k=2)

        assert [chunk.text for chunk, _ in results] == ["nord", "nord-est"]
        assert results[0][1] == pytest.approx(0.995, abs=1e-3)

    def test_scores_are_non_increasing(self, chunks):
        store = InMemoryVectorStore.from_chunks(chunks)

        scores = [score for _, score in store.search([0.3, 0.5, 0.2], top_k=4)]

        assert scores == sorted(scores, reverse=True)

    def test_result_count_is_capped(self, chunks):
        store = InMemoryVectorStore.from_chunks(chunks)

        assert len(store.search([1.0, 0.0, 0.0], top_k=2)) == 2
        assert len(store.search([1.0, 0.0, 0.0], top_k=10)) == len(chunks)
        assert store.search([1.0, 0.0, 0.0], top_k=0) == []

    def test_ties_keep_insertion_order(self):
        store = InMemoryVectorStore.from_chunks(
            [make_chunk("primo", [0.0, 1.0]), make_chunk("secondo", [0.0, 2.0]), make_chunk("terzo", [0.0, 3.0])]
        )

        results = store.search([0.0, 1.0], top_k=3)

        assert [chunk.text for chunk, _ in results] == ["primo", "secondo", "terzo"]

    def test_empty_index_never_raises(self):
        store = InMemoryVectorStore.from_chunks([])

        assert store.size == 0
        assert store.dimension is None
        assert store.search([1.0, 2.0], top_k=5) == []

    def test_zero_vectors_score_zero(self):
        store = InMemoryVectorStore.from_chunks([make_chunk("vuoto", [0.0, 0.0]), make_chunk("pieno", [1.0, 0.0])])

        results = store.search([1.0, 0.0], top_k=2)
        assert [chunk.text for chunk, _ in results] == ["pieno", "vuoto"]
        assert results[1][1] == 0.0
        assert all(score == 0.0 for _, score in store.search([0.0, 0.0], top_k=2))

    def test_inconsistent_dimensions_are_rejected(self):
        with pytest.raises(ValueError):
            InMemoryVectorStore.from_chunks([make_chunk("a", [1.0, 0.0]), make_chunk("b", [1.0])])

    def test_query_dimension_mismatch(self, chunks):
        store = InMemoryVectorStore.from_chunks(chunks)

        with pytest.raises(ValueError):
            store.search([1.0, 0.0], top_k=1)


class TestBuildVectorStore:
    def test_memory_backend(self, chunks):
        store = build_vector_store(chunks, backend="memory")

        assert isinstance(store, InMemoryVectorStore)
        assert store.size == 4
        assert store.dimension == 3

    def test_unknown_backend(self, chunks):
        with pytest.raises(ValueError):
            build_vector_store(chunks, backend="faiss")

    def test_chroma_backend_honours_search_contract(self, chunks):
        store = build_vector_store(chunks, backend="chroma")

        results = store.search([1.0, 0.1, 0.0], top_k=2)

        assert store.size == 4
        assert [chunk.text for chunk, _ in results] == ["nord", "nord-est"]
        assert results[0][1] >= results[1][1]
        assert store.search([1.0, 0.0, 0.0], top_k=0) == []

    def test_chroma_backend_empty_index(self):
        store = build_vector_store([], backend="chroma")

        assert store.search([1.0, 0.0], top_k=3) == []
