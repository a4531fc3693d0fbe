"""Unit tests for the OpenAI embeddings client wrapper."""

from types import SimpleNamespace

import pytest

from silicon_oracle.embeddings.client import EmbeddingsClient
from silicon_oracle.exceptions import EmbeddingServiceError

from .conftest import TEST_DIMENSIONS, FakeAsyncOpenAI


class TestEmbeddingsClient:
    @pytest.mark.asyncio
    async def test_batches_requests(self, embeddings_client, fake_openai):
        texts = [f"testo {i}" for i in range(10)]

        vectors = await embeddings_client.embed_texts(texts)

        assert len(vectors) == 10
        assert all(len(vector) == TEST_DIMENSIONS for vector in vectors)
        assert [len(call) for call in fake_openai.embeddings.calls] == [4, 4, 2]

    @pytest.mark.asyncio
    async def test_embed_text_returns_single_vector(self, embeddings_client):
        vector = await embeddings_client.embed_text("Metro-Centro")

        assert len(vector) == TEST_DIMENSIONS

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_call(self, embeddings_client, fake_openai):
        assert await embeddings_client.embed_texts([]) == []
        assert fake_openai.embeddings.calls == []

    @pytest.mark.asyncio
    async def test_api_failure_is_wrapped(self, embeddings_client, fake_openai):
        fake_openai.embeddings.fail = True

        with pytest.raises(EmbeddingServiceError) as exc_info:
            await embeddings_client.embed_text("testo")

        assert exc_info.value.component == "embeddings"

    @pytest.mark.asyncio
    async def test_dimension_mismatch_is_rejected(self):
        client = EmbeddingsClient(dimensions=TEST_DIMENSIONS + 1, client=FakeAsyncOpenAI())

        with pytest.raises(EmbeddingServiceError):
            await client.embed_text("testo")

    @pytest.mark.asyncio
    async def test_missing_vectors_are_rejected(self):
        async def create(model, input):
            return SimpleNamespace(data=[])

        fake = SimpleNamespace(embeddings=SimpleNamespace(create=create))
        client = EmbeddingsClient(dimensions=TEST_DIMENSIONS, client=fake)

        with pytest.raises(EmbeddingServiceError):
            await client.embed_texts(["uno", "due"])
