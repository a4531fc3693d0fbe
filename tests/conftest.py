"""Shared fixtures: a fake OpenAI client with deterministic embeddings."""

import re
import zlib
from types import SimpleNamespace
from typing import List

import httpx
import pytest
from openai import APIConnectionError

from silicon_oracle.embeddings.client import EmbeddingsClient

TEST_DIMENSIONS = 64


def hashed_vector(text: str, dimensions: int = TEST_DIMENSIONS) -> List[float]:
    """Bag-of-words vector: each lower-cased token bumps one hashed slot."""
    vector = [0.0] * dimensions
    for token in re.findall(r"\w+", text.lower()):
        vector[zlib.crc32(token.encode("utf-8")) % dimensions] += 1.0
    return vector


class FakeEmbeddingsAPI:
    def __init__(self, dimensions: int) -> None:
        self.dimensions = dimensions
        self.calls: List[List[str]] = []
        self.fail = False

    async def create(self, model: str, input: List[str]):
        self.calls.append(list(input))
        if self.fail:
            raise APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/embeddings"))
        return SimpleNamespace(
            data=[SimpleNamespace(embedding=hashed_vector(text, self.dimensions)) for text in input]
        )


class FakeAsyncOpenAI:
    def __init__(self, dimensions: int = TEST_DIMENSIONS) -> None:
        self.embeddings = FakeEmbeddingsAPI(dimensions)


@pytest.fixture
def fake_openai():
    return FakeAsyncOpenAI()


@pytest.fixture
def embeddings_client(fake_openai):
    return EmbeddingsClient(model="test-embedding", dimensions=TEST_DIMENSIONS, batch_size=4, client=fake_openai)


@pytest.fixture
def lore_dir(tmp_path):
    directory = tmp_path / "lore"
    directory.mkdir()
    return directory
