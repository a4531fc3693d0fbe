"""Retrieval tests, including the end-to-end lore scenarios."""

import json

import pytest

from silicon_oracle.exceptions import RetrievalUnavailable
from silicon_oracle.indexing.loader import LoreDocument
from silicon_oracle.indexing.pipeline import IndexService, IndexState
from silicon_oracle.rag.prompt import DEFAULT_PERSONA, compose_system_prompt
from silicon_oracle.rag.retriever import CHUNK_DELIMITER, Retriever

METRO = {"capitolo1": {"storia": "Il Metro-Centro fu costruito nel 2347."}}


@pytest.fixture
def index_service(embeddings_client):
    return IndexService(embeddings_client, chunk_size=80, chunk_overlap=10)


@pytest.fixture
def retriever(index_service, embeddings_client):
    return Retriever(index_service, embeddings_client, top_k=5)


class TestRetriever:
    @pytest.mark.asyncio
    async def test_scenario_a_metro_centro(self, retriever, index_service, lore_dir):
        (lore_dir / "manuale.json").write_text(json.dumps(METRO), encoding="utf-8")
        index_service.lore_dir = str(lore_dir)
        await index_service.build_once()

        text = await retriever.retrieve_and_augment("quando fu costruito il Metro-Centro?")

        assert "2347" in text

    @pytest.mark.asyncio
    async def test_scenario_b_empty_directory(self, retriever, index_service, lore_dir, fake_openai):
        index_service.lore_dir = str(lore_dir)
        await index_service.build_once()

        assert index_service.state is IndexState.INACTIVE
        assert await retriever.retrieve_and_augment("chi comanda il Metro-Centro?") == ""
        assert fake_openai.embeddings.calls == []

        prompt = compose_system_prompt(DEFAULT_PERSONA, True, "")
        assert DEFAULT_PERSONA.no_data_notice in prompt
        assert DEFAULT_PERSONA.grounded_rule not in prompt

    @pytest.mark.asyncio
    async def test_failed_build_degrades_to_empty_context(self, retriever, index_service, fake_openai):
        fake_openai.embeddings.fail = True
        await index_service.build_once([LoreDocument(name="manuale", content=METRO)])
        fake_openai.embeddings.fail = False

        assert await retriever.retrieve_and_augment("any query") == ""

    @pytest.mark.asyncio
    async def test_query_embedding_failure(self, retriever, index_service, fake_openai):
        await index_service.build_once([LoreDocument(name="manuale", content=METRO)])
        fake_openai.embeddings.fail = True

        with pytest.raises(RetrievalUnavailable):
            await retriever.retrieve("Metro-Centro")
        assert await retriever.retrieve_and_augment("Metro-Centro") == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    async def test_blank_query_skips_embedding(self, retriever, index_service, fake_openai, query):
        await index_service.build_once([LoreDocument(name="manuale", content=METRO)])
        calls = len(fake_openai.embeddings.calls)

        assert await retriever.retrieve(query) == ""
        assert len(fake_openai.embeddings.calls) == calls

    @pytest.mark.asyncio
    async def test_index_not_built_yet(self, retriever, fake_openai):
        assert await retriever.retrieve("Metro-Centro") == ""
        assert fake_openai.embeddings.calls == []

    @pytest.mark.asyncio
    async def test_results_joined_in_rank_order(self, retriever, index_service):
        documents = [
            LoreDocument(name="metro", content={"storia": "Il Metro-Centro fu costruito nel 2347."}),
            LoreDocument(name="serre", content={"serre": "Le serre del Lingotto nutrono la città."}),
            LoreDocument(name="fiume", content={"fiume": "Il Po scorre avvelenato sotto i ponti crollati."}),
        ]
        await index_service.build_once(documents)

        results = await retriever.search("serre Lingotto", k=2)
        text = await retriever.retrieve("serre Lingotto", k=2)

        assert len(results) == 2
        assert results[0][0].source_label == "serre"
        assert text == CHUNK_DELIMITER.join(chunk.text for chunk, _ in results)
        assert text.count(CHUNK_DELIMITER) == 1
