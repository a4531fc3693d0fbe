"""
CLI to build the lore index and print the chunks closest to a query.

Example:
    python -m scripts.search_query --query "Quando fu costruito il Metro-Centro?" --top-k 5
"""

from __future__ import annotations

import argparse
import asyncio

from silicon_oracle.config import setup_logging
from silicon_oracle.embeddings.client import EmbeddingsClient
from silicon_oracle.indexing.pipeline import IndexService
from silicon_oracle.rag.retriever import Retriever


async def run(query: str, top_k: int, snippet: int) -> None:
    embeddings = EmbeddingsClient()
    index_service = IndexService(embeddings)
    summary = await index_service.build_once()
    print(f"Index state: {summary.state.value} ({summary.indexed_chunks} chunks)")

    results = await Retriever(index_service, embeddings).search(query, k=top_k)
    if not results:
        print("Nessun risultato")
        return

    for idx, (chunk, score) in enumerate(results, start=1):
        text = chunk.text[:snippet].replace("\n", " ")
        print(f"\n#{idx} score={score:.4f} source={chunk.source_label}")
        print("text:", text + ("..." if len(chunk.text) > snippet else ""))


def main() -> None:
    parser = argparse.ArgumentParser(description="Search the lore index by text query.")
    parser.add_argument("--query", "-q", required=True, help="Query text")
    parser.add_argument("--top-k", type=int, default=5, help="How many chunks to return")
    parser.add_argument("--snippet", type=int, default=300, help="Snippet length")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(run(args.query, args.top_k, args.snippet))


if __name__ == "__main__":
    main()
