"""
Indexing pipeline: load lore, flatten, chunk, embed and publish a vector store.
"""

from __future__ import annotations

import asyncio
import bisect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from tqdm import tqdm

from silicon_oracle.config import settings
from silicon_oracle.embeddings.client import EmbeddingsClient
from silicon_oracle.exceptions import MalformedInput
from silicon_oracle.indexing.chunker import TextChunk, split_text
from silicon_oracle.indexing.flattener import flatten_document
from silicon_oracle.indexing.loader import LORE_DIR, LoreDocument, load_lore_documents
from silicon_oracle.vector_store import build_vector_store
from silicon_oracle.vector_store.base import Chunk, VectorStore

DOCUMENT_SEPARATOR = "\n===\n"
SEPARATOR_CHARS = " \t\r\n="
LABEL_JOINER = " + "

logger = logging.getLogger(__name__)


class IndexState(str, Enum):
    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    READY = "ready"
    INACTIVE = "inactive"
    FAILED = "failed"


@dataclass(frozen=True)
class CorpusSpan:
    label: str
    start: int
    end: int


@dataclass
class IndexBuild:
    store: VectorStore | None
    documents: int
    skipped_documents: int
    chunks: int


@dataclass
class BuildSummary:
    state: IndexState
    documents: int = 0
    skipped_documents: int = 0
    indexed_chunks: int = 0
    elapsed_sec: float = 0.0
    error: str | None = None


def build_corpus_text(documents: Sequence[LoreDocument]) -> Tuple[str, List[CorpusSpan], int]:
    """
    Flatten each document under its own label and join them, each followed
    by a visible separator so chunks do not silently merge two documents.
    """
    parts: List[str] = []
    spans: List[CorpusSpan] = []
    skipped = 0
    offset = 0

    for document in documents:
        try:
            flattened = flatten_document(document.content, label=document.name)
        except MalformedInput as exc:
            skipped += 1
            logger.warning("Skipping malformed lore document", extra={"document": document.name, "error": exc.message})
            continue
        if not flattened.strip():
            continue

        block = flattened + DOCUMENT_SEPARATOR
        spans.append(CorpusSpan(label=document.name, start=offset, end=offset + len(block)))
        parts.append(block)
        offset += len(block)

    return "".join(parts), spans, skipped


def label_for_range(spans: Sequence[CorpusSpan], start: int, end: int) -> str:
    """Labels of every document the text between ``start`` and ``end`` touches, in corpus order."""
    if not spans:
        return ""
    idx = max(bisect.bisect_right([span.start for span in spans], start) - 1, 0)
    labels = [spans[idx].label]
    for span in spans[idx + 1 :]:
        if span.start >= end:
            break
        labels.append(span.label)
    return LABEL_JOINER.join(labels)


def _content_range(piece: TextChunk) -> Tuple[int, int]:
    """Offsets of the chunk text once leading and trailing document separators are dropped."""
    leading = len(piece.text) - len(piece.text.lstrip(SEPARATOR_CHARS))
    return piece.start + leading, piece.start + len(piece.text.rstrip(SEPARATOR_CHARS))


async def build_index(
    documents: Sequence[LoreDocument],
    embeddings_client: EmbeddingsClient,
    chunk_size: int = settings.chunk_size_chars,
    chunk_overlap: int = settings.chunk_overlap_chars,
    backend: str | None = None,
) -> IndexBuild:
    """
    Build a complete vector store from lore documents.

    Every chunk is embedded before the store is constructed, so a failing
    embedding call leaves nothing half-built behind. Returns a build with
    ``store=None`` when the documents hold no extractable text.
    """
    text, spans, skipped = build_corpus_text(documents)
    indexed_documents = len(spans)
    if not text.strip():
        return IndexBuild(store=None, documents=0, skipped_documents=skipped, chunks=0)

    pieces = [piece for piece in split_text(text, chunk_size, chunk_overlap) if piece.text.strip(SEPARATOR_CHARS)]
    texts = [piece.text for piece in pieces]
    logger.info(
        "Parsed lore corpus",
        extra={"documents": indexed_documents, "skipped": skipped, "chunks": len(pieces)},
    )

    batch_size = embeddings_client.batch_size
    vectors: List[List[float]] = []
    for i in tqdm(range(0, len(texts), batch_size), desc="Indexing", unit="batch"):
        vectors.extend(await embeddings_client.embed_texts(texts[i : i + batch_size]))
        logger.debug("Embedded batch", extra={"count": len(texts[i : i + batch_size]), "offset": i})

    chunks = [
        Chunk(text=piece.text, source_label=label_for_range(spans, *_content_range(piece)), vector=tuple(vector))
        for piece, vector in zip(pieces, vectors)
    ]
    store = build_vector_store(chunks, backend)
    return IndexBuild(store=store, documents=indexed_documents, skipped_documents=skipped, chunks=len(chunks))


class IndexService:
    """
    Owns the lore index snapshot and its lifecycle.

    uninitialized -> building -> ready | inactive | failed. Readers only ever
    see a completely built snapshot; a rebuild swaps it in one assignment.
    """

    def __init__(
        self,
        embeddings_client: EmbeddingsClient,
        lore_dir: str = LORE_DIR,
        chunk_size: int = settings.chunk_size_chars,
        chunk_overlap: int = settings.chunk_overlap_chars,
        backend: str | None = None,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.embeddings_client = embeddings_client
        self.lore_dir = lore_dir
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.backend = backend
        self.logger = logger_ or logging.getLogger(__name__)

        self._state = IndexState.UNINITIALIZED
        self._snapshot: VectorStore | None = None
        self._last_summary = BuildSummary(state=IndexState.UNINITIALIZED)
        self._build_task: asyncio.Future | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def snapshot(self) -> VectorStore | None:
        return self._snapshot

    @property
    def indexed_chunks(self) -> int:
        return self._snapshot.size if self._snapshot is not None else 0

    @property
    def last_summary(self) -> BuildSummary:
        return self._last_summary

    async def build_once(self, documents: Sequence[LoreDocument] | None = None) -> BuildSummary:
        """Build the index unless one already exists; concurrent callers share one build."""
        async with self._lock:
            if self._state in (IndexState.READY, IndexState.INACTIVE):
                self.logger.info("Lore index already built, skipping", extra={"state": self._state.value})
                return self._last_summary
            if self._build_task is None:
                self._build_task = asyncio.ensure_future(self._run_build(documents))
            task = self._build_task
        return await asyncio.shield(task)

    async def rebuild(self, documents: Sequence[LoreDocument] | None = None) -> BuildSummary:
        """Build a fresh snapshot and swap it in; the current one stays on failure."""
        async with self._lock:
            running = self._build_task
        if running is not None:
            await asyncio.shield(running)

        async with self._lock:
            if self._build_task is None:
                self._build_task = asyncio.ensure_future(self._run_build(documents))
            task = self._build_task
        return await asyncio.shield(task)

    async def aclose(self) -> None:
        """Cancel a build that is still running, e.g. on application shutdown."""
        task = self._build_task
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.wait([task])

    async def _run_build(self, documents: Sequence[LoreDocument] | None) -> BuildSummary:
        started = time.perf_counter()
        previous_state = self._state
        self._state = IndexState.BUILDING
        self.logger.info("Building lore index", extra={"lore_dir": self.lore_dir, "previous_state": previous_state.value})

        try:
            loader_skipped = 0
            if documents is None:
                documents, loader_skipped = load_lore_documents(self.lore_dir)

            build = await build_index(
                documents,
                self.embeddings_client,
                chunk_size=self.chunk_size,
                chunk_overlap=self.chunk_overlap,
                backend=self.backend,
            )
        except asyncio.CancelledError:
            self._state = previous_state if self._snapshot is not None else IndexState.UNINITIALIZED
            self.logger.warning("Lore index build cancelled", extra={"state": self._state.value})
            raise
        except Exception as exc:
            self._state = previous_state if self._snapshot is not None else IndexState.FAILED
            self.logger.exception("Lore index build failed", extra={"state": self._state.value})
            self._last_summary = BuildSummary(
                state=self._state,
                indexed_chunks=self.indexed_chunks,
                elapsed_sec=time.perf_counter() - started,
                error=str(exc),
            )
            return self._last_summary
        finally:
            self._build_task = None

        self._snapshot = build.store
        if build.store is None:
            self._state = IndexState.INACTIVE
            self.logger.warning("No text could be extracted from lore files. Retrieval is inactive.")
        else:
            self._state = IndexState.READY

        self._last_summary = BuildSummary(
            state=self._state,
            documents=build.documents,
            skipped_documents=build.skipped_documents + loader_skipped,
            indexed_chunks=build.chunks,
            elapsed_sec=time.perf_counter() - started,
        )
        self.logger.info(
            "Lore index build completed",
            extra={
                "state": self._state.value,
                "indexed_chunks": build.chunks,
                "elapsed_sec": round(self._last_summary.elapsed_sec, 2),
            },
        )
        return self._last_summary


__all__ = [
    "IndexState",
    "IndexService",
    "IndexBuild",
    "BuildSummary",
    "CorpusSpan",
    "build_corpus_text",
    "build_index",
    "label_for_range",
    "DOCUMENT_SEPARATOR",
    "LABEL_JOINER",
]
