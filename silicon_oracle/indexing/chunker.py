"""
Text chunking utilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from silicon_oracle.config import settings

CHUNK_SIZE_CHARS = settings.chunk_size_chars
CHUNK_OVERLAP_CHARS = settings.chunk_overlap_chars

# Paragraph, line, sentence, word, then a hard character cut.
DEFAULT_SEPARATORS: Tuple[str, ...] = ("\n\n", "\n", ". ", " ", "")


@dataclass(frozen=True)
class TextChunk:
    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def _split_keeping_separator(text: str, separator: str) -> List[str]:
    """Split on ``separator`` and keep it attached to the preceding piece."""
    parts = text.split(separator)
    pieces = [part + separator for part in parts[:-1]]
    pieces.append(parts[-1])
    return [piece for piece in pieces if piece]


def _split_pieces(text: str, chunk_size: int, separators: Sequence[str]) -> List[str]:
    """
    Break text into pieces no longer than chunk_size, trying the coarsest
    separator first. Concatenating the pieces gives back ``text`` exactly.
    """
    if len(text) <= chunk_size:
        return [text]

    for idx, separator in enumerate(separators):
        if separator == "":
            return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]
        if separator not in text:
            continue

        pieces: List[str] = []
        for piece in _split_keeping_separator(text, separator):
            if len(piece) <= chunk_size:
                pieces.append(piece)
            else:
                pieces.extend(_split_pieces(piece, chunk_size, separators[idx + 1 :]))
        return pieces

    # No separator applies: the token is indivisible and stays whole.
    return [text]


def split_text(
    text: str,
    chunk_size: int = CHUNK_SIZE_CHARS,
    chunk_overlap: int = CHUNK_OVERLAP_CHARS,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
) -> List[TextChunk]:
    """
    Split ``text`` into overlapping chunks of at most ``chunk_size`` characters.

    Pieces produced by the separator hierarchy are packed greedily into a
    window; when the next piece does not fit, the window is emitted and its
    leading pieces are dropped until what remains fits in ``chunk_overlap``.
    The retained tail is the overlap with the next chunk.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
    if not text:
        return []

    chunks: List[TextChunk] = []
    window: List[Tuple[str, int]] = []
    window_len = 0
    emitted_end = 0
    offset = 0

    def emit() -> None:
        nonlocal emitted_end
        start = window[0][1]
        chunk_text = "".join(piece for piece, _ in window)
        chunks.append(TextChunk(text=chunk_text, start=start))
        emitted_end = start + len(chunk_text)

    for piece in _split_pieces(text, chunk_size, separators):
        if window and window_len + len(piece) > chunk_size:
            emit()
            while window and (window_len > chunk_overlap or window_len + len(piece) > chunk_size):
                dropped, _ = window.pop(0)
                window_len -= len(dropped)

        window.append((piece, offset))
        window_len += len(piece)
        offset += len(piece)

    if window and offset > emitted_end:
        emit()

    return chunks


__all__ = ["split_text", "TextChunk", "DEFAULT_SEPARATORS", "CHUNK_SIZE_CHARS", "CHUNK_OVERLAP_CHARS"]
