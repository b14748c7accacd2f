"""Sentence-aligned chunker with word-aligned overlap.

Text is accumulated sentence by sentence until the next sentence would push
the running chunk past ``chunk_size`` characters. The closed chunk's last
``overlap`` characters (advanced to the next word boundary) seed the next
chunk, shortened when seed plus the next sentence would not fit. The size
bound wins over the overlap: when the next sentence leaves no room for a
whole trailing word, the seed is empty and the two chunks share no text.
A sentence longer than ``chunk_size`` is kept whole and becomes a chunk of
its own.
"""

from __future__ import annotations

import re

from ragdesk.db.models import Chunk, Document

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def clean_text(text: str | None) -> str:
    """Normalise extracted text: collapse whitespace, drop control characters, trim."""
    if not text:
        return ""
    text = _WHITESPACE.sub(" ", text)
    text = _CONTROL_CHARS.sub("", text)
    return text.strip()


class SentenceChunker:
    """Split text into overlapping, size-bounded chunks along sentence boundaries.

    Args:
        chunk_size: Target maximum chunk length in characters.
        overlap: Number of trailing characters carried into the next chunk.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 100) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not 0 <= overlap < chunk_size:
            raise ValueError("overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.overlap = overlap

    def split(self, text: str) -> list[str]:
        """Return the ordered chunk texts for *text*."""
        text = text.strip()
        if not text:
            return []
        if len(text) <= self.chunk_size:
            return [text]

        chunks: list[str] = []
        current = ""
        for sentence in _SENTENCE_END.split(text):
            sentence = sentence.strip()
            if not sentence:
                continue
            if current and len(current) + 1 + len(sentence) > self.chunk_size:
                chunks.append(current)
                # The seed shrinks so that seed + sentence still fits the bound.
                room = self.chunk_size - 1 - len(sentence)
                current = self._overlap_of(current, min(self.overlap, room))
            current = f"{current} {sentence}" if current else sentence

        if current:
            chunks.append(current)
        return chunks

    def chunk(self, document: Document, text: str) -> list[Chunk]:
        """Split *text* into Chunk objects tagged with *document*'s metadata."""
        metadata = {
            "document_name": document.name,
            "category": document.category,
            "uploaded_by": document.owner,
        }
        return [
            Chunk(document_id=document.id, chunk_index=i, text=t, metadata=dict(metadata))
            for i, t in enumerate(self.split(text))
        ]

    @staticmethod
    def _overlap_of(chunk: str, size: int) -> str:
        """Trailing *size* characters of *chunk*, starting on a word boundary."""
        if size <= 0:
            return ""
        if len(chunk) <= size:
            return chunk
        tail = chunk[-size:]
        if chunk[-size - 1] == " ":
            return tail.strip()
        space = tail.find(" ")
        if space < 0:
            return ""
        return tail[space + 1:].strip()
