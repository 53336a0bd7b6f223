"""Recursive-separator text chunking with exact character overlap.

Splits normalised text into :class:`~notemaster.models.documents.TextChunk`
objects of at most ``chunk_size`` characters, where each chunk after the
first starts exactly ``overlap`` characters before the previous one ended.

Every chunk is a verbatim slice of the input, so dropping the first
``overlap`` characters of every chunk but the first and concatenating
reproduces the input exactly.

The end of each chunk is the last natural boundary inside the window, tried
in order:

1. paragraph break (``"\\n\\n"``)
2. line break (``"\\n"``)
3. sentence end (``.``/``!``/``?`` + whitespace), skipping common
   abbreviations so "Dr. Smith" is not treated as a boundary
4. word break (``" "``)
5. a hard cut at ``chunk_size`` when none of the above fits
"""

from __future__ import annotations

import re

import structlog

from notemaster.models.documents import TextChunk

logger = structlog.get_logger(logger_name=__name__)

# Abbreviations whose trailing period is not a sentence end.
_ABBREVIATIONS = frozenset(
    {
        "Dr",
        "Mr",
        "Mrs",
        "Ms",
        "Prof",
        "Jr",
        "Sr",
        "St",
        "Ave",
        "Vol",
        "No",
        "Fig",
        "vs",
        "etc",
        "approx",
        "dept",
        "est",
        "inc",
        "ltd",
        "co",
    }
)

_SENTENCE_END = re.compile(r"[.!?]\s")
_TRAILING_WORD = re.compile(r"(\w+)$")


class TextChunker:
    """Splits text into bounded, overlapping chunks.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk.
    overlap:
        Characters shared by consecutive chunks; must be smaller than
        *chunk_size*.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got {overlap} for chunk_size {chunk_size}"
            )
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str, file_name: str = "") -> list[TextChunk]:
        """Split *text* into ordered chunks.  Empty input returns ``[]``."""
        if not text:
            return []

        chunks: list[TextChunk] = []
        length = len(text)
        start = 0
        while True:
            if length - start <= self._chunk_size:
                end = length
            else:
                end = self._find_cut(text, start)

            chunks.append(
                TextChunk(
                    text=text[start:end],
                    file_name=file_name,
                    chunk_index=len(chunks),
                    start=start,
                )
            )
            if end >= length:
                break
            # _find_cut guarantees end > start + overlap, so start advances.
            start = end - self._overlap

        logger.debug(
            "chunking_complete",
            file_name=file_name,
            num_chunks=len(chunks),
            text_length=length,
        )
        return chunks

    # ------------------------------------------------------------------
    # Boundary search
    # ------------------------------------------------------------------

    def _find_cut(self, text: str, start: int) -> int:
        """Return the end offset of the chunk beginning at *start*.

        The cut lies in ``(start + overlap, start + chunk_size]``.
        """
        lo = start + self._overlap
        hi = start + self._chunk_size

        for separator in ("\n\n", "\n"):
            idx = text.rfind(separator, lo, hi)
            if idx != -1:
                return idx + len(separator)

        sentence_cut = self._last_sentence_end(text, lo, hi)
        if sentence_cut != -1:
            return sentence_cut

        idx = text.rfind(" ", lo, hi)
        if idx != -1:
            return idx + 1

        return hi

    def _last_sentence_end(self, text: str, lo: int, hi: int) -> int:
        best = -1
        for match in _SENTENCE_END.finditer(text, lo, hi):
            if text[match.start()] == "." and self._is_abbreviation(text, match.start()):
                continue
            best = match.end()
        return best

    @staticmethod
    def _is_abbreviation(text: str, dot_index: int) -> bool:
        match = _TRAILING_WORD.search(text, max(0, dot_index - 12), dot_index)
        return bool(match) and match.group(1) in _ABBREVIATIONS


def chunk_text(text: str, max_size: int, overlap: int, file_name: str = "") -> list[TextChunk]:
    """Functional form of :meth:`TextChunker.chunk`."""
    return TextChunker(chunk_size=max_size, overlap=overlap).chunk(text, file_name=file_name)


def reassemble(chunks: list[TextChunk], overlap: int) -> str:
    """Rebuild the chunked text by dropping each later chunk's overlap prefix."""
    if not chunks:
        return ""
    return chunks[0].text + "".join(c.text[overlap:] for c in chunks[1:])
