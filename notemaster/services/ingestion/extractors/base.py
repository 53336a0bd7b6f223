"""Common contract for the per-format text extractors."""

from __future__ import annotations

import zipfile
import zlib
from abc import ABC, abstractmethod

from notemaster.models.documents import DocumentVariant

# Everything a damaged or unusual zip container can raise while being read.
# ``SyntaxError`` covers both ``ElementTree.ParseError`` and lxml's
# ``XMLSyntaxError``; ``RuntimeError`` covers encrypted entries and
# ``NotImplementedError`` (unsupported compression method).
CONTAINER_ERRORS: tuple[type[BaseException], ...] = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    KeyError,
    SyntaxError,
    RuntimeError,
    zlib.error,
    EOFError,
    OSError,
)


class DocumentExtractor(ABC):
    """Turns the raw bytes of one :class:`DocumentVariant` into text.

    Implementations return the raw extracted text; normalisation and the
    empty-text check happen once in :class:`TextExtractor`.  A corrupt
    container or malformed markup raises
    :class:`~notemaster.utils.errors.ExtractionError`.
    """

    variant: DocumentVariant

    @abstractmethod
    def extract(self, data: bytes, file_name: str) -> str:
        """Return the text content of *data*."""
