"""Slide-deck (.pptx) extractor.

A .pptx file is a zip archive holding one XML part per slide at
``ppt/slides/slideN.xml``.  Archive order is not slide order (``slide10``
can come before ``slide2``, or entries can be stored in any order), so the
parts are sorted by the integer ``N`` before reading.  Each slide renders as
``Slide K:`` followed by one line per non-blank DrawingML text run, with a
blank line between slides.
"""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
import zipfile

import structlog

from notemaster.models.documents import DocumentVariant
from notemaster.services.ingestion.extractors.base import CONTAINER_ERRORS, DocumentExtractor
from notemaster.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_A_NS = "{http://schemas.openxmlformats.org/drawingml/2006/main}"
_SLIDE_PART = re.compile(r"^ppt/slides/slide(\d+)\.xml$")


def ordered_slide_parts(names: list[str]) -> list[str]:
    """Return the slide part names in *names* sorted by slide number."""
    numbered: list[tuple[int, str]] = []
    for name in names:
        match = _SLIDE_PART.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
    numbered.sort()
    return [name for _, name in numbered]


class SlideDeckExtractor(DocumentExtractor):
    variant = DocumentVariant.SLIDE_DECK

    def extract(self, data: bytes, file_name: str) -> str:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                parts = ordered_slide_parts(archive.namelist())
                slides = [
                    self._slide_lines(ET.fromstring(archive.read(part))) for part in parts
                ]
        except ET.ParseError as exc:
            raise ExtractionError(
                message=f"Malformed slide XML in '{file_name}': {exc}",
                provider_name="slide_deck",
            ) from exc
        except CONTAINER_ERRORS as exc:
            raise ExtractionError(
                message=f"'{file_name}' is not a readable .pptx archive: {exc}",
                provider_name="slide_deck",
            ) from exc

        logger.debug("slides_extracted", file_name=file_name, slide_count=len(parts))

        # Headers alone are not content.
        if not any(slides):
            return ""

        blocks = []
        for number, lines in enumerate(slides, start=1):
            blocks.append("\n".join([f"Slide {number}:", *lines]))
        return "\n\n".join(blocks)

    @staticmethod
    def _slide_lines(root: ET.Element) -> list[str]:
        lines = []
        for node in root.iter(f"{_A_NS}t"):
            text = (node.text or "").strip()
            if text:
                lines.append(text)
        return lines
