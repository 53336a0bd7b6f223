"""Text normalization for extracted document text.

Every extractor funnels its raw output through :func:`normalize_extracted_text`
so the chunker sees one consistent shape regardless of source format:

* Windows / old-Mac line endings become ``\\n``.
* NUL bytes and other C0 control characters (except tab and newline) are
  dropped -- PDF text layers in particular leak these.
* Trailing whitespace is trimmed from each line.
* Runs of three or more newlines collapse to a single blank line, which keeps
  paragraph boundaries intact for the chunker's paragraph-first splitting.
"""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_MULTI_NEWLINE = re.compile(r"\n{3,}")


def normalize_extracted_text(text: str) -> str:
    """Return *text* with line endings, control characters and blank runs normalized.

    Leading and trailing whitespace of the whole document is stripped.
    An input that contains only whitespace normalizes to ``""``.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    normalized = _CONTROL_CHARS.sub("", normalized)
    normalized = _TRAILING_SPACE.sub("", normalized)
    normalized = _MULTI_NEWLINE.sub("\n\n", normalized)
    return normalized.strip()


def has_visible_text(text: str | None) -> bool:
    """Return ``True`` when *text* contains at least one non-whitespace character."""
    return bool(text and text.strip())
