"""Text extraction per media type.

pdf            → PdfExtractor (pypdf, page by page)
text/markdown  → PlainTextExtractor
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import pypdf
from pypdf.errors import PyPdfError

from ragdesk.errors import ExtractionError, UnsupportedFileType

MEDIA_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
}


class TextExtractor(ABC):
    @abstractmethod
    def extract(self, path: Path) -> str:
        """Return the raw text of the file at *path*.

        Raises:
            ExtractionError: If the file cannot be read or parsed.
        """


class PdfExtractor(TextExtractor):
    """Extract all page text via ``pypdf.PdfReader``.

    Pages that yield no text (scanned images, etc.) are skipped.
    """

    def extract(self, path: Path) -> str:
        try:
            reader = pypdf.PdfReader(str(path))
            parts: list[str] = []
            for page in reader.pages:
                stripped = (page.extract_text() or "").strip()
                if stripped:
                    parts.append(stripped)
        except (OSError, ValueError, PyPdfError) as exc:
            raise ExtractionError(f"Could not read PDF '{Path(path).name}': {exc}") from exc
        return "\n\n".join(parts)


class PlainTextExtractor(TextExtractor):
    def extract(self, path: Path) -> str:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ExtractionError(f"Could not read '{Path(path).name}': {exc}") from exc


def media_type_for(path: Path | str) -> str:
    """Return the media type for *path* from its extension.

    Raises:
        UnsupportedFileType: For extensions without an extractor.
    """
    ext = Path(path).suffix.lower()
    try:
        return MEDIA_TYPES[ext]
    except KeyError:
        allowed = ", ".join(sorted(MEDIA_TYPES))
        raise UnsupportedFileType(
            f"Unsupported file type {ext or '(none)'!r}; allowed: {allowed}"
        ) from None


def extractor_for(media_type: str) -> TextExtractor:
    if media_type == "application/pdf":
        return PdfExtractor()
    if media_type in ("text/plain", "text/markdown"):
        return PlainTextExtractor()
    raise UnsupportedFileType(f"No text extractor for media type {media_type!r}")
