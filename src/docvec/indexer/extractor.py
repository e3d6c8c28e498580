"""Text extraction per file type."""

import logging
from pathlib import Path
from typing import Protocol

from pypdf import PdfReader

logger = logging.getLogger(__name__)

# Extensions read as UTF-8 text
PLAIN_TEXT_TYPES = {"txt", "sql", "md", "csv", "log", "json"}


class ExtractionError(Exception):
    """Raised when a file's text cannot be extracted."""


class TextExtractor(Protocol):
    def extract(self, path: Path) -> str: ...


class PlainTextExtractor:
    """Reads files as strict UTF-8."""

    def extract(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError(f"Invalid UTF-8 in {path}: {e}") from e
        except OSError as e:
            raise ExtractionError(f"Cannot read {path}: {e}") from e


class PdfExtractor:
    """Extracts the text layer of a PDF with pypdf.

    Any error pypdf raises while reading a damaged file is reported as an
    ExtractionError.
    """

    def extract(self, path: Path) -> str:
        try:
            reader = PdfReader(path)
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            raise ExtractionError(f"Cannot extract PDF text from {path}: {e}") from e
        logger.debug("Extracted %d pages from %s", len(pages), path.name)
        return "\n".join(pages)


class ExtractorRegistry:
    """Maps lower-case extensions to extractors.

    Extensions without an extractor are unsupported: the file is still tracked
    in the store, but no text is embedded for it.
    """

    def __init__(self, extractors: dict[str, TextExtractor] | None = None):
        if extractors is None:
            extractors = self.default_extractors()
        self._extractors = {ext.lower().lstrip("."): e for ext, e in extractors.items()}

    @staticmethod
    def default_extractors() -> dict[str, TextExtractor]:
        plain = PlainTextExtractor()
        extractors: dict[str, TextExtractor] = {ext: plain for ext in PLAIN_TEXT_TYPES}
        extractors["pdf"] = PdfExtractor()
        return extractors

    def get(self, extension: str) -> TextExtractor | None:
        """Return the extractor for an extension, or None if unsupported."""
        return self._extractors.get(extension.lower().lstrip("."))

    def supports(self, extension: str) -> bool:
        return self.get(extension) is not None
