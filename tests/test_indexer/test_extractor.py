"""Tests for text extraction."""

from pathlib import Path

import pytest
from pypdf import PdfWriter

from docvec.indexer.extractor import (
    ExtractionError,
    ExtractorRegistry,
    PdfExtractor,
    PlainTextExtractor,
)


class TestPlainTextExtractor:
    def test_reads_utf8(self, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("año nuevo", encoding="utf-8")
        assert PlainTextExtractor().extract(path) == "año nuevo"

    def test_invalid_utf8_raises(self, tmp_path: Path):
        path = tmp_path / "latin1.txt"
        path.write_bytes("año".encode("latin-1"))
        with pytest.raises(ExtractionError, match="Invalid UTF-8"):
            PlainTextExtractor().extract(path)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ExtractionError, match="Cannot read"):
            PlainTextExtractor().extract(tmp_path / "missing.txt")


class TestPdfExtractor:
    def test_malformed_pdf_raises(self, tmp_path: Path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")
        with pytest.raises(ExtractionError, match="Cannot extract PDF text"):
            PdfExtractor().extract(path)

    def test_any_reader_error_becomes_extraction_error(self, tmp_path: Path, monkeypatch):
        def broken_reader(path):
            raise TypeError("argument of type 'NumberObject' is not iterable")

        monkeypatch.setattr("docvec.indexer.extractor.PdfReader", broken_reader)
        path = tmp_path / "damaged.pdf"
        path.write_bytes(b"%PDF-1.3\n damaged")

        with pytest.raises(ExtractionError, match="NumberObject") as exc_info:
            PdfExtractor().extract(path)
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_blank_pdf_gives_empty_text(self, tmp_path: Path):
        path = tmp_path / "blank.pdf"
        writer = PdfWriter()
        writer.add_blank_page(width=200, height=200)
        with path.open("wb") as f:
            writer.write(f)

        assert PdfExtractor().extract(path).strip() == ""


class TestExtractorRegistry:
    def test_defaults(self):
        registry = ExtractorRegistry()
        assert isinstance(registry.get("pdf"), PdfExtractor)
        assert isinstance(registry.get("txt"), PlainTextExtractor)
        assert isinstance(registry.get("sql"), PlainTextExtractor)

    def test_unsupported_returns_none(self):
        registry = ExtractorRegistry()
        assert registry.get("docx") is None
        assert not registry.supports("png")

    def test_lookup_is_case_insensitive(self):
        registry = ExtractorRegistry()
        assert registry.get("PDF") is registry.get("pdf")
        assert registry.get(".TXT") is registry.get("txt")

    def test_custom_extractors(self):
        plain = PlainTextExtractor()
        registry = ExtractorRegistry({".Conf": plain})
        assert registry.get("conf") is plain
        assert registry.get("txt") is None
