from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from pdf_edit.exceptions import ExtractionError
from pdf_edit.parser import ExtractorConfig, PDFTextExtractor, parse_pdf_date


def test_parse_file_reads_text_and_metadata(text_pdf: Path) -> None:
    result = PDFTextExtractor().parse_file(text_pdf)

    assert result.success
    assert result.errors == []
    assert result.data.total_pages == 3
    assert "Invoice 1001 is overdue" in result.data.text
    assert "Closing remarks" in result.data.text
    assert result.metadata.title == "Quarterly Report"
    assert result.metadata.author == "Finance Team"
    assert result.metadata.page_count == 3
    assert result.data.pages is None


def test_page_info_is_optional(text_pdf: Path) -> None:
    result = PDFTextExtractor(ExtractorConfig(include_page_info=True, extract_metadata=False)).parse_file(text_pdf)

    assert [page.page_number for page in result.data.pages] == [1, 2, 3]
    assert result.data.pages[0].width == pytest.approx(612)
    assert result.metadata is None


def test_max_pages_limits_reading(text_pdf: Path) -> None:
    result = PDFTextExtractor(ExtractorConfig(max_pages=1)).parse_file(text_pdf)

    assert result.success
    assert "Invoice 1001" in result.data.text
    assert "Closing remarks" not in result.data.text
    assert result.data.total_pages == 3
    assert result.warnings == ["Only the first 1 of 3 pages were read"]


def test_unsafe_file_is_refused(corrupt_pdf: Path) -> None:
    result = PDFTextExtractor().parse_file(corrupt_pdf)

    assert not result.success
    assert result.data is None
    assert "Invalid PDF file format" in result.errors


def test_parse_failure_without_safety_checks(corrupt_pdf: Path) -> None:
    result = PDFTextExtractor(ExtractorConfig(safety_checks=False)).parse_file(corrupt_pdf)

    assert not result.success
    assert result.errors[0].startswith("Parsing failed")


def test_extract_pages(text_pdf: Path) -> None:
    text = PDFTextExtractor().extract_pages(text_pdf, "2-3,9")

    assert "Invoice 1001" not in text
    assert "invoice 1002" in text
    assert "Closing remarks" in text


def test_search_is_case_insensitive_by_default(text_pdf: Path) -> None:
    matches = PDFTextExtractor().search_text(text_pdf, "invoice \\d+")

    assert [(match.page, match.match) for match in matches] == [(1, "Invoice 1001"), (2, "invoice 1002")]
    assert "overdue" in matches[0].context


def test_search_case_sensitive(text_pdf: Path) -> None:
    matches = PDFTextExtractor().search_text(text_pdf, "Invoice", case_sensitive=True)

    assert [match.page for match in matches] == [1]


def test_invalid_search_pattern(text_pdf: Path) -> None:
    with pytest.raises(ExtractionError):
        PDFTextExtractor().search_text(text_pdf, "([unclosed")


def test_search_on_unreadable_file(corrupt_pdf: Path) -> None:
    with pytest.raises(ExtractionError):
        PDFTextExtractor().search_text(corrupt_pdf, "anything")


def test_convert_formats(text_pdf: Path) -> None:
    extractor = PDFTextExtractor()
    data = extractor.parse_file(text_pdf).data

    markdown = extractor.convert_to_format(data, "markdown")
    assert markdown.startswith("# Quarterly Report")
    assert "**Author:** Finance Team" in markdown

    page_html = extractor.convert_to_format(data, "HTML")
    assert "<title>Quarterly Report</title>" in page_html
    assert "<h1>Quarterly Report</h1>" in page_html

    payload = json.loads(extractor.convert_to_format(data, "json"))
    assert payload["total_pages"] == 3
    assert payload["metadata"]["title"] == "Quarterly Report"

    assert extractor.convert_to_format(data, "text") == data.text

    with pytest.raises(ValueError):
        extractor.convert_to_format(data, "docx")


def test_parse_pdf_date() -> None:
    assert parse_pdf_date("D:20240131120005+01'00'") == datetime(2024, 1, 31, 12, 0, 5)
    assert parse_pdf_date("D:2023") == datetime(2023, 1, 1)
    assert parse_pdf_date("2022-05-06T07:08:09") == datetime(2022, 5, 6, 7, 8, 9)
    assert parse_pdf_date("not a date") is None
    assert parse_pdf_date(None) is None
