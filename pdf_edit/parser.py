"""Text and metadata extraction built on :class:`pypdf.PdfReader`."""

from __future__ import annotations

import html
import json
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .exceptions import ExtractionError
from .geometry import parse_page_range
from .safety import SafetyManager
from .types import PageInfo, PdfData, PdfMetadata, ProcessingResult, SearchMatch, to_dict
from .utils import get_logger

LOGGER = get_logger("pdf_edit.parser")

OUTPUT_FORMATS = ("text", "markdown", "html", "json")
CONTEXT_CHARS = 50

_PDF_DATE_RE = re.compile(r"^D:(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


@dataclass
class ExtractorConfig:
    extract_metadata: bool = True
    include_page_info: bool = False
    safety_checks: bool = True
    password: Optional[str] = None
    max_pages: Optional[int] = None


def parse_pdf_date(value: Any) -> Optional[datetime]:
    """Parse a PDF date string such as ``D:20240131120000+01'00'``."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value

    text = str(value).strip()
    match = _PDF_DATE_RE.match(text)
    if match:
        year, month, day, hour, minute, second = (
            int(part) if part else default
            for part, default in zip(match.groups(), (0, 1, 1, 0, 0, 0))
        )
        try:
            return datetime(year, month, day, hour, minute, second)
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _paragraphs(text: str) -> List[str]:
    return [
        paragraph.replace("\n", " ").strip()
        for paragraph in _PARAGRAPH_SPLIT_RE.split(text)
        if paragraph.strip()
    ]


class PDFTextExtractor:
    """Extract text, page information and metadata from PDF files."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        *,
        safety_manager: Optional[SafetyManager] = None,
    ) -> None:
        self.config = config or ExtractorConfig()
        self.safety_manager = safety_manager or SafetyManager()

    def parse_file(self, file_path: str | Path) -> ProcessingResult:
        start_time = time.perf_counter()
        result = ProcessingResult()

        if self.config.safety_checks:
            safety = self.safety_manager.validate_file(file_path)
            if not safety.is_safe:
                LOGGER.warning("Refusing to parse %s: %s", file_path, "; ".join(safety.issues))
                result.errors = list(safety.issues)
                return result

        try:
            reader = PdfReader(str(file_path))
            if reader.is_encrypted:
                if not self.config.password or reader.decrypt(self.config.password) == 0:
                    raise ExtractionError(f"PDF is encrypted and could not be decrypted: {file_path}")

            total_pages = len(reader.pages)
            limit = total_pages
            if self.config.max_pages:
                limit = min(total_pages, self.config.max_pages)
                if limit < total_pages:
                    result.warnings.append(f"Only the first {limit} of {total_pages} pages were read")

            pages = [self._page_info(reader, index) for index in range(limit)]
        except ExtractionError as exc:
            result.errors.append(exc.message)
            return result
        except (PdfReadError, OSError, ValueError) as exc:
            result.errors.append(f"Parsing failed: {exc}")
            return result

        data = PdfData(text="\n\n".join(page.content for page in pages), total_pages=total_pages)
        if self.config.include_page_info:
            data.pages = pages
        if self.config.extract_metadata:
            data.metadata = self._metadata(reader, total_pages)
            result.metadata = data.metadata

        result.data = data
        result.success = True
        result.processing_time = time.perf_counter() - start_time
        LOGGER.debug("Parsed %s: %d page(s) in %.3fs", file_path, limit, result.processing_time)
        return result

    @staticmethod
    def _page_info(reader: PdfReader, index: int) -> PageInfo:
        page = reader.pages[index]
        box = page.mediabox
        return PageInfo(
            page_number=index + 1,
            content=page.extract_text() or "",
            width=float(box.width),
            height=float(box.height),
            rotation=int(page.get("/Rotate", 0) or 0),
        )

    @staticmethod
    def _metadata(reader: PdfReader, total_pages: int) -> PdfMetadata:
        info = reader.metadata or {}

        def _text(key: str) -> Optional[str]:
            value = info.get(key)
            return None if value in (None, "") else str(value)

        return PdfMetadata(
            title=_text("/Title"),
            author=_text("/Author"),
            subject=_text("/Subject"),
            creator=_text("/Creator"),
            producer=_text("/Producer"),
            keywords=_text("/Keywords"),
            creation_date=parse_pdf_date(info.get("/CreationDate")),
            modification_date=parse_pdf_date(info.get("/ModDate")),
            page_count=total_pages,
            encrypted=bool(reader.is_encrypted),
        )

    def _parse_or_raise(self, file_path: str | Path) -> PdfData:
        result = self.parse_file(file_path)
        if not result.success or result.data is None:
            raise ExtractionError(f"Failed to parse PDF: {'; '.join(result.errors) or file_path}")
        return result.data

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------
    def convert_to_format(self, data: PdfData, output_format: str) -> str:
        output_format = output_format.lower()
        if output_format == "markdown":
            return self._to_markdown(data)
        if output_format == "html":
            return self._to_html(data)
        if output_format == "json":
            return json.dumps(to_dict(data), indent=2)
        if output_format == "text":
            return data.text
        raise ValueError(f"Unknown output format '{output_format}'. Expected one of: {', '.join(OUTPUT_FORMATS)}")

    @staticmethod
    def _to_markdown(data: PdfData) -> str:
        parts: List[str] = []
        metadata = data.metadata
        if metadata and metadata.title:
            parts.append(f"# {metadata.title}")
        if metadata and metadata.author:
            parts.append(f"**Author:** {metadata.author}")
        if metadata and metadata.subject:
            parts.append(f"**Subject:** {metadata.subject}")
        parts.extend(_paragraphs(data.text))

        if data.pages:
            parts.append("## Pages")
            for page in data.pages:
                parts.append(f"### Page {page.page_number}")
                parts.extend(_paragraphs(page.content))

        return "\n\n".join(parts) + "\n"

    @staticmethod
    def _to_html(data: PdfData) -> str:
        title = data.metadata.title if data.metadata else None
        author = data.metadata.author if data.metadata else None

        lines = ["<!DOCTYPE html>", "<html>", "<head>", '<meta charset="utf-8">']
        if title:
            lines.append(f"<title>{html.escape(title)}</title>")
        lines.extend(["</head>", "<body>"])
        if title:
            lines.append(f"<h1>{html.escape(title)}</h1>")
        if author:
            lines.append(f"<p><strong>Author:</strong> {html.escape(author)}</p>")
        lines.extend(f"<p>{html.escape(paragraph)}</p>" for paragraph in _paragraphs(data.text))

        if data.pages:
            lines.append("<h2>Pages</h2>")
            for page in data.pages:
                lines.append(f"<h3>Page {page.page_number}</h3>")
                lines.extend(f"<p>{html.escape(paragraph)}</p>" for paragraph in _paragraphs(page.content))

        lines.extend(["</body>", "</html>"])
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Page selection and search
    # ------------------------------------------------------------------
    def extract_pages(self, file_path: str | Path, page_range: str) -> str:
        """Return the text of the pages selected by ``page_range`` (1-based)."""

        data = self._with_pages()._parse_or_raise(file_path)
        wanted = set(parse_page_range(page_range, data.total_pages))
        return "\n\n".join(page.content for page in data.pages or [] if page.page_number in wanted)

    def search_text(
        self,
        file_path: str | Path,
        query: str,
        case_sensitive: bool = False,
        context: int = CONTEXT_CHARS,
    ) -> List[SearchMatch]:
        """Search the document for the regular expression ``query``, page by page."""

        try:
            pattern = re.compile(query, 0 if case_sensitive else re.IGNORECASE)
        except re.error as exc:
            raise ExtractionError(f"Invalid search pattern '{query}': {exc}") from exc

        data = self._with_pages()._parse_or_raise(file_path)
        matches: List[SearchMatch] = []
        for page in data.pages or []:
            for match in pattern.finditer(page.content):
                start = max(0, match.start() - context)
                end = min(len(page.content), match.start() + context)
                matches.append(
                    SearchMatch(
                        match=match.group(0),
                        index=match.start(),
                        context=page.content[start:end],
                        page=page.page_number,
                    )
                )
        return matches

    def _with_pages(self) -> "PDFTextExtractor":
        if self.config.include_page_info:
            return self
        config = ExtractorConfig(
            extract_metadata=self.config.extract_metadata,
            include_page_info=True,
            safety_checks=self.config.safety_checks,
            password=self.config.password,
            max_pages=self.config.max_pages,
        )
        return PDFTextExtractor(config, safety_manager=self.safety_manager)


__all__ = ["PDFTextExtractor", "ExtractorConfig", "parse_pdf_date", "OUTPUT_FORMATS"]
