"""Read-only helpers describing PDF files."""

from __future__ import annotations

import os
from typing import Optional, Tuple

from .backends import PypdfBackend
from .backends.base import PDFBackend
from .exceptions import PDFEditException
from .types import PDFInfo


def get_pdf_info(
    pdf_path: str,
    password: Optional[str] = None,
    *,
    backend: Optional[PDFBackend] = None,
) -> PDFInfo:
    """Return information about a PDF document using :class:`PDFInfo`."""

    document = (backend or PypdfBackend()).load(pdf_path, password=password)
    try:
        reader = getattr(document, "reader", None)
        metadata = getattr(reader, "metadata", None)
        return PDFInfo(
            num_pages=document.num_pages,
            file_size=document.file_size,
            title=getattr(metadata, "title", None),
            author=getattr(metadata, "author", None),
            subject=getattr(metadata, "subject", None),
            creator=getattr(metadata, "creator", None),
            producer=getattr(metadata, "producer", None),
            is_encrypted=bool(getattr(reader, "is_encrypted", False)),
            form_fields=[form_field.name for form_field in document.get_form_fields()],
        )
    finally:
        document.close()


def validate_pdf(pdf_path: str, password: Optional[str] = None) -> Tuple[bool, str]:
    """Perform lightweight validation of a PDF file."""

    if not os.path.exists(pdf_path):
        return False, f"File not found: {pdf_path}"

    if not os.path.isfile(pdf_path):
        return False, f"Path is not a file: {pdf_path}"

    if not pdf_path.lower().endswith(".pdf"):
        return False, f"File does not have .pdf extension: {pdf_path}"

    if not os.access(pdf_path, os.R_OK):
        return False, f"Cannot read file (permission denied): {pdf_path}"

    try:
        document = PypdfBackend().load(pdf_path, password=password)
    except PDFEditException as exc:
        return False, str(exc)
    document.close()
    return True, ""


__all__ = ["get_pdf_info", "validate_pdf"]
