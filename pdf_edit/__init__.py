"""
PDF Edit - Stamp, fill, sign and batch-modify PDF files.

This library applies structured edits (text stamps, form field values,
signatures and images) to PDF documents, one at a time or to a whole
directory, driven by CLI flags, JSON edit files and named templates. It
also extracts and converts PDF text and generates PDFs from Markdown.

Quick Start:
    >>> from pdf_edit import PDFModifier, EditSet, TextEdit
    >>> edits = EditSet(texts=[TextEdit("APPROVED", (450, 50))])
    >>> outcome = PDFModifier().apply('input.pdf', 'output.pdf', edits)

Main Classes:
    - PDFModifier: Apply an EditSet to one document
    - BatchCoordinator: Apply an EditSet to every PDF in a directory
    - TemplateCatalog: Named, time-evaluated edit templates
    - PDFTextExtractor: Text and metadata extraction
    - PdfGenerator: Markdown to PDF through pandoc/typst
    - SafetyManager: Pre-flight file screening

Data Classes:
    - EditSet, TextEdit, SignatureEdit, FormFieldEdit, ImageEdit
    - ModificationOutcome: Result of modifying one document
    - BatchReport: Result of a batch run

Exceptions:
    - PDFEditException: Base exception
    - MalformedGeometryError, ConfigParseError: Rejected before any file is touched
    - DocumentOpenError, PersistError: Fail a single document
    - EditError and subclasses: Skip a single edit

For CLI usage, use the 'pdf-edit' command after installation.
"""

__version__ = "1.0.0"
__author__ = "PDF Edit CLI Contributors"
__license__ = "MIT"

# Core classes
from pdf_edit.batch import BatchCoordinator
from pdf_edit.modifier import PDFModifier, format_outcome_markdown
from pdf_edit.expander import expand_all_pages
from pdf_edit.templates import TemplateCatalog, catalog, resolve_template
from pdf_edit.request import build_edit_request, load_edit_config
from pdf_edit.parser import PDFTextExtractor
from pdf_edit.generator import EngineProbe, PdfGenerator
from pdf_edit.safety import SafetyManager

# Data types
from pdf_edit.types import (
    BatchReport,
    EditSet,
    FieldKind,
    FormFieldEdit,
    ImageEdit,
    ModificationOutcome,
    PDFInfo,
    SignatureEdit,
    TextEdit,
)

# Exceptions
from pdf_edit.exceptions import (
    PDFEditException,
    MalformedGeometryError,
    ConfigParseError,
    DocumentOpenError,
    PersistError,
    TemplateNotFoundError,
    EditError,
    FieldNotFoundError,
    FieldTypeMismatchError,
    UnsupportedImageFormatError,
    PageOutOfRangeError,
    UnsafeFileError,
)

# Utility functions
from pdf_edit.geometry import parse_box, parse_point, parse_page_range
from pdf_edit.document import get_pdf_info, validate_pdf
from pdf_edit.utils import format_file_size

__all__ = [
    # Main classes
    "PDFModifier",
    "BatchCoordinator",
    "TemplateCatalog",
    "PDFTextExtractor",
    "PdfGenerator",
    "EngineProbe",
    "SafetyManager",
    "catalog",
    # Data types
    "EditSet",
    "TextEdit",
    "SignatureEdit",
    "FormFieldEdit",
    "ImageEdit",
    "FieldKind",
    "ModificationOutcome",
    "BatchReport",
    "PDFInfo",
    # Exceptions
    "PDFEditException",
    "MalformedGeometryError",
    "ConfigParseError",
    "DocumentOpenError",
    "PersistError",
    "TemplateNotFoundError",
    "EditError",
    "FieldNotFoundError",
    "FieldTypeMismatchError",
    "UnsupportedImageFormatError",
    "PageOutOfRangeError",
    "UnsafeFileError",
    # Functions
    "build_edit_request",
    "load_edit_config",
    "expand_all_pages",
    "resolve_template",
    "format_outcome_markdown",
    "parse_box",
    "parse_point",
    "parse_page_range",
    "get_pdf_info",
    "validate_pdf",
    "format_file_size",
    # Version info
    "__version__",
]
