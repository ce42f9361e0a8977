"""
Type definitions and dataclasses for PDF Edit.

This module defines the edit model (``EditSet`` and its edit kinds), the
per-document ``ModificationOutcome`` and the aggregated ``BatchReport``,
plus the records produced by extraction, validation and generation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

Point = Tuple[float, float]
Box = Tuple[float, float, float, float]
Color = Tuple[float, float, float]
FieldValue = Union[str, bool]

BLACK: Color = (0.0, 0.0, 0.0)
DEFAULT_FONT_SIZE = 12.0
DEFAULT_FONT_NAME = "Helvetica"


class FieldKind(str, Enum):
    """Kind of an interactive form field as exposed by a backend."""

    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    CHOICE = "choice"
    SIGNATURE = "signature"
    BUTTON = "button"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FormField:
    """A form field discovered in a document."""

    name: str
    kind: FieldKind
    options: Tuple[str, ...] = ()
    value: Optional[str] = None


@dataclass(frozen=True)
class TextEdit:
    """Draw ``text`` with its baseline starting at ``position``."""

    text: str
    position: Point
    page_index: int = 0
    font_size: float = DEFAULT_FONT_SIZE
    color: Color = BLACK
    font_name: str = DEFAULT_FONT_NAME
    all_pages: bool = False

    def describe(self) -> str:
        where = "all pages" if self.all_pages else f"page {self.page_index}"
        x, y = self.position
        return f"text '{self.text}' at ({x:g}, {y:g}) on {where}"


@dataclass(frozen=True)
class SignatureEdit:
    """Place a signature inside ``box``, from an image or as text."""

    box: Box
    image_path: Optional[str] = None
    text: Optional[str] = None
    page_index: int = 0
    font_size: float = DEFAULT_FONT_SIZE
    color: Color = BLACK
    all_pages: bool = False

    def __post_init__(self) -> None:
        if (self.image_path is None) == (self.text is None):
            raise ValueError("A signature needs exactly one of image_path or text")

    @property
    def is_image(self) -> bool:
        return self.image_path is not None

    def describe(self) -> str:
        where = "all pages" if self.all_pages else f"page {self.page_index}"
        source = f"image {self.image_path}" if self.is_image else f"text '{self.text}'"
        return f"signature ({source}) in box {_format_box(self.box)} on {where}"


@dataclass(frozen=True)
class FormFieldEdit:
    """Set the form field ``name`` to ``value``."""

    name: str
    value: FieldValue

    def describe(self) -> str:
        return f"field '{self.name}' = {self.value!r}"


@dataclass(frozen=True)
class ImageEdit:
    """Draw the image at ``image_path`` scaled into ``box``."""

    image_path: str
    box: Box
    page_index: int = 0
    all_pages: bool = False

    def describe(self) -> str:
        where = "all pages" if self.all_pages else f"page {self.page_index}"
        return f"image {self.image_path} in box {_format_box(self.box)} on {where}"


def _format_box(box: Box) -> str:
    return "(" + ", ".join(f"{value:g}" for value in box) + ")"


@dataclass(frozen=True)
class EditSet:
    """
    Immutable collection of requested edits, grouped by kind.

    Attributes:
        texts: Text insertions, applied in list order
        signatures: Signature placements
        form_fields: Form field values
        images: Image placements
    """
    texts: Tuple[TextEdit, ...] = ()
    signatures: Tuple[SignatureEdit, ...] = ()
    form_fields: Tuple[FormFieldEdit, ...] = ()
    images: Tuple[ImageEdit, ...] = ()

    def __post_init__(self) -> None:
        # Lists passed by callers are frozen into tuples.
        object.__setattr__(self, "texts", tuple(self.texts))
        object.__setattr__(self, "signatures", tuple(self.signatures))
        object.__setattr__(self, "form_fields", tuple(self.form_fields))
        object.__setattr__(self, "images", tuple(self.images))

    def __add__(self, other: "EditSet") -> "EditSet":
        if not isinstance(other, EditSet):
            return NotImplemented
        return EditSet(
            texts=self.texts + other.texts,
            signatures=self.signatures + other.signatures,
            form_fields=self.form_fields + other.form_fields,
            images=self.images + other.images,
        )

    @property
    def total(self) -> int:
        return len(self.texts) + len(self.signatures) + len(self.form_fields) + len(self.images)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def has_all_pages_edits(self) -> bool:
        page_edits = self.texts + self.signatures + self.images  # type: ignore[operator]
        return any(edit.all_pages for edit in page_edits)

    def with_all_pages(self) -> "EditSet":
        """Return a copy where every page-addressed edit targets all pages."""
        return EditSet(
            texts=tuple(replace(edit, all_pages=True) for edit in self.texts),
            signatures=tuple(replace(edit, all_pages=True) for edit in self.signatures),
            form_fields=self.form_fields,
            images=tuple(replace(edit, all_pages=True) for edit in self.images),
        )

    def describe(self) -> str:
        """Human readable summary used by preview mode."""
        if self.is_empty:
            return "No edits requested."

        lines = [f"{self.total} edit(s) requested:"]
        sections = (
            ("Form fields", self.form_fields),
            ("Signatures", self.signatures),
            ("Text insertions", self.texts),
            ("Image insertions", self.images),
        )
        for title, edits in sections:
            if not edits:
                continue
            lines.append(f"{title} ({len(edits)}):")
            lines.extend(f"  - {edit.describe()}" for edit in edits)
        return "\n".join(lines)


@dataclass(frozen=True)
class ModificationOutcome:
    """
    Result of modifying a single PDF document.

    Counts only include edits that actually changed the document; edits
    that failed softly are listed in ``skipped``.
    """
    success: bool
    source_path: str
    output_path: Optional[str] = None
    modifications_applied: int = 0
    signatures_added: int = 0
    forms_filled: int = 0
    text_insertions: int = 0
    image_insertions: int = 0
    processing_time: float = 0.0
    error_message: Optional[str] = None
    skipped: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.success:
            return f"ModificationOutcome(success=True, applied={self.modifications_applied})"
        return f"ModificationOutcome(success=False, error='{self.error_message}')"


@dataclass(frozen=True)
class BatchReport:
    """
    Result of a batch modification run.

    ``outcomes`` are always in file discovery order. In preview mode no
    outcomes are produced and ``preview`` holds the edit summary.
    """
    outcomes: Tuple[ModificationOutcome, ...] = ()
    files: Tuple[str, ...] = ()
    preview: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def total_edits_applied(self) -> int:
        return sum(outcome.modifications_applied for outcome in self.outcomes)

    @property
    def is_preview(self) -> bool:
        return self.preview is not None

    def __str__(self) -> str:
        return (
            "BatchReport(total={total}, succeeded={succeeded}, failed={failed}, "
            "edits={edits})"
        ).format(
            total=self.total,
            succeeded=self.succeeded,
            failed=self.failed,
            edits=self.total_edits_applied,
        )


@dataclass
class PDFInfo:
    """
    PDF document information and metadata.

    Attributes:
        num_pages: Number of pages in the PDF
        file_size: File size in bytes
        title: PDF title metadata
        author: PDF author metadata
        subject: PDF subject metadata
        creator: PDF creator application
        producer: PDF producer application
        is_encrypted: Whether the PDF is encrypted
        form_fields: Names of interactive form fields
    """
    num_pages: int
    file_size: int
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    is_encrypted: bool = False
    form_fields: List[str] = field(default_factory=list)


@dataclass
class SafetyResult:
    is_safe: bool
    issues: List[str]
    sha256: str = ""
    file_size: int = 0


@dataclass
class PdfMetadata:
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    keywords: Optional[str] = None
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    page_count: Optional[int] = None
    encrypted: bool = False


@dataclass
class PageInfo:
    page_number: int
    content: str
    width: Optional[float] = None
    height: Optional[float] = None
    rotation: int = 0


@dataclass
class PdfData:
    text: str
    total_pages: int
    pages: Optional[List[PageInfo]] = None
    metadata: Optional[PdfMetadata] = None


@dataclass
class ProcessingResult:
    """Result of a text extraction run."""

    success: bool = False
    data: Optional[PdfData] = None
    metadata: Optional[PdfMetadata] = None
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    processing_time: float = 0.0


@dataclass
class SearchMatch:
    match: str
    index: int
    context: str
    page: Optional[int] = None


@dataclass
class GenerationResult:
    success: bool = False
    output_path: Optional[str] = None
    engine_used: Optional[str] = None
    template_used: Optional[str] = None
    generation_time: float = 0.0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def to_dict(value: Any) -> Dict[str, Any]:
    """Convert one of the dataclasses above into JSON friendly data."""

    def _convert(item: Any) -> Any:
        if isinstance(item, datetime):
            return item.isoformat()
        if isinstance(item, Enum):
            return item.value
        if isinstance(item, dict):
            return {key: _convert(val) for key, val in item.items()}
        if isinstance(item, (list, tuple)):
            return [_convert(val) for val in item]
        return item

    return _convert(asdict(value))
