"""pypdf + reportlab backend implementation for PDF Edit.

Form fields are edited directly through :class:`pypdf.PdfWriter`. Text and
images are drawn with reportlab onto one overlay page per touched page,
which is merged on top of the original page when the document is
serialized.
"""

from __future__ import annotations

import io
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..exceptions import (
    DocumentOpenError,
    EditError,
    FieldNotFoundError,
    FieldTypeMismatchError,
    PageOutOfRangeError,
    PersistError,
    UnsupportedImageFormatError,
)
from ..types import DEFAULT_FONT_NAME, Color, FieldKind, FieldValue, FormField
from ..utils import get_logger
from .base import BackendDocument, PDFBackend

LOGGER = get_logger("pdf_edit.backends.pypdf")

SUPPORTED_IMAGE_FORMATS = {"PNG", "JPEG"}
TRUTHY_VALUES = {"true", "yes", "on", "1", "checked", "x"}

# /Ff bit positions for button fields (PDF 32000-1, table 226)
_FF_RADIO = 1 << 15
_FF_PUSHBUTTON = 1 << 16

DrawOp = Callable[[canvas.Canvas], None]


def _field_kind(field_data: Any) -> FieldKind:
    field_type = field_data.get("/FT")
    flags = int(field_data.get("/Ff", 0) or 0)
    if field_type == "/Tx":
        return FieldKind.TEXT
    if field_type == "/Btn":
        if flags & _FF_PUSHBUTTON:
            return FieldKind.BUTTON
        if flags & _FF_RADIO:
            return FieldKind.RADIO
        return FieldKind.CHECKBOX
    if field_type == "/Ch":
        return FieldKind.CHOICE
    if field_type == "/Sig":
        return FieldKind.SIGNATURE
    return FieldKind.UNKNOWN


def _field_options(kind: FieldKind, field_data: Any) -> Tuple[str, ...]:
    if kind in (FieldKind.CHECKBOX, FieldKind.RADIO):
        states = field_data.get("/_States_", []) or []
        return tuple(str(state).lstrip("/") for state in states if str(state) != "/Off")
    if kind == FieldKind.CHOICE:
        options = []
        for option in field_data.get("/Opt", []) or []:
            # Options are either plain strings or [export, display] pairs.
            if isinstance(option, (list, tuple)) and option:
                options.append(str(option[0]))
            else:
                options.append(str(option))
        return tuple(options)
    return ()


def _qualified_name(annotation: Any) -> str:
    parts = []
    node = annotation
    while node is not None:
        if "/T" in node:
            parts.append(str(node["/T"]))
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    return ".".join(reversed(parts))


def _widget_names(page: Any) -> List[str]:
    annotations = page.get("/Annots")
    if annotations is None:
        return []
    return [_qualified_name(annotation.get_object()) for annotation in annotations.get_object()]


def _is_truthy(value: FieldValue) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY_VALUES


@dataclass
class PypdfDocument(BackendDocument):
    reader: PdfReader
    writer: PdfWriter
    _overlays: Dict[int, List[DrawOp]] = field(default_factory=dict)
    _fields: Dict[str, FormField] | None = None

    # ------------------------------------------------------------------
    # Pages and drawing
    # ------------------------------------------------------------------
    def _check_page(self, index: int) -> None:
        if index < 0 or index >= self.num_pages:
            raise PageOutOfRangeError(
                f"Page index {index} does not exist (document has {self.num_pages} pages)"
            )

    def page_size(self, index: int) -> Tuple[float, float]:
        self._check_page(index)
        box = self.writer.pages[index].mediabox
        return float(box.right), float(box.top)

    def draw_text(
        self,
        index: int,
        text: str,
        x: float,
        y: float,
        *,
        size: float,
        color: Color,
        font_name: str,
    ) -> None:
        self._check_page(index)
        known_fonts = set(pdfmetrics.standardFonts) | set(pdfmetrics.getRegisteredFontNames())
        if font_name not in known_fonts:
            LOGGER.warning("Unknown font '%s'; falling back to %s", font_name, DEFAULT_FONT_NAME)
            font_name = DEFAULT_FONT_NAME

        def _op(canv: canvas.Canvas) -> None:
            canv.setFillColorRGB(*color)
            canv.setFont(font_name, size)
            canv.drawString(x, y, text)

        self._overlays.setdefault(index, []).append(_op)

    def embed_image(self, image_path: str) -> ImageReader:
        try:
            data = Path(image_path).read_bytes()
        except OSError as exc:
            raise UnsupportedImageFormatError(f"Unable to read image {image_path}: {exc}") from exc

        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise UnsupportedImageFormatError(f"Unreadable image {image_path}: {exc}") from exc

        if image_format not in SUPPORTED_IMAGE_FORMATS:
            raise UnsupportedImageFormatError(
                f"Unsupported image format for {image_path}: {image_format} (expected PNG or JPEG)"
            )
        return ImageReader(io.BytesIO(data))

    def draw_image(
        self,
        index: int,
        image: ImageReader,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        self._check_page(index)

        def _op(canv: canvas.Canvas) -> None:
            canv.drawImage(image, x, y, width=width, height=height, mask="auto")

        self._overlays.setdefault(index, []).append(_op)

    def _render_overlays(self) -> None:
        for index in sorted(self._overlays):
            width, height = self.page_size(index)
            buffer = io.BytesIO()
            canv = canvas.Canvas(buffer, pagesize=(width, height))
            for op in self._overlays[index]:
                op(canv)
            canv.showPage()
            canv.save()
            buffer.seek(0)
            overlay = PdfReader(buffer)
            self.writer.pages[index].merge_page(overlay.pages[0])
        self._overlays.clear()

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------
    def _field_map(self) -> Dict[str, FormField]:
        if self._fields is None:
            fields: Dict[str, FormField] = {}
            for name, field_data in (self.reader.get_fields() or {}).items():
                kind = _field_kind(field_data)
                value = field_data.get("/V")
                fields[name] = FormField(
                    name=name,
                    kind=kind,
                    options=_field_options(kind, field_data),
                    value=None if value is None else str(value),
                )
            self._fields = fields
        return self._fields

    def get_form_fields(self) -> List[FormField]:
        return list(self._field_map().values())

    def set_field_value(self, name: str, value: FieldValue) -> None:
        form_field = self._field_map().get(name)
        if form_field is None:
            raise FieldNotFoundError(f"Form field '{name}' not found")

        if form_field.kind == FieldKind.TEXT:
            pdf_value = "" if value is None else str(value)
        elif form_field.kind == FieldKind.CHECKBOX:
            on_state = form_field.options[0] if form_field.options else "Yes"
            pdf_value = f"/{on_state}" if _is_truthy(value) else "/Off"
        elif form_field.kind in (FieldKind.RADIO, FieldKind.CHOICE):
            option = str(value).lstrip("/")
            if option not in form_field.options:
                raise FieldTypeMismatchError(
                    f"'{value}' is not an option of field '{name}' "
                    f"(options: {', '.join(form_field.options) or 'none'})"
                )
            pdf_value = f"/{option}" if form_field.kind == FieldKind.RADIO else option
        else:
            raise FieldTypeMismatchError(
                f"Field '{name}' of kind {form_field.kind.value} cannot be filled"
            )

        updated = 0
        try:
            for page in self.writer.pages:
                if name in _widget_names(page):
                    self.writer.update_page_form_field_values(page, {name: pdf_value})
                    updated += 1
        except Exception as exc:
            raise EditError(f"Unable to set field '{name}': {exc}") from exc
        if not updated:
            raise EditError(f"Form field '{name}' has no widget on any page")

    # ------------------------------------------------------------------
    def serialize(self) -> bytes:
        self._render_overlays()
        buffer = io.BytesIO()
        self.writer.write(buffer)
        return buffer.getvalue()

    def close(self) -> None:
        self._overlays.clear()
        self._fields = None


class PypdfBackend(PDFBackend):
    """Backend implementation that uses `pypdf` and `reportlab` under the hood."""

    def load(self, pdf_path: str, password: str | None = None) -> PypdfDocument:
        path = Path(pdf_path)
        if not path.exists() or not path.is_file():
            raise DocumentOpenError(f"PDF file not found: {pdf_path}")

        try:
            raw_bytes = path.read_bytes()
        except OSError as exc:
            raise DocumentOpenError(f"Unable to read PDF file: {pdf_path}. Error: {exc}") from exc

        return self.open_bytes(raw_bytes, source=str(pdf_path), password=password)

    def open_bytes(self, raw_bytes: bytes, *, source: str = "<bytes>", password: str | None = None) -> PypdfDocument:
        try:
            reader = PdfReader(io.BytesIO(raw_bytes))
            if reader.is_encrypted:
                if not password:
                    raise DocumentOpenError(f"PDF is encrypted: {source}. Supply a password to process this file.")
                if reader.decrypt(password) == 0:
                    raise DocumentOpenError(f"Failed to decrypt PDF with supplied password: {source}")
            num_pages = len(reader.pages)
            writer = PdfWriter(clone_from=reader)
        except DocumentOpenError:
            raise
        except PdfReadError as exc:
            raise DocumentOpenError(f"Corrupted or invalid PDF file: {source}. Error: {exc}") from exc
        except Exception as exc:
            raise DocumentOpenError(f"Unexpected error reading PDF: {source}. Error: {exc}") from exc

        if num_pages == 0:
            raise DocumentOpenError(f"PDF has no pages: {source}")

        return PypdfDocument(
            num_pages=num_pages,
            file_size=len(raw_bytes),
            source=source,
            reader=reader,
            writer=writer,
        )

    def write(self, document: BackendDocument, destination: str) -> None:
        path = Path(destination)
        try:
            payload = document.serialize()
        except Exception as exc:
            raise PersistError(f"Unable to serialize PDF for {destination}. Error: {exc}") from exc

        temp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile("wb", delete=False, dir=path.parent, suffix=".tmp") as handle:
                temp_path = Path(handle.name)
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            temp_path.replace(path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise PersistError(f"Unable to write PDF to {destination}. Error: {exc}") from exc
