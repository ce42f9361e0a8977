"""Backend protocol for PDF operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Protocol, Tuple

from ..types import Color, FieldValue, FormField


@dataclass
class BackendDocument:
    """Represents a loaded, editable PDF document."""

    num_pages: int
    file_size: int
    source: str

    def page_size(self, index: int) -> Tuple[float, float]:
        raise NotImplementedError

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
        raise NotImplementedError

    def embed_image(self, image_path: str) -> Any:
        """Load an image so it can be drawn; raises on unsupported formats."""
        raise NotImplementedError

    def draw_image(
        self,
        index: int,
        image: Any,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        raise NotImplementedError

    def get_form_fields(self) -> List[FormField]:
        raise NotImplementedError

    def set_field_value(self, name: str, value: FieldValue) -> None:
        raise NotImplementedError

    def serialize(self) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the document."""


class PDFBackend(Protocol):
    """Protocol defining backend operations for PDF reading/writing."""

    def load(self, pdf_path: str, password: str | None = None) -> BackendDocument:
        """Load a PDF file and return an editable document."""

    def write(self, document: BackendDocument, destination: str) -> None:
        """Serialize ``document`` and persist it to ``destination``."""
