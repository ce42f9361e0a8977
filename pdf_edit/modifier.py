"""Apply an :class:`EditSet` to a single PDF document."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from .backends import PypdfBackend
from .backends.base import BackendDocument, PDFBackend
from .exceptions import DocumentOpenError, EditError, PersistError
from .expander import expand_all_pages
from .types import (
    DEFAULT_FONT_NAME,
    Box,
    EditSet,
    FieldValue,
    FormFieldEdit,
    ImageEdit,
    ModificationOutcome,
    Point,
    SignatureEdit,
    TextEdit,
)
from .utils import get_logger

LOGGER = get_logger("pdf_edit.modifier")


class PDFModifier:
    """
    Open a PDF, apply edits in a fixed order and persist the result.

    Edits are applied form fields first, then signatures, then text, then
    images, each kind in list order. A failing edit is recorded in
    ``ModificationOutcome.skipped`` and the remaining edits still run. Only
    an unreadable source or an unwritable destination fails the document.
    """

    def __init__(self, backend: Optional[PDFBackend] = None) -> None:
        self.backend = backend or PypdfBackend()

    def apply(
        self,
        input_path: str,
        output_path: str,
        edit_set: EditSet,
        *,
        password: Optional[str] = None,
    ) -> ModificationOutcome:
        start_time = time.perf_counter()
        source = str(input_path)

        try:
            document = self.backend.load(source, password=password)
        except DocumentOpenError as exc:
            LOGGER.error("Cannot open %s: %s", source, exc.message)
            return self._failed(source, exc.message, start_time)

        try:
            edits = expand_all_pages(edit_set, document.num_pages)
            LOGGER.debug("Applying %d edit(s) to %s (%d pages)", edits.total, source, document.num_pages)

            skipped: List[str] = []
            forms_filled = self._run(document, edits.form_fields, self._fill_field, skipped)
            signatures_added = self._run(document, edits.signatures, self._add_signature, skipped)
            text_insertions = self._run(document, edits.texts, self._insert_text, skipped)
            image_insertions = self._run(document, edits.images, self._insert_image, skipped)

            self.backend.write(document, str(output_path))
        except PersistError as exc:
            LOGGER.error("Cannot save %s: %s", output_path, exc.message)
            return self._failed(source, exc.message, start_time)
        finally:
            document.close()

        applied = forms_filled + signatures_added + text_insertions + image_insertions
        LOGGER.info("Modified %s -> %s (%d applied, %d skipped)", source, output_path, applied, len(skipped))
        return ModificationOutcome(
            success=True,
            source_path=source,
            output_path=str(output_path),
            modifications_applied=applied,
            signatures_added=signatures_added,
            forms_filled=forms_filled,
            text_insertions=text_insertions,
            image_insertions=image_insertions,
            processing_time=time.perf_counter() - start_time,
            skipped=tuple(skipped),
        )

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------
    def fill_form_only(
        self, input_path: str, output_path: str, form_data: Mapping[str, FieldValue]
    ) -> ModificationOutcome:
        fields = [FormFieldEdit(name=name, value=value) for name, value in form_data.items()]
        return self.apply(input_path, output_path, EditSet(form_fields=fields))

    def add_signature_only(
        self, input_path: str, output_path: str, image_path: str, box: Box
    ) -> ModificationOutcome:
        signature = SignatureEdit(box=box, image_path=image_path)
        return self.apply(input_path, output_path, EditSet(signatures=[signature]))

    def add_text_only(
        self,
        input_path: str,
        output_path: str,
        text: str,
        position: Point,
        page_index: int = 0,
    ) -> ModificationOutcome:
        edit = TextEdit(text=text, position=position, page_index=page_index)
        return self.apply(input_path, output_path, EditSet(texts=[edit]))

    # ------------------------------------------------------------------
    # Edit application
    # ------------------------------------------------------------------
    @staticmethod
    def _run(
        document: BackendDocument,
        edits: Sequence,
        apply_one: Callable[[BackendDocument, object], None],
        skipped: List[str],
    ) -> int:
        applied = 0
        for edit in edits:
            try:
                apply_one(document, edit)
            except EditError as exc:
                LOGGER.warning("Skipping %s in %s: %s", edit.describe(), document.source, exc.message)
                skipped.append(f"{edit.describe()}: {exc.message}")
                continue
            applied += 1
        return applied

    @staticmethod
    def _fill_field(document: BackendDocument, edit: FormFieldEdit) -> None:
        document.set_field_value(edit.name, edit.value)
        LOGGER.debug("Filled field '%s'", edit.name)

    @staticmethod
    def _add_signature(document: BackendDocument, edit: SignatureEdit) -> None:
        x1, y1, x2, y2 = edit.box
        if edit.is_image:
            document.page_size(edit.page_index)
            image = document.embed_image(edit.image_path)
            document.draw_image(edit.page_index, image, x1, y1, x2 - x1, y2 - y1)
        else:
            document.draw_text(
                edit.page_index,
                edit.text,
                x1,
                y1,
                size=edit.font_size,
                color=edit.color,
                font_name=DEFAULT_FONT_NAME,
            )

    @staticmethod
    def _insert_text(document: BackendDocument, edit: TextEdit) -> None:
        x, y = edit.position
        document.draw_text(
            edit.page_index,
            edit.text,
            x,
            y,
            size=edit.font_size,
            color=edit.color,
            font_name=edit.font_name,
        )

    @staticmethod
    def _insert_image(document: BackendDocument, edit: ImageEdit) -> None:
        document.page_size(edit.page_index)
        image = document.embed_image(edit.image_path)
        x1, y1, x2, y2 = edit.box
        document.draw_image(edit.page_index, image, x1, y1, x2 - x1, y2 - y1)

    @staticmethod
    def _failed(source: str, message: str, start_time: float) -> ModificationOutcome:
        return ModificationOutcome(
            success=False,
            source_path=source,
            processing_time=time.perf_counter() - start_time,
            error_message=message,
        )


def format_outcome_markdown(outcome: ModificationOutcome) -> str:
    """Render a Markdown report for one modified document."""

    if not outcome.success:
        return f"# PDF Modification Failed\n\n**Source:** {outcome.source_path}\n\nError: {outcome.error_message}\n"

    lines = [
        "# PDF Modification Results",
        "",
        "## Summary",
        f"- **Source:** {outcome.source_path}",
        f"- **Output:** {outcome.output_path}",
        f"- **Modifications Applied:** {outcome.modifications_applied}",
        f"- **Processing Time:** {outcome.processing_time:.3f}s",
    ]

    sections = (
        ("Form Fields", outcome.forms_filled, "form field(s) filled"),
        ("Signatures", outcome.signatures_added, "signature(s) added"),
        ("Text Insertions", outcome.text_insertions, "text element(s) inserted"),
        ("Image Insertions", outcome.image_insertions, "image(s) inserted"),
    )
    for title, count, label in sections:
        if count:
            lines.extend(["", f"### {title} ({count})", f"- {count} {label}"])

    if outcome.skipped:
        lines.extend(["", f"## Skipped Edits ({len(outcome.skipped)})"])
        lines.extend(f"- {message}" for message in outcome.skipped)

    return "\n".join(lines) + "\n"


def write_markdown_report(outcome: ModificationOutcome, report_path: str) -> Path:
    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_outcome_markdown(outcome), encoding="utf-8")
    return path


__all__ = ["PDFModifier", "format_outcome_markdown", "write_markdown_report"]
