from __future__ import annotations

from pathlib import Path
from typing import Callable
import sys

import pytest
from PIL import Image
from pypdf import PdfWriter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def _write_blank_pdf(path: Path, pages: int, title: str | None = None) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    if title is not None:
        writer.add_metadata({"/Title": title})
    with path.open("wb") as stream:
        writer.write(stream)
    return path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, pages: int = 1, title: str | None = None, directory: Path | None = None) -> Path:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        return _write_blank_pdf(target_dir / filename, pages, title)

    return _create


@pytest.fixture()
def two_page_pdf(pdf_factory: Callable[..., Path]) -> Path:
    return pdf_factory("two-pages.pdf", pages=2, title="Two Pages")


@pytest.fixture()
def corrupt_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "corrupt.pdf"
    path.write_bytes(b"This is not a PDF document at all")
    return path


@pytest.fixture()
def text_pdf(tmp_path: Path) -> Path:
    """Three pages of real text, drawn with reportlab."""

    path = tmp_path / "text.pdf"
    canv = canvas.Canvas(str(path), pagesize=letter)
    canv.setTitle("Quarterly Report")
    canv.setAuthor("Finance Team")
    for number, line in enumerate(
        ("Invoice 1001 is overdue", "Payment schedule for invoice 1002", "Closing remarks"), start=1
    ):
        canv.setFont("Helvetica", 12)
        canv.drawString(72, 720, f"Page {number}: {line}")
        canv.showPage()
    canv.save()
    return path


@pytest.fixture()
def form_pdf(tmp_path: Path) -> Path:
    """One page with a text field named ``name`` and a checkbox named ``agree``."""

    path = tmp_path / "form.pdf"
    canv = canvas.Canvas(str(path), pagesize=letter)
    canv.drawString(72, 720, "Application form")
    form = canv.acroForm
    form.textfield(name="name", x=72, y=650, width=200, height=20)
    form.checkbox(name="agree", x=72, y=600, buttonStyle="check")
    canv.showPage()
    canv.save()
    return path


@pytest.fixture()
def options_form_pdf(tmp_path: Path) -> Path:
    """One page with a radio group ``color`` (red/blue) and a choice field ``size`` (S/M/L)."""

    path = tmp_path / "options.pdf"
    canv = canvas.Canvas(str(path), pagesize=letter)
    form = canv.acroForm
    form.radio(name="color", value="red", selected=True, x=72, y=650, buttonStyle="circle")
    form.radio(name="color", value="blue", selected=False, x=110, y=650, buttonStyle="circle")
    form.choice(name="size", value="S", options=["S", "M", "L"], x=72, y=600, width=100, height=20)
    canv.showPage()
    canv.save()
    return path


@pytest.fixture()
def png_image(tmp_path: Path) -> Path:
    path = tmp_path / "signature.png"
    Image.new("RGB", (40, 20), "blue").save(path, "PNG")
    return path


@pytest.fixture()
def gif_image(tmp_path: Path) -> Path:
    path = tmp_path / "signature.gif"
    Image.new("RGB", (40, 20), "red").save(path, "GIF")
    return path
