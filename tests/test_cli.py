from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from pypdf import PdfReader
from rich.console import Console

from pdf_edit import cli as cli_module
from pdf_edit.cli import cli


@pytest.fixture()
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Wide console so tables and paths are not wrapped in captured output.
    monkeypatch.setattr(cli_module, "console", Console(width=200))
    return CliRunner()


def test_modify_adds_text(runner: CliRunner, two_page_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.pdf"
    result = runner.invoke(
        cli, ["modify", str(two_page_pdf), str(output), "--add-text", "APPROVED", "--position", "450,50"]
    )

    assert result.exit_code == 0, result.output
    assert "Modified PDF saved" in result.output
    assert "APPROVED" in (PdfReader(str(output)).pages[0].extract_text() or "")


def test_modify_with_template_and_report(runner: CliRunner, two_page_pdf: Path, tmp_path: Path) -> None:
    report = tmp_path / "report.md"
    result = runner.invoke(
        cli,
        ["modify", str(two_page_pdf), str(tmp_path / "out.pdf"), "-t", "approval-stamp", "--report", str(report)],
    )

    assert result.exit_code == 0, result.output
    assert "### Text Insertions (2)" in report.read_text(encoding="utf-8")


def test_modify_fill_and_skipped_field(runner: CliRunner, form_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        cli,
        ["modify", str(form_pdf), str(tmp_path / "out.pdf"), "--fill", "name=Jane", "--fill", "missing=1"],
    )

    assert result.exit_code == 0, result.output
    assert "Skipped field 'missing'" in result.output


def test_modify_unknown_template_warns(runner: CliRunner, two_page_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        cli,
        ["modify", str(two_page_pdf), str(tmp_path / "out.pdf"), "-t", "nope", "--add-text", "x", "--position", "1,1"],
    )

    assert result.exit_code == 0, result.output
    assert "Unknown template 'nope'" in result.output


def test_modify_corrupt_source_fails(runner: CliRunner, corrupt_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.pdf"
    result = runner.invoke(cli, ["modify", str(corrupt_pdf), str(output), "--add-text", "x", "--position", "1,1"])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert not output.exists()


def test_modify_malformed_position_fails_before_io(runner: CliRunner, two_page_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.pdf"
    result = runner.invoke(cli, ["modify", str(two_page_pdf), str(output), "--add-text", "x", "--position", "1"])

    assert result.exit_code == 1
    assert not output.exists()


def test_modify_requires_position(runner: CliRunner, two_page_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["modify", str(two_page_pdf), str(tmp_path / "out.pdf"), "--add-text", "x"])

    assert result.exit_code == 2
    assert "--position" in result.output


def test_modify_invalid_config(runner: CliRunner, two_page_pdf: Path, tmp_path: Path) -> None:
    config = tmp_path / "edits.json"
    config.write_text(json.dumps({"text_insertions": [{"text": "A"}]}), encoding="utf-8")
    output = tmp_path / "out.pdf"

    result = runner.invoke(cli, ["modify", str(two_page_pdf), str(output), "--config", str(config)])

    assert result.exit_code == 1
    assert "text_insertions[0]" in result.output
    assert not output.exists()


def test_batch_modify_reports_failures_but_exits_zero(runner: CliRunner, pdf_factory, tmp_path: Path) -> None:
    input_dir = tmp_path / "in"
    pdf_factory("a.pdf", directory=input_dir)
    (input_dir / "b.pdf").write_bytes(b"broken")
    pdf_factory("c.pdf", pages=3, directory=input_dir)
    output_dir = tmp_path / "out"

    result = runner.invoke(
        cli, ["batch-modify", str(input_dir), str(output_dir), "-t", "confidential-watermark", "--parallel"]
    )

    assert result.exit_code == 0, result.output
    assert "Succeeded: 2" in result.output
    assert "Failed: 1" in result.output
    assert sorted(path.name for path in output_dir.iterdir()) == ["a.pdf", "c.pdf"]


def test_batch_modify_preview(runner: CliRunner, pdf_factory, tmp_path: Path) -> None:
    input_dir = tmp_path / "in"
    pdf_factory("a.pdf", directory=input_dir)
    pdf_factory("b.pdf", directory=input_dir)
    output_dir = tmp_path / "out"

    result = runner.invoke(
        cli,
        ["batch-modify", str(input_dir), str(output_dir), "--add-text", "DRAFT", "--position", "10,10", "--preview-only"],
    )

    assert result.exit_code == 0, result.output
    assert "2 file(s) would be modified" in result.output
    assert "DRAFT" in result.output
    assert not output_dir.exists()


def test_batch_modify_missing_directory(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["batch-modify", str(tmp_path / "nope"), str(tmp_path / "out"), "-t", "review-stamp"])

    assert result.exit_code == 1
    assert "Directory not found" in result.output


def test_templates_lists_edit_templates(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["templates", "--edit-templates"])

    assert result.exit_code == 0
    for name in ("approval-stamp", "confidential-watermark", "signature-bottom-right", "review-stamp"):
        assert name in result.output


def test_validate(runner: CliRunner, two_page_pdf: Path, corrupt_pdf: Path) -> None:
    ok = runner.invoke(cli, ["validate", str(two_page_pdf)])
    bad = runner.invoke(cli, ["validate", str(corrupt_pdf)])

    assert ok.exit_code == 0
    assert "passed all safety checks" in ok.output
    assert bad.exit_code == 1
    assert "Invalid PDF file format" in bad.output


def test_extract_and_search(runner: CliRunner, text_pdf: Path, tmp_path: Path) -> None:
    extracted = runner.invoke(cli, ["extract", str(text_pdf), "--pages", "2"])
    assert extracted.exit_code == 0
    assert "invoice 1002" in extracted.output
    assert "Invoice 1001" not in extracted.output

    found = runner.invoke(cli, ["search", str(text_pdf), "invoice"])
    assert found.exit_code == 0
    assert "Found 2 match(es)" in found.output

    converted = tmp_path / "report.html"
    result = runner.invoke(cli, ["convert", str(text_pdf), str(converted), "-f", "html"])
    assert result.exit_code == 0
    assert "<h1>Quarterly Report</h1>" in converted.read_text(encoding="utf-8")


def test_info(runner: CliRunner, form_pdf: Path) -> None:
    result = runner.invoke(cli, ["info", str(form_pdf), "--detailed"])

    assert result.exit_code == 0, result.output
    assert "Form fields" in result.output
    assert "agree" in result.output
