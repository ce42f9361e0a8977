from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from pdf_edit.exceptions import ConfigParseError, MalformedGeometryError
from pdf_edit.request import (
    build_edit_request,
    edit_set_from_dict,
    load_edit_config,
    parse_fill,
    signature_edit_from_flags,
    text_edit_from_flags,
)
from pdf_edit.templates import resolve_template
from pdf_edit.types import BLACK, FormFieldEdit, TextEdit

NOW = datetime(2024, 3, 15, 9, 30)


def _write_config(tmp_path: Path, data) -> Path:
    path = tmp_path / "edits.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_text_edit_from_flags_defaults() -> None:
    edit = text_edit_from_flags("Hello", "10,20")
    assert edit == TextEdit("Hello", (10.0, 20.0), page_index=0, color=BLACK)


def test_text_edit_from_flags_rejects_negative_page() -> None:
    with pytest.raises(MalformedGeometryError):
        text_edit_from_flags("Hello", "10,20", page=-1)


def test_signature_edit_needs_one_source() -> None:
    with pytest.raises(MalformedGeometryError):
        signature_edit_from_flags("1,1,2,2")
    with pytest.raises(MalformedGeometryError):
        signature_edit_from_flags("1,1,2,2", image_path="a.png", text="Jane")
    assert signature_edit_from_flags("1,1,2,2", text="Jane").text == "Jane"


def test_parse_fill() -> None:
    assert parse_fill("name=Jane Doe") == FormFieldEdit("name", "Jane Doe")
    assert parse_fill("note=a=b") == FormFieldEdit("note", "a=b")
    with pytest.raises(MalformedGeometryError):
        parse_fill("no-equals-sign")


def test_template_and_adhoc_flag_are_additive() -> None:
    template_edits = resolve_template("approval-stamp", NOW)
    request = build_edit_request(
        single_edits=[text_edit_from_flags("Ref 42", "50,50")],
        template="approval-stamp",
        now=NOW,
    )

    assert request.edit_set.total == template_edits.total + 1
    assert request.edit_set.texts[-1].text == "Ref 42"
    assert request.warnings == []


def test_template_config_and_flags_combine(tmp_path: Path) -> None:
    config = _write_config(
        tmp_path,
        {
            "text_insertions": [{"text": "DRAFT", "position": [72, 720]}],
            "form_data": {"name": "Jane"},
        },
    )
    request = build_edit_request(
        single_edits=[parse_fill("agree=yes")],
        config_path=config,
        template="signature-bottom-right",
        now=NOW,
    )
    edit_set = request.edit_set

    assert len(edit_set.signatures) == 1
    assert [edit.text for edit in edit_set.texts] == ["DRAFT"]
    assert [field.name for field in edit_set.form_fields] == ["name", "agree"]


def test_unknown_template_is_a_warning() -> None:
    request = build_edit_request(
        single_edits=[text_edit_from_flags("Hello", "1,1")],
        template="no-such-template",
    )
    assert request.edit_set.total == 1
    assert len(request.warnings) == 1
    assert "no-such-template" in request.warnings[0]


def test_all_pages_flag_marks_page_edits() -> None:
    request = build_edit_request(
        single_edits=[text_edit_from_flags("Hello", "1,1"), parse_fill("name=Jane")],
        all_pages=True,
    )
    assert all(edit.all_pages for edit in request.edit_set.texts)
    assert request.edit_set.form_fields == (FormFieldEdit("name", "Jane"),)


def test_load_full_config(tmp_path: Path, png_image: Path) -> None:
    config = _write_config(
        tmp_path,
        {
            "text_insertions": [
                {"text": "A", "position": "10,20", "page": 1, "font_size": 18,
                 "color": [1, 0, 0], "font_name": "Times-Roman", "all_pages": False}
            ],
            "signatures": [
                {"position": [400, 50, 550, 100], "image_path": str(png_image)},
                {"position": "10,10,100,40", "text": "J. Doe", "font_size": 10},
            ],
            "form_data": [
                {"field_name": "agree", "field_value": True},
                {"field_name": "age", "field_value": 42},
            ],
            "image_insertions": [{"image_path": str(png_image), "position": [0, 0, 50, 25], "all_pages": True}],
        },
    )
    edit_set = load_edit_config(config)

    text = edit_set.texts[0]
    assert (text.position, text.page_index, text.font_size, text.color, text.font_name) == (
        (10.0, 20.0), 1, 18.0, (1.0, 0.0, 0.0), "Times-Roman"
    )
    assert edit_set.signatures[0].is_image
    assert edit_set.signatures[1].text == "J. Doe"
    assert edit_set.form_fields == (FormFieldEdit("agree", True), FormFieldEdit("age", "42"))
    assert edit_set.images[0].all_pages


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"unknown_section": []},
        {"text_insertions": {"text": "A"}},
        {"text_insertions": [{"position": [1, 1]}]},
        {"text_insertions": [{"text": "A", "position": [1]}]},
        {"text_insertions": [{"text": "A", "position": [1, 1], "page": -2}]},
        {"text_insertions": [{"text": "A", "position": [1, 1], "color": [2, 0, 0]}]},
        {"signatures": [{"position": [1, 1, 2, 2]}]},
        {"signatures": [{"position": [1, 1, 2, 2], "text": "x", "image_path": "y.png"}]},
        {"image_insertions": [{"image_path": "a.png", "position": [10, 10, 5, 5]}]},
        {"form_data": [{"field_name": "a"}]},
        {"form_data": {"a": None}},
    ],
)
def test_invalid_config_raises(tmp_path: Path, data) -> None:
    with pytest.raises(ConfigParseError):
        load_edit_config(_write_config(tmp_path, data))


def test_malformed_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigParseError):
        load_edit_config(path)


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigParseError):
        build_edit_request(config_path=tmp_path / "missing.json")


def test_edit_set_from_dict_empty() -> None:
    assert edit_set_from_dict({}).is_empty
