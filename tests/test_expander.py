from __future__ import annotations

from dataclasses import replace

from pdf_edit.expander import expand_all_pages
from pdf_edit.types import EditSet, FormFieldEdit, ImageEdit, SignatureEdit, TextEdit


def test_all_pages_text_expands_to_one_edit_per_page() -> None:
    stamp = TextEdit("CONFIDENTIAL", (90, 396), font_size=60, color=(0.8, 0.8, 0.8), all_pages=True)
    expanded = expand_all_pages(EditSet(texts=[stamp]), 4)

    assert len(expanded.texts) == 4
    assert [edit.page_index for edit in expanded.texts] == [0, 1, 2, 3]
    for edit in expanded.texts:
        assert not edit.all_pages
        assert replace(edit, page_index=stamp.page_index, all_pages=True) == stamp


def test_non_flagged_edits_pass_through() -> None:
    plain = TextEdit("Only page 2", (10, 10), page_index=1)
    field = FormFieldEdit("name", "Jane")
    edit_set = EditSet(texts=[plain], form_fields=[field])

    assert expand_all_pages(edit_set, 5) == edit_set


def test_expansion_keeps_list_order() -> None:
    first = TextEdit("first", (1, 1))
    everywhere = TextEdit("everywhere", (2, 2), all_pages=True)
    last = TextEdit("last", (3, 3), page_index=2)
    expanded = expand_all_pages(EditSet(texts=[first, everywhere, last]), 3)

    assert [edit.text for edit in expanded.texts] == ["first", "everywhere", "everywhere", "everywhere", "last"]


def test_signatures_and_images_expand() -> None:
    edit_set = EditSet(
        signatures=[SignatureEdit(box=(1, 1, 5, 5), text="JD", all_pages=True)],
        images=[ImageEdit("logo.png", (0, 0, 10, 10), all_pages=True)],
    )
    expanded = expand_all_pages(edit_set, 2)

    assert [edit.page_index for edit in expanded.signatures] == [0, 1]
    assert [edit.page_index for edit in expanded.images] == [0, 1]


def test_shared_edit_set_is_not_mutated() -> None:
    shared = EditSet(texts=[TextEdit("stamp", (1, 1), all_pages=True)])

    three = expand_all_pages(shared, 3)
    ten = expand_all_pages(shared, 10)

    assert len(three.texts) == 3
    assert len(ten.texts) == 10
    assert len(shared.texts) == 1
    assert shared.texts[0].all_pages
