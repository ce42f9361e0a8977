from __future__ import annotations

from datetime import datetime

import pytest

from pdf_edit.exceptions import TemplateNotFoundError
from pdf_edit.templates import TemplateCatalog, catalog, resolve_template
from pdf_edit.types import EditSet, TextEdit

NOW = datetime(2024, 3, 15, 9, 30)


def test_builtin_templates_registered() -> None:
    assert list(catalog.names()) == [
        "approval-stamp",
        "confidential-watermark",
        "review-stamp",
        "signature-bottom-right",
    ]


def test_approval_stamp_embeds_date() -> None:
    edits = resolve_template("approval-stamp", NOW)
    texts = [edit.text for edit in edits.texts]
    assert texts == ["APPROVED", "Date: 2024-03-15"]
    assert all(edit.page_index == 0 and not edit.all_pages for edit in edits.texts)


def test_confidential_watermark_targets_all_pages() -> None:
    edits = resolve_template("confidential-watermark", NOW)
    assert len(edits.texts) == 1
    assert edits.texts[0].text == "CONFIDENTIAL"
    assert edits.texts[0].all_pages


def test_signature_template_is_text_signature() -> None:
    edits = resolve_template("signature-bottom-right", NOW)
    assert edits.total == 1
    signature = edits.signatures[0]
    assert not signature.is_image
    assert signature.box == (400, 50, 550, 100)


def test_review_stamp_has_timestamp() -> None:
    edits = resolve_template("review-stamp", NOW)
    assert len(edits.texts) == 2
    assert edits.texts[1].text == "Reviewed on 2024-03-15 09:30"


def test_same_time_gives_identical_edit_sets() -> None:
    assert resolve_template("approval-stamp", NOW) == resolve_template("approval-stamp", NOW)


def test_unknown_template_raises() -> None:
    with pytest.raises(TemplateNotFoundError) as excinfo:
        resolve_template("does-not-exist", NOW)
    assert "approval-stamp" in str(excinfo.value)


def test_custom_catalog_registration() -> None:
    custom = TemplateCatalog()
    custom.register("hello", "Says hello", lambda now: EditSet(texts=[TextEdit("hello", (10, 10))]))

    assert "hello" in custom
    assert custom.resolve("hello").texts[0].text == "hello"
    with pytest.raises(ValueError):
        custom.register("hello", "Again", lambda now: EditSet())
