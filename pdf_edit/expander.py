"""Expansion of all-pages edits against a concrete page count."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, TypeVar

from .types import EditSet

E = TypeVar("E")


def _expand(edits: Iterable[E], total_pages: int) -> List[E]:
    expanded: List[E] = []
    for edit in edits:
        if getattr(edit, "all_pages", False):
            expanded.extend(
                replace(edit, page_index=index, all_pages=False) for index in range(total_pages)
            )
        else:
            expanded.append(edit)
    return expanded


def expand_all_pages(edit_set: EditSet, total_pages: int) -> EditSet:
    """
    Replace every all-pages edit with one copy per page.

    Copies keep their position in the list and are ordered by page index.
    The returned set never contains all-pages edits, and ``edit_set`` is
    left untouched so it can be shared between documents.

    Args:
        edit_set: Edits as requested, possibly flagged all-pages
        total_pages: Page count of the document about to be modified

    Returns:
        A new :class:`EditSet`
    """

    if total_pages < 0:
        raise ValueError(f"total_pages must be >= 0, got {total_pages}")
    if not edit_set.has_all_pages_edits:
        return edit_set

    return EditSet(
        texts=_expand(edit_set.texts, total_pages),
        signatures=_expand(edit_set.signatures, total_pages),
        form_fields=edit_set.form_fields,
        images=_expand(edit_set.images, total_pages),
    )


__all__ = ["expand_all_pages"]
