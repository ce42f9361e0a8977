"""Catalog of named edit templates.

A template is a factory taking the current time and returning an
:class:`EditSet`. Templates never look at a document, so a batch run can
evaluate a template once and hand the same edits to every file.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from .exceptions import TemplateNotFoundError
from .types import EditSet, SignatureEdit, TextEdit

TemplateFactory = Callable[[datetime], EditSet]


@dataclass(frozen=True)
class EditTemplate:
    name: str
    description: str
    factory: TemplateFactory

    def build(self, now: Optional[datetime] = None) -> EditSet:
        return self.factory(now or datetime.now())


class TemplateCatalog:
    """Registry storing available edit templates."""

    def __init__(self) -> None:
        self._templates: Dict[str, EditTemplate] = {}

    def register(self, name: str, description: str, factory: TemplateFactory) -> None:
        if name in self._templates:
            raise ValueError(f"Template '{name}' is already registered")
        self._templates[name] = EditTemplate(name=name, description=description, factory=factory)

    def resolve(self, name: str, now: Optional[datetime] = None) -> EditSet:
        try:
            template = self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(
                f"Unknown template '{name}'. Available: {', '.join(self.names())}"
            ) from None
        return template.build(now)

    def get(self, name: str) -> EditTemplate | None:
        return self._templates.get(name)

    def names(self) -> Iterable[str]:
        return sorted(self._templates.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._templates


catalog = TemplateCatalog()


def edit_template(name: str, description: str):
    def decorator(factory: TemplateFactory) -> TemplateFactory:
        catalog.register(name, description, factory)
        return factory

    return decorator


@edit_template("approval-stamp", "Green APPROVED stamp with the approval date, bottom right of page 1")
def _approval_stamp(now: datetime) -> EditSet:
    return EditSet(
        texts=(
            TextEdit("APPROVED", (450, 50), font_size=16, color=(0.0, 0.5, 0.0), font_name="Helvetica-Bold"),
            TextEdit(f"Date: {now:%Y-%m-%d}", (450, 35), font_size=10),
        )
    )


@edit_template("confidential-watermark", "Large grey CONFIDENTIAL across the middle of every page")
def _confidential_watermark(now: datetime) -> EditSet:
    return EditSet(
        texts=(
            TextEdit(
                "CONFIDENTIAL",
                (90, 396),
                font_size=60,
                color=(0.8, 0.8, 0.8),
                font_name="Helvetica-Bold",
                all_pages=True,
            ),
        )
    )


@edit_template("signature-bottom-right", "Text signature block in the bottom right corner of page 1")
def _signature_bottom_right(now: datetime) -> EditSet:
    return EditSet(
        signatures=(
            SignatureEdit(box=(400, 50, 550, 100), text="Authorized Signature", font_size=14),
        )
    )


@edit_template("review-stamp", "Blue REVIEWED stamp with a review timestamp, bottom left of page 1")
def _review_stamp(now: datetime) -> EditSet:
    return EditSet(
        texts=(
            TextEdit("REVIEWED", (50, 50), font_size=14, color=(0.0, 0.0, 0.8), font_name="Helvetica-Bold"),
            TextEdit(f"Reviewed on {now:%Y-%m-%d %H:%M}", (50, 35), font_size=9),
        )
    )


def resolve_template(name: str, now: Optional[datetime] = None) -> EditSet:
    """Resolve ``name`` against the built-in catalog."""
    return catalog.resolve(name, now)


__all__ = ["EditTemplate", "TemplateCatalog", "catalog", "edit_template", "resolve_template"]
