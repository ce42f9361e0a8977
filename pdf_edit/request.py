"""Build a single :class:`EditSet` from CLI flags, JSON configs and templates.

Sources are combined by union: a template, a config file and ad-hoc flags
all contribute their edits, in that order. Nothing overrides anything.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .exceptions import ConfigParseError, MalformedGeometryError, TemplateNotFoundError
from .geometry import coerce_box, coerce_color, coerce_point, parse_box, parse_color, parse_point
from .templates import TemplateCatalog, catalog as default_catalog
from .types import (
    BLACK,
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    EditSet,
    FormFieldEdit,
    ImageEdit,
    SignatureEdit,
    TextEdit,
)
from .utils import get_logger

LOGGER = get_logger("pdf_edit.request")

CONFIG_SECTIONS = ("text_insertions", "signatures", "form_data", "image_insertions")


@dataclass
class EditRequest:
    """The resolved edit set plus any non-fatal warnings raised while building it."""

    edit_set: EditSet
    warnings: List[str] = field(default_factory=list)


# ----------------------------------------------------------------------
# Single edits from CLI flags
# ----------------------------------------------------------------------
def _resolve_page(page: Optional[int]) -> int:
    if page is None:
        return 0
    if isinstance(page, bool) or not isinstance(page, int):
        raise MalformedGeometryError(f"Invalid page index {page!r}: expected an integer.")
    if page < 0:
        raise MalformedGeometryError(f"Invalid page index {page}: must be >= 0.")
    return page


def text_edit_from_flags(
    text: str,
    position: str,
    *,
    page: Optional[int] = None,
    font_size: Optional[float] = None,
    color: Optional[str] = None,
    font_name: Optional[str] = None,
) -> TextEdit:
    if not text:
        raise MalformedGeometryError("Text to insert cannot be empty")
    return TextEdit(
        text=text,
        position=parse_point(position),
        page_index=_resolve_page(page),
        font_size=font_size or DEFAULT_FONT_SIZE,
        color=parse_color(color) if color else BLACK,
        font_name=font_name or DEFAULT_FONT_NAME,
    )


def signature_edit_from_flags(
    box: str,
    *,
    image_path: Optional[str] = None,
    text: Optional[str] = None,
    page: Optional[int] = None,
    font_size: Optional[float] = None,
) -> SignatureEdit:
    if (image_path is None) == (text is None):
        raise MalformedGeometryError("A signature needs exactly one of an image or a text")
    return SignatureEdit(
        box=parse_box(box),
        image_path=image_path,
        text=text,
        page_index=_resolve_page(page),
        font_size=font_size or DEFAULT_FONT_SIZE,
    )


def image_edit_from_flags(image_path: str, box: str, *, page: Optional[int] = None) -> ImageEdit:
    return ImageEdit(image_path=image_path, box=parse_box(box), page_index=_resolve_page(page))


def parse_fill(spec: str) -> FormFieldEdit:
    """Parse ``name=value`` into a form field edit."""

    name, sep, value = spec.partition("=")
    if not sep or not name.strip():
        raise MalformedGeometryError(f"Invalid form fill '{spec}'. Expected 'name=value'.")
    return FormFieldEdit(name=name.strip(), value=value)


# ----------------------------------------------------------------------
# JSON configuration
# ----------------------------------------------------------------------
def _require_mapping(item: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        raise ConfigParseError(f"{where}: expected an object, got {type(item).__name__}")
    return item


def _require_list(value: Any, where: str) -> Sequence[Any]:
    if not isinstance(value, list):
        raise ConfigParseError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _config_page(item: Mapping[str, Any]) -> int:
    return _resolve_page(item.get("page", item.get("page_index")))


def _config_font_size(item: Mapping[str, Any]) -> float:
    size = item.get("font_size", DEFAULT_FONT_SIZE)
    if isinstance(size, bool) or not isinstance(size, (int, float)) or size <= 0:
        raise MalformedGeometryError(f"Invalid font size {size!r}")
    return float(size)


def _text_from_config(item: Mapping[str, Any]) -> TextEdit:
    text = item["text"]
    if not isinstance(text, str) or not text:
        raise ConfigParseError("'text' must be a non-empty string")
    return TextEdit(
        text=text,
        position=coerce_point(item["position"]),
        page_index=_config_page(item),
        font_size=_config_font_size(item),
        color=coerce_color(item["color"]) if "color" in item else BLACK,
        font_name=str(item.get("font_name", DEFAULT_FONT_NAME)),
        all_pages=bool(item.get("all_pages", False)),
    )


def _signature_from_config(item: Mapping[str, Any]) -> SignatureEdit:
    image_path = item.get("image_path")
    text = item.get("text")
    if (image_path is None) == (text is None):
        raise ConfigParseError("a signature needs exactly one of 'image_path' or 'text'")
    return SignatureEdit(
        box=coerce_box(item["position"]),
        image_path=None if image_path is None else str(image_path),
        text=None if text is None else str(text),
        page_index=_config_page(item),
        font_size=_config_font_size(item),
        color=coerce_color(item["color"]) if "color" in item else BLACK,
        all_pages=bool(item.get("all_pages", False)),
    )


def _image_from_config(item: Mapping[str, Any]) -> ImageEdit:
    return ImageEdit(
        image_path=str(item["image_path"]),
        box=coerce_box(item["position"]),
        page_index=_config_page(item),
        all_pages=bool(item.get("all_pages", False)),
    )


def _field_value(value: Any, where: str) -> Any:
    if isinstance(value, (str, bool)):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise ConfigParseError(f"{where}: field value must be a string, number or boolean")


def _form_fields_from_config(section: Any) -> List[FormFieldEdit]:
    if isinstance(section, Mapping):
        return [
            FormFieldEdit(name=str(name), value=_field_value(value, f"form_data.{name}"))
            for name, value in section.items()
        ]

    fields: List[FormFieldEdit] = []
    for index, item in enumerate(_require_list(section, "form_data")):
        where = f"form_data[{index}]"
        item = _require_mapping(item, where)
        try:
            name = item["field_name"]
            value = item["field_value"]
        except KeyError as exc:
            raise ConfigParseError(f"{where}: missing key {exc}") from None
        fields.append(FormFieldEdit(name=str(name), value=_field_value(value, where)))
    return fields


def _parse_items(section: Any, name: str, parse) -> List[Any]:
    edits = []
    for index, item in enumerate(_require_list(section, name)):
        where = f"{name}[{index}]"
        item = _require_mapping(item, where)
        try:
            edits.append(parse(item))
        except ConfigParseError as exc:
            raise ConfigParseError(f"{where}: {exc.message}") from exc
        except KeyError as exc:
            raise ConfigParseError(f"{where}: missing key {exc}") from None
        except (MalformedGeometryError, TypeError, ValueError) as exc:
            raise ConfigParseError(f"{where}: {exc}") from exc
    return edits


def edit_set_from_dict(data: Any) -> EditSet:
    """Validate a decoded edit configuration and turn it into an :class:`EditSet`."""

    data = _require_mapping(data, "configuration")
    unknown = sorted(set(data) - set(CONFIG_SECTIONS))
    if unknown:
        raise ConfigParseError(
            f"Unknown configuration section(s): {', '.join(unknown)}. "
            f"Expected any of: {', '.join(CONFIG_SECTIONS)}"
        )

    return EditSet(
        texts=_parse_items(data.get("text_insertions", []), "text_insertions", _text_from_config),
        signatures=_parse_items(data.get("signatures", []), "signatures", _signature_from_config),
        form_fields=_form_fields_from_config(data.get("form_data", [])),
        images=_parse_items(data.get("image_insertions", []), "image_insertions", _image_from_config),
    )


def load_edit_config(path: str | Path) -> EditSet:
    """Load a JSON edit configuration, failing fast on any problem."""

    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigParseError(f"Unable to read configuration {config_path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(
            f"Malformed JSON in {config_path} (line {exc.lineno}, column {exc.colno}): {exc.msg}"
        ) from exc

    try:
        edit_set = edit_set_from_dict(data)
    except ConfigParseError as exc:
        raise ConfigParseError(f"{config_path}: {exc.message}") from exc

    LOGGER.debug("Loaded %d edit(s) from %s", edit_set.total, config_path)
    return edit_set


# ----------------------------------------------------------------------
# Composition
# ----------------------------------------------------------------------
def build_edit_request(
    *,
    single_edits: Iterable[Any] = (),
    config_path: str | Path | None = None,
    template: Optional[str] = None,
    all_pages: bool = False,
    now: Optional[datetime] = None,
    templates: Optional[TemplateCatalog] = None,
) -> EditRequest:
    """
    Combine every edit source into one :class:`EditRequest`.

    Args:
        single_edits: Edits built from CLI flags
        config_path: Optional JSON edit configuration
        template: Optional template name; an unknown name only adds a warning
        all_pages: Flag every page-addressed edit to repeat on all pages
        now: Time used to evaluate the template
        templates: Catalog to resolve ``template`` against

    Raises:
        ConfigParseError: If the configuration file is unreadable or invalid
    """

    warnings: List[str] = []
    edit_set = EditSet()

    if template:
        try:
            edit_set = edit_set + (templates or default_catalog).resolve(template, now)
        except TemplateNotFoundError as exc:
            LOGGER.warning("%s; continuing without template edits", exc.message)
            warnings.append(exc.message)

    if config_path is not None:
        edit_set = edit_set + load_edit_config(config_path)

    texts, signatures, form_fields, images = [], [], [], []
    for edit in single_edits:
        if isinstance(edit, TextEdit):
            texts.append(edit)
        elif isinstance(edit, SignatureEdit):
            signatures.append(edit)
        elif isinstance(edit, FormFieldEdit):
            form_fields.append(edit)
        elif isinstance(edit, ImageEdit):
            images.append(edit)
        else:
            raise TypeError(f"Unsupported edit type: {type(edit).__name__}")
    edit_set = edit_set + EditSet(texts=texts, signatures=signatures, form_fields=form_fields, images=images)

    if all_pages:
        edit_set = edit_set.with_all_pages()

    return EditRequest(edit_set=edit_set, warnings=warnings)


__all__ = [
    "EditRequest",
    "build_edit_request",
    "edit_set_from_dict",
    "load_edit_config",
    "text_edit_from_flags",
    "signature_edit_from_flags",
    "image_edit_from_flags",
    "parse_fill",
]
