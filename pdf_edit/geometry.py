"""Parsing of coordinates, boxes, colors and page range expressions."""

from __future__ import annotations

import math
import re
from typing import Any, List, Sequence

from .exceptions import MalformedGeometryError
from .types import Box, Color, Point

_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")


def _parse_numbers(spec: str, expected: int, what: str) -> List[float]:
    if not isinstance(spec, str) or not spec.strip():
        raise MalformedGeometryError(f"Empty {what} specification")

    tokens = [token.strip() for token in spec.split(",")]
    if len(tokens) != expected:
        raise MalformedGeometryError(
            f"Invalid {what} '{spec}': expected {expected} comma-separated numbers, got {len(tokens)}."
        )
    return _to_floats(tokens, spec, what)


def _to_floats(tokens: Sequence[Any], spec: Any, what: str) -> List[float]:
    values: List[float] = []
    for token in tokens:
        if isinstance(token, bool):
            raise MalformedGeometryError(f"Invalid {what} '{spec}': '{token}' is not a number.")
        try:
            value = float(token)
        except (TypeError, ValueError):
            raise MalformedGeometryError(
                f"Invalid {what} '{spec}': '{token}' is not a number."
            ) from None
        if not math.isfinite(value):
            raise MalformedGeometryError(f"Invalid {what} '{spec}': '{token}' is not finite.")
        values.append(value)
    return values


def _check_box(values: Sequence[float], spec: Any) -> Box:
    x1, y1, x2, y2 = values
    if x2 <= x1 or y2 <= y1:
        raise MalformedGeometryError(
            f"Invalid box '{spec}': expected x2 > x1 and y2 > y1."
        )
    return (x1, y1, x2, y2)


def parse_box(spec: str) -> Box:
    """Parse ``"x1,y1,x2,y2"`` into a bounding box."""

    return _check_box(_parse_numbers(spec, 4, "box"), spec)


def parse_point(spec: str) -> Point:
    """Parse ``"x,y"`` into a point."""

    x, y = _parse_numbers(spec, 2, "position")
    return (x, y)


def parse_color(spec: str) -> Color:
    """Parse ``"r,g,b"`` with components in ``[0, 1]``."""

    return _check_color(_parse_numbers(spec, 3, "color"), spec)


def _check_color(values: Sequence[float], spec: Any) -> Color:
    if any(value < 0 or value > 1 for value in values):
        raise MalformedGeometryError(
            f"Invalid color '{spec}': components must be between 0 and 1."
        )
    r, g, b = values
    return (r, g, b)


def coerce_point(value: Any) -> Point:
    """Accept a point either as a string or as a two element sequence."""

    if isinstance(value, str):
        return parse_point(value)
    if isinstance(value, (list, tuple)) and len(value) == 2:
        x, y = _to_floats(value, value, "position")
        return (x, y)
    raise MalformedGeometryError(f"Invalid position {value!r}: expected [x, y].")


def coerce_box(value: Any) -> Box:
    """Accept a box either as a string or as a four element sequence."""

    if isinstance(value, str):
        return parse_box(value)
    if isinstance(value, (list, tuple)) and len(value) == 4:
        return _check_box(_to_floats(value, value, "box"), value)
    raise MalformedGeometryError(f"Invalid box {value!r}: expected [x1, y1, x2, y2].")


def coerce_color(value: Any) -> Color:
    if isinstance(value, str):
        return parse_color(value)
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return _check_color(_to_floats(value, value, "color"), value)
    raise MalformedGeometryError(f"Invalid color {value!r}: expected [r, g, b].")


def parse_page_range(spec: str, total_pages: int) -> List[int]:
    """
    Resolve a page range expression against a document of ``total_pages``.

    Tokens are comma separated; ``a-b`` is a closed range and a bare number
    is a single page. Pages outside ``[1, total_pages]`` are dropped rather
    than rejected, so ``"1-1000"`` on a ten page document yields pages 1-10.
    A reversed range such as ``"5-3"`` yields nothing.

    Returns:
        Strictly ascending 1-based page numbers without duplicates.
    """

    if spec is None or not spec.strip():
        raise MalformedGeometryError("Page range cannot be empty")

    pages: set[int] = set()
    for token in spec.split(","):
        token = token.strip()
        if not token:
            continue

        if "-" in token:
            match = _RANGE_RE.match(token)
            if not match:
                raise MalformedGeometryError(
                    f"Invalid page range '{token}'. Expected 'start-end'."
                )
            start = max(int(match.group(1)), 1)
            end = min(int(match.group(2)), total_pages)
            pages.update(range(start, end + 1))
        else:
            if not token.isdigit():
                raise MalformedGeometryError(
                    f"Invalid page number '{token}'. Expected a positive integer."
                )
            page_num = int(token)
            if 1 <= page_num <= total_pages:
                pages.add(page_num)

    return sorted(pages)


__all__ = [
    "parse_box",
    "parse_point",
    "parse_color",
    "parse_page_range",
    "coerce_point",
    "coerce_box",
    "coerce_color",
]
