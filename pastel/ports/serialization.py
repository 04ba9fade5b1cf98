"""
Element <-> record conversion.

Records are JSON-compatible dicts. Key names are stable across save/load:

    {"id", "type", "x", "y", "width", "height", "rotation", "zIndex",
     "backgroundColor"}                       # rectangle
    {..., "color", "content", "fontSize"}     # text
"""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from pastel.core.element import Element, ElementKind, RectangleElement, TextElement

logger = logging.getLogger(__name__)


class RecordError(ValueError):
    """Raised when a record cannot be turned into an element."""


def element_to_record(element: Element) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": element.id,
        "type": element.kind.value,
        "x": element.x,
        "y": element.y,
        "width": element.width,
        "height": element.height,
        "rotation": element.rotation,
        "zIndex": element.z_index,
    }
    if isinstance(element, RectangleElement):
        record["backgroundColor"] = element.fill_color
    elif isinstance(element, TextElement):
        record["color"] = element.text_color
        record["content"] = element.content
        record["fontSize"] = element.font_size
    return record


def elements_to_records(elements: Iterable[Element]) -> list[dict[str, Any]]:
    return [element_to_record(e) for e in elements]


def _number(record: Mapping[str, Any], key: str) -> float:
    value = record.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RecordError(f"'{key}' must be a number, got {value!r}")
    try:
        value = float(value)
    except OverflowError as e:
        raise RecordError(f"'{key}' is out of range") from e
    if not math.isfinite(value):
        raise RecordError(f"'{key}' must be finite, got {value!r}")
    return value


def _string(record: Mapping[str, Any], key: str, default: str) -> str:
    value = record.get(key, default)
    if not isinstance(value, str):
        raise RecordError(f"'{key}' must be a string, got {value!r}")
    return value


def element_from_record(record: Any) -> Element:
    """
    Build an element from a record.

    Size and rotation are not normalized here; the Scene does that on load.

    :param record: dict produced by ``element_to_record``
    :return: Element
    :raises RecordError: if the record is not usable
    """
    if not isinstance(record, Mapping):
        raise RecordError(f"Record must be an object, got {type(record).__name__}")

    element_id = record.get("id")
    if not isinstance(element_id, str) or not element_id:
        raise RecordError(f"'id' must be a non-empty string, got {element_id!r}")
    try:
        kind = ElementKind(record.get("type"))
    except ValueError as e:
        raise RecordError(f"Unknown element type: {record.get('type')!r}") from e

    common = dict(
        id=element_id,
        x=_number(record, "x"),
        y=_number(record, "y"),
        width=_number(record, "width"),
        height=_number(record, "height"),
        rotation=_number(record, "rotation") if "rotation" in record else 0.0,
        z_index=int(_number(record, "zIndex")) if "zIndex" in record else 0,
    )

    if kind is ElementKind.RECTANGLE:
        defaults = RectangleElement.create(element_id, 0, 0)
        return RectangleElement(**common,
                                fill_color=_string(record, "backgroundColor", defaults.fill_color))

    defaults = TextElement.create(element_id, 0, 0)
    font_size = int(_number(record, "fontSize")) if "fontSize" in record else defaults.font_size
    return TextElement(**common,
                       content=_string(record, "content", defaults.content),
                       font_size=font_size,
                       text_color=_string(record, "color", defaults.text_color))


def elements_from_records(records: Any, *, warnings: list[str] | None = None) -> list[Element]:
    """
    Convert a loaded list of records, skipping the ones that are not usable.

    :param records: Value read from storage; anything but a list yields []
    :param warnings: Optional list collecting human-readable diagnostics
    :return: Elements in input order
    """
    warnings = warnings if warnings is not None else []
    if not isinstance(records, list):
        msg = f"Saved scene must be a list, got {type(records).__name__}"
        warnings.append(msg)
        logger.warning(msg)
        return []

    elements: list[Element] = []
    for i, record in enumerate(records):
        try:
            elements.append(element_from_record(record))
        except RecordError as e:
            msg = f"Skipped record #{i}: {e}"
            warnings.append(msg)
            logger.warning(msg)
    return elements
