"""
Element data model.

Each element kind is its own dataclass, and partial updates are typed per
kind: a ``GeometryUpdate`` applies to any element, a ``RectangleUpdate`` only
to rectangles and a ``TextUpdate`` only to text elements.
"""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from pastel.core.editor_config import (
    DEFAULT_FILL_COLOR, DEFAULT_FONT_SIZE, DEFAULT_RECT_HEIGHT, DEFAULT_RECT_WIDTH,
    DEFAULT_TEXT, DEFAULT_TEXT_COLOR, DEFAULT_TEXT_HEIGHT, DEFAULT_TEXT_WIDTH,
)


class ElementKind(str, Enum):
    RECTANGLE = "rectangle"
    TEXT = "text"

    def __str__(self):
        return self.value


def new_element_id() -> str:
    """Allocate a new opaque element id."""
    return f"el_{uuid.uuid4().hex[:12]}"


@dataclass
class Element:
    """
    Common fields of every element on the artboard.

    ``x``/``y`` is the top-left corner in artboard pixels. ``z_index`` is
    owned by the Scene and renumbered by it.
    """
    id: str
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    z_index: int = 0

    kind: ClassVar[ElementKind]

    def copy(self) -> Element:
        return dataclasses.replace(self)


@dataclass
class RectangleElement(Element):
    fill_color: str = DEFAULT_FILL_COLOR

    kind: ClassVar[ElementKind] = ElementKind.RECTANGLE

    @classmethod
    def create(cls, element_id: str, x: float, y: float) -> RectangleElement:
        return cls(id=element_id, x=x, y=y, width=DEFAULT_RECT_WIDTH, height=DEFAULT_RECT_HEIGHT)


@dataclass
class TextElement(Element):
    content: str = DEFAULT_TEXT
    font_size: int = DEFAULT_FONT_SIZE
    text_color: str = DEFAULT_TEXT_COLOR

    kind: ClassVar[ElementKind] = ElementKind.TEXT

    @classmethod
    def create(cls, element_id: str, x: float, y: float) -> TextElement:
        return cls(id=element_id, x=x, y=y, width=DEFAULT_TEXT_WIDTH, height=DEFAULT_TEXT_HEIGHT)


ELEMENT_TYPES: dict[ElementKind, type[Element]] = {
    ElementKind.RECTANGLE: RectangleElement,
    ElementKind.TEXT: TextElement,
}


def create_element(kind: ElementKind, element_id: str, x: float, y: float) -> Element:
    """Build an element of the given kind with its default size and style."""
    return ELEMENT_TYPES[ElementKind(kind)].create(element_id, x, y)


# ----------------------
# Partial updates
# ----------------------
@dataclass(frozen=True)
class GeometryUpdate:
    """Position, size and rotation changes. Legal for every element kind."""
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    rotation: float | None = None

    target_kind: ClassVar[ElementKind | None] = None

    def applies_to(self, element: Element) -> bool:
        return self.target_kind is None or element.kind is self.target_kind

    def changes(self) -> dict[str, Any]:
        """Return only the fields that were set."""
        return {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class RectangleUpdate(GeometryUpdate):
    fill_color: str | None = None

    target_kind: ClassVar[ElementKind | None] = ElementKind.RECTANGLE


@dataclass(frozen=True)
class TextUpdate(GeometryUpdate):
    content: str | None = None
    font_size: int | None = None
    text_color: str | None = None

    target_kind: ClassVar[ElementKind | None] = ElementKind.TEXT
