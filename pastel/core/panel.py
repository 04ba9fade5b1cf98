"""View models for the property panel and the layer list."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

from pastel.core.element import Element, ElementKind, TextElement
from pastel.core.scene import Scene

LAYER_NAME_LENGTH = 10


def round_half_up(value: float) -> int:
    """Round like the number inputs do (0.5 rounds up, also for negatives)."""
    return math.floor(value + 0.5)


@dataclass
class PropertyField:
    """
    A field shown in the property panel.

    :ivar label: Label shown next to the input.
    :ivar attr: Element attribute the field reads.
    :ivar fmt: Format string used when no formatter is given.
    :ivar formatter: Callable turning the raw value into display text.
    """
    label: str
    attr: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] = None

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, fmt=self.fmt: fmt.format(v)

    def display(self, element: Element) -> str:
        return self.formatter(getattr(element, self.attr))


def format_rounded(value: float) -> str:
    return str(round_half_up(value))


def format_color(value: str) -> str:
    return value.upper()


# If you want to show a new field, add it here with the attribute it reads.
GEOMETRY_FIELDS = {
    "x": PropertyField(label="X", attr="x", formatter=format_rounded),
    "y": PropertyField(label="Y", attr="y", formatter=format_rounded),
    "width": PropertyField(label="W", attr="width", formatter=format_rounded),
    "height": PropertyField(label="H", attr="height", formatter=format_rounded),
    "rotation": PropertyField(label="Rotation", attr="rotation", formatter=format_rounded),
}

KIND_FIELDS = {
    ElementKind.RECTANGLE: {
        "color": PropertyField(label="Fill", attr="fill_color", formatter=format_color),
    },
    ElementKind.TEXT: {
        "color": PropertyField(label="Color", attr="text_color", formatter=format_color),
        "content": PropertyField(label="Text", attr="content"),
        "font_size": PropertyField(label="Size", attr="font_size", fmt="{}px"),
    },
}

KIND_LABELS = {
    ElementKind.RECTANGLE: "Rectangle",
    ElementKind.TEXT: "Text",
}

KIND_ICONS = {
    ElementKind.RECTANGLE: "⬜",
    ElementKind.TEXT: "T",
}


def property_values(element: Element | None) -> dict[str, str]:
    """
    Display values for the property panel.

    :param element: Selected element, or None when nothing is selected
    :return: field key -> display text; empty when nothing is selected
    """
    if element is None:
        return {}
    values = {"type": KIND_LABELS[element.kind]}
    for key, field in GEOMETRY_FIELDS.items():
        values[key] = field.display(element)
    for key, field in KIND_FIELDS[element.kind].items():
        values[key] = field.display(element)
    return values


@dataclass(frozen=True)
class LayerEntry:
    element_id: str
    icon: str
    name: str
    active: bool


def layer_name(element: Element) -> str:
    if isinstance(element, TextElement):
        return element.content[:LAYER_NAME_LENGTH] or KIND_LABELS[ElementKind.TEXT]
    return KIND_LABELS[element.kind]


def layer_entries(scene: Scene) -> list[LayerEntry]:
    """Layer list rows, topmost element first."""
    return [
        LayerEntry(
            element_id=element.id,
            icon=KIND_ICONS[element.kind],
            name=layer_name(element),
            active=element.id == scene.selected_id,
        )
        for element in scene.layers()
    ]
