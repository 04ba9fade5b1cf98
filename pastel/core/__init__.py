"""Core components layer - scene model, geometry and panel values, free of any UI toolkit."""

from pastel.core.editor_config import EditorConfig
from pastel.core.element import (
    Element,
    ElementKind,
    GeometryUpdate,
    RectangleElement,
    RectangleUpdate,
    TextElement,
    TextUpdate,
)
from pastel.core.scene import Scene

__all__ = [
    "EditorConfig",
    "Element",
    "ElementKind",
    "GeometryUpdate",
    "RectangleElement",
    "RectangleUpdate",
    "TextElement",
    "TextUpdate",
    "Scene",
]
