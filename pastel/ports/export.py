"""
Static export of the scene.

Both encoders are pure functions of the element list and do not need to
round-trip through a store.
"""
from __future__ import annotations

import html
import json
from typing import Iterable

from pastel.core.editor_config import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH
from pastel.core.element import Element, RectangleElement, TextElement
from pastel.ports.serialization import elements_to_records

RECT_BORDER_RADIUS = 12
FONT_FAMILY = "sans-serif"

_PAGE_STYLES = """
        body {{ margin:0; display:flex; justify-content:center; align-items:center; min-height:100vh; background:#f0f0f0; }}
        .artboard {{ position:relative; width:{width}px; height:{height}px; background:white; overflow:hidden; border-radius:12px; box-shadow:0 10px 30px rgba(0,0,0,0.1); }}
        .element {{ position:absolute; display:flex; align-items:center; justify-content:center; box-sizing:border-box; }}
"""

_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>{styles}</style>
</head>
<body>
    <div class="artboard">
{content}
    </div>
</body>
</html>
"""


def _z_sorted(elements: Iterable[Element]) -> list[Element]:
    return sorted(elements, key=lambda e: e.z_index)


def _num(value: float) -> str:
    value = round(float(value), 3)
    return str(int(value)) if value.is_integer() else str(value)


def export_json(elements: Iterable[Element], *, indent: int = 2) -> str:
    """Pretty-printed records in ascending z-order."""
    return json.dumps(elements_to_records(_z_sorted(elements)), indent=indent, ensure_ascii=False)


def element_style(element: Element) -> str:
    """Inline CSS that places one element absolutely on the artboard."""
    style = (
        f"left:{_num(element.x)}px; top:{_num(element.y)}px; "
        f"width:{_num(element.width)}px; height:{_num(element.height)}px; "
        f"transform:rotate({_num(element.rotation)}deg); z-index:{element.z_index};"
    )
    if isinstance(element, RectangleElement):
        style += f" background:{element.fill_color}; border-radius:{RECT_BORDER_RADIUS}px;"
    elif isinstance(element, TextElement):
        style += f" color:{element.text_color}; font-size:{element.font_size}px; font-family:{FONT_FAMILY};"
    return style


def export_html(elements: Iterable[Element],
                width: int = DEFAULT_CANVAS_WIDTH,
                height: int = DEFAULT_CANVAS_HEIGHT,
                *,
                title: str = "Pastel Design") -> str:
    """
    Standalone HTML document reproducing the artboard.

    :param elements: Elements to export (any order)
    :param width: Artboard width in pixels
    :param height: Artboard height in pixels
    :param title: Document title
    :return: HTML text
    """
    divs = []
    for element in _z_sorted(elements):
        content = html.escape(element.content) if isinstance(element, TextElement) else ""
        divs.append(
            f'        <div class="element" style="{html.escape(element_style(element))}">{content}</div>'
        )

    return _PAGE.format(
        title=html.escape(title),
        styles=_PAGE_STYLES.format(width=width, height=height),
        content="\n".join(divs),
    )
