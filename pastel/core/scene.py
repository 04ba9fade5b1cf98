"""
Scene - the single source of truth for elements, paint order and selection.

Design notes:
- Paint order is kept as an explicit list of ids (bottom -> top). ``z_index``
  on each element is derived from it and renumbered to 1..N after every
  structural change, so values never collide or leave gaps.
- Unknown ids are a silent no-op for every operation.
- Out-of-range values (sizes below the minimum, angles outside [0, 360)) are
  corrected when merged, never rejected.
- Every mutation records an effect. The host drains them with
  ``drain_effects()`` and forwards them to the projection.
"""
from __future__ import annotations

import logging
import math
from typing import Callable, Iterable

from pastel.core import geometry_utils
from pastel.core.editor_config import EditorConfig
from pastel.core.effects import Effect, ElementChanged, SceneRebuilt, SelectionChanged
from pastel.core.element import Element, ElementKind, GeometryUpdate, create_element, new_element_id

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("x", "y", "width", "height", "rotation")


class Scene:
    """
    Ordered collection of elements with at most one selection.

    Usage:
        scene = Scene()
        rect = scene.create_element(ElementKind.RECTANGLE, 100, 100)
        scene.update_element(rect.id, GeometryUpdate(width=300))
        scene.reorder(rect.id, -1)
    """

    def __init__(self,
                 config: EditorConfig | None = None,
                 id_factory: Callable[[], str] = new_element_id) -> None:
        self._config = config or EditorConfig()
        self._id_factory = id_factory
        self._elements: dict[str, Element] = {}
        self._order: list[str] = []
        self._selected_id: str | None = None
        self._effects: list[Effect] = []

    # ----------------------
    # Read access
    # ----------------------
    @property
    def config(self) -> EditorConfig:
        return self._config

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected(self) -> Element | None:
        if self._selected_id is None:
            return None
        return self._elements.get(self._selected_id)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def get(self, element_id: str) -> Element | None:
        return self._elements.get(element_id)

    def elements_in_z_order(self) -> list[Element]:
        """Elements in paint order (bottom first)."""
        return [self._elements[i] for i in self._order]

    def layers(self) -> list[Element]:
        """Elements in layer-list order (top first)."""
        return [self._elements[i] for i in reversed(self._order)]

    def element_at(self, x: float, y: float) -> Element | None:
        """
        Return the topmost element under an artboard point.

        :param x: Artboard x
        :param y: Artboard y
        :return: Element or None
        """
        for element in self.layers():
            if geometry_utils.point_in_element(element, x, y):
                return element
        return None

    def drain_effects(self) -> list[Effect]:
        """Return the effects recorded since the last call and forget them."""
        effects, self._effects = self._effects, []
        return effects

    # ----------------------
    # Mutations
    # ----------------------
    def create_element(self, kind: ElementKind, x: float, y: float) -> Element:
        """
        Create an element on top of the stack and select it.

        :param kind: Element kind
        :param x: Top-left x in artboard coordinates
        :param y: Top-left y in artboard coordinates
        :return: The new element
        """
        element = create_element(kind, self._id_factory(), float(x), float(y))
        element.width = max(self._config.min_size, element.width)
        element.height = max(self._config.min_size, element.height)
        element.z_index = len(self._order) + 1

        self._elements[element.id] = element
        self._order.append(element.id)
        logger.info("Element created: %s %s at (%.1f, %.1f) z=%d",
                    element.kind, element.id, element.x, element.y, element.z_index)

        self._effects.append(SceneRebuilt())
        self.select_element(element.id)
        return element

    def update_element(self, element_id: str, update: GeometryUpdate) -> bool:
        """
        Merge a partial update into an element.

        Width/height are clamped to the minimum size and rotation is wrapped
        into [0, 360) here, not by the caller.

        :param element_id: Target element id
        :param update: Partial update; its type must match the element kind
        :return: True if the element exists and the update was applied
        """
        element = self._elements.get(element_id)
        if element is None:
            return False
        if not update.applies_to(element):
            logger.debug("Ignored %s for %s element %s",
                         type(update).__name__, element.kind, element_id)
            return False

        self._merge(element, update.changes())
        self._effects.append(ElementChanged(element_id))
        return True

    def delete_element(self, element_id: str) -> bool:
        """
        Remove an element. Clears the selection if it was selected.

        :param element_id: Target element id
        :return: True if an element was removed
        """
        if element_id not in self._elements:
            return False

        del self._elements[element_id]
        self._order.remove(element_id)
        self._renumber()
        logger.info("Element deleted: %s (remaining: %d)", element_id, len(self._order))

        self._effects.append(SceneRebuilt())
        if self._selected_id == element_id:
            self._selected_id = None
            self._effects.append(SelectionChanged(None))
        return True

    def select_element(self, element_id: str | None) -> None:
        """Select an element, or clear the selection with None."""
        if element_id == self._selected_id:
            return
        if element_id is not None and element_id not in self._elements:
            return
        self._selected_id = element_id
        logger.debug("Selection changed: %s", element_id)
        self._effects.append(SelectionChanged(element_id))

    def reorder(self, element_id: str, direction: int) -> bool:
        """
        Move an element one step up (+1) or down (-1) in z-order.

        Clamped at the ends. z-indices are renumbered to 1..N afterwards.

        :param element_id: Target element id
        :param direction: +1 (towards the top) or -1 (towards the bottom)
        :return: True if the element moved
        """
        if element_id not in self._elements or direction == 0:
            return False

        # paint order follows z_index
        self._order.sort(key=lambda i: self._elements[i].z_index)

        pos = self._order.index(element_id)
        new_pos = pos + (1 if direction > 0 else -1)
        moved = 0 <= new_pos < len(self._order)
        if moved:
            self._order[pos], self._order[new_pos] = self._order[new_pos], self._order[pos]

        self._renumber()
        if moved:
            logger.debug("Element %s moved to z=%d", element_id, self._elements[element_id].z_index)
            self._effects.append(SceneRebuilt())
        return moved

    def replace_all(self, elements: Iterable[Element]) -> None:
        """
        Replace the whole scene, e.g. with elements loaded at startup.

        Elements are ordered by their stored z_index (ties keep input order),
        duplicate ids are dropped, and every element is normalized.
        """
        loaded: list[Element] = []
        seen: set[str] = set()
        for element in elements:
            if element.id in seen:
                logger.warning("Duplicate element id dropped: %s", element.id)
                continue
            seen.add(element.id)
            loaded.append(element)
        loaded.sort(key=lambda e: e.z_index)

        self._elements = {}
        self._order = []
        for element in loaded:
            self._merge(element, {name: getattr(element, name) for name in _NUMERIC_FIELDS})
            self._elements[element.id] = element
            self._order.append(element.id)
        self._renumber()

        self._effects.append(SceneRebuilt())
        if self._selected_id is not None:
            self._selected_id = None
            self._effects.append(SelectionChanged(None))
        logger.info("Scene replaced: %d elements", len(self._order))

    # ----------------------
    # Internal
    # ----------------------
    def _merge(self, element: Element, changes: dict) -> None:
        min_size = self._config.min_size
        for name, value in changes.items():
            if name in _NUMERIC_FIELDS:
                try:
                    value = float(value)
                except (OverflowError, TypeError, ValueError):
                    logger.debug("Ignored out-of-range %s for %s", name, element.id)
                    continue
                if not math.isfinite(value):
                    logger.debug("Ignored non-finite %s for %s", name, element.id)
                    continue
                if name in ("width", "height"):
                    value = max(min_size, value)
                elif name == "rotation":
                    value = geometry_utils.normalize_angle(value)
            setattr(element, name, value)

    def _renumber(self) -> None:
        for i, element_id in enumerate(self._order):
            self._elements[element_id].z_index = i + 1
