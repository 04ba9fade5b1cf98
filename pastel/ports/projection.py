"""
Projection port - reflects scene changes in a concrete UI.

The core never draws. After every event the editor host calls exactly one of
these paths per effect, before the next event is processed:

- ``element_changed``: cheap partial refresh of one element
- ``rebuild``: repaint every element in ascending z-order (sibling order changed)
- ``selection_changed``: move the handles / highlight the active layer row

Implementations read the elements they are given and must not mutate them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from pastel.core.element import Element


class Projection(Protocol):
    def element_changed(self, element: Element, selected: bool) -> None: ...

    def rebuild(self, elements: Sequence[Element], selected_id: str | None) -> None: ...

    def selection_changed(self, selected_id: str | None) -> None: ...


class NullProjection:
    """Projection that draws nothing (headless use)."""

    def element_changed(self, element: Element, selected: bool) -> None:
        pass

    def rebuild(self, elements: Sequence[Element], selected_id: str | None) -> None:
        pass

    def selection_changed(self, selected_id: str | None) -> None:
        pass


@dataclass
class RecordingProjection:
    """
    Projection that records every call.

    ``calls`` holds tuples such as ``("element_changed", id, selected)``,
    ``("rebuild", [ids bottom->top], selected_id)`` and
    ``("selection_changed", selected_id)``.
    """
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    def element_changed(self, element: Element, selected: bool) -> None:
        self.calls.append(("element_changed", element.id, selected))

    def rebuild(self, elements: Sequence[Element], selected_id: str | None) -> None:
        self.calls.append(("rebuild", [e.id for e in elements], selected_id))

    def selection_changed(self, selected_id: str | None) -> None:
        self.calls.append(("selection_changed", selected_id))

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def clear(self) -> None:
        self.calls.clear()
