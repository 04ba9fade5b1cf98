from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum, auto

from pastel.core.element import Element, ElementKind


class Tool(str, Enum):
    """Active toolbar tool."""
    SELECT = "select"
    RECTANGLE = "rectangle"
    TEXT = "text"

    def __str__(self):
        return self.value

    @property
    def creates(self) -> ElementKind | None:
        """Element kind created by this tool, None for the select tool."""
        if self is Tool.SELECT:
            return None
        return ElementKind(self.value)


class InteractionMode(Enum):
    """Enum for the pointer gesture in progress."""
    NONE = auto()
    DRAGGING = auto()
    RESIZING = auto()
    ROTATING = auto()


class Handle(str, Enum):
    """Handles drawn around the selected element."""
    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"
    ROTATE = "rotate"

    def __str__(self):
        return self.value

    @property
    def is_resize(self) -> bool:
        return self is not Handle.ROTATE


@dataclass(frozen=True)
class InteractionSession:
    """
    Immutable state of the pointer interaction.

    Key points:
    - ``tool`` survives gestures; everything else describes the gesture in
      progress and is dropped on pointer-up.
    - ``snapshot`` is a copy of the target element taken at pointer-down.
      Every pointer-move is computed from ``pointer_origin`` and the snapshot,
      never from the previous move, so dropped or coalesced moves cause no
      drift.
    - The session is never persisted.
    """
    tool: Tool = Tool.SELECT
    mode: InteractionMode = InteractionMode.NONE
    handle: Handle | None = None
    pointer_origin: tuple[float, float] | None = None
    snapshot: Element | None = None

    @property
    def is_idle(self) -> bool:
        return self.mode is InteractionMode.NONE

    @staticmethod
    def default() -> InteractionSession:
        return InteractionSession()

    def begin(self,
              mode: InteractionMode,
              origin: tuple[float, float],
              snapshot: Element | None,
              handle: Handle | None = None) -> InteractionSession:
        """Return a session for a gesture starting now."""
        return dataclasses.replace(
            self,
            mode=mode,
            handle=handle,
            pointer_origin=origin,
            snapshot=snapshot.copy() if snapshot is not None else None,
        )

    def cleared(self) -> InteractionSession:
        """Return an idle session keeping the active tool."""
        return InteractionSession(tool=self.tool)

    def with_tool(self, tool: Tool) -> InteractionSession:
        return dataclasses.replace(self, tool=tool)
