"""Input events consumed by the interaction state machine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from pastel.core.element import GeometryUpdate
from pastel.core.states.interaction_session import Handle, Tool


class TargetKind(Enum):
    CANVAS = auto()
    ELEMENT = auto()
    HANDLE = auto()


@dataclass(frozen=True)
class Target:
    """What the pointer went down on."""
    kind: TargetKind
    element_id: str | None = None
    handle: Handle | None = None

    @classmethod
    def canvas(cls) -> Target:
        return cls(TargetKind.CANVAS)

    @classmethod
    def element(cls, element_id: str) -> Target:
        return cls(TargetKind.ELEMENT, element_id=element_id)

    @classmethod
    def on_handle(cls, element_id: str, handle: Handle | str) -> Target:
        return cls(TargetKind.HANDLE, element_id=element_id, handle=Handle(handle))


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    def __str__(self):
        return self.value

    @property
    def unit(self) -> tuple[int, int]:
        return {
            Direction.UP: (0, -1),
            Direction.DOWN: (0, 1),
            Direction.LEFT: (-1, 0),
            Direction.RIGHT: (1, 0),
        }[self]


# ----------------------
# Pointer
# ----------------------
@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    target: Target


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    pass


# ----------------------
# Keyboard
# ----------------------
@dataclass(frozen=True)
class KeyDelete:
    pass


@dataclass(frozen=True)
class KeyArrow:
    direction: Direction
    step: float | None = None  # None: configured nudge step


# ----------------------
# Toolbar, property panel and layer list
# ----------------------
@dataclass(frozen=True)
class SetTool:
    tool: Tool


@dataclass(frozen=True)
class EditProperties:
    """
    Property panel edit on the selected element.

    ``color`` is routed to the fill or text color depending on the element
    kind; ``content`` and ``font_size`` only apply to text elements.
    """
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    rotation: float | None = None
    color: str | None = None
    content: str | None = None
    font_size: int | None = None

    def geometry(self) -> GeometryUpdate:
        return GeometryUpdate(x=self.x, y=self.y, width=self.width,
                              height=self.height, rotation=self.rotation)


@dataclass(frozen=True)
class MoveLayer:
    direction: int  # +1 up, -1 down


@dataclass(frozen=True)
class DeleteSelected:
    pass


@dataclass(frozen=True)
class SelectLayer:
    element_id: str | None


Event = (PointerDown | PointerMove | PointerUp | KeyDelete | KeyArrow | SetTool
         | EditProperties | MoveLayer | DeleteSelected | SelectLayer)
