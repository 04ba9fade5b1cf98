"""Editor configuration shared by the scene model and the interaction engine."""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MIN_SIZE = 20.0
DEFAULT_NUDGE_STEP = 5.0
DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600

DEFAULT_RECT_WIDTH = 150.0
DEFAULT_RECT_HEIGHT = 100.0
DEFAULT_FILL_COLOR = "#FFB7B2"

DEFAULT_TEXT_WIDTH = 200.0
DEFAULT_TEXT_HEIGHT = 60.0
DEFAULT_TEXT = "Hello World"
DEFAULT_FONT_SIZE = 16
DEFAULT_TEXT_COLOR = "#4A4A68"


@dataclass(frozen=True)
class EditorConfig:
    """
    Qt-independent settings consumed by the core.

    Attributes:
        min_size: Floor for element width and height
        nudge_step: Pixels moved by one arrow key press
        canvas_width: Artboard width in pixels
        canvas_height: Artboard height in pixels
        artboard_origin: Screen position of the artboard's top-left corner.
            Pointer events arrive in screen coordinates and are shifted by
            this offset wherever artboard coordinates are needed.
    """
    min_size: float = DEFAULT_MIN_SIZE
    nudge_step: float = DEFAULT_NUDGE_STEP
    canvas_width: int = DEFAULT_CANVAS_WIDTH
    canvas_height: int = DEFAULT_CANVAS_HEIGHT
    artboard_origin: tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        if self.min_size <= 0:
            raise ValueError(f"min_size must be > 0, got {self.min_size}.")
        if self.nudge_step <= 0:
            raise ValueError(f"nudge_step must be > 0, got {self.nudge_step}.")

    def __str__(self) -> str:
        return (f"Canvas: {self.canvas_width}x{self.canvas_height}, "
                f"min size: {self.min_size:g}, nudge: {self.nudge_step:g}")

    def to_artboard(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        """Convert screen coordinates to artboard-local coordinates."""
        ox, oy = self.artboard_origin
        return screen_x - ox, screen_y - oy

    def to_screen(self, x: float, y: float) -> tuple[float, float]:
        """Convert artboard-local coordinates to screen coordinates."""
        ox, oy = self.artboard_origin
        return x + ox, y + oy
