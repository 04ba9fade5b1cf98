"""Geometry utility functions for 2D vectors and rotated element boxes."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Tuple

import numpy as np

if TYPE_CHECKING:
    from pastel.core.element import Element


def rotation_matrix(degrees: float) -> np.ndarray:
    """
    Build a 2x2 rotation matrix.

    Screen coordinates grow downwards, so a positive angle turns clockwise
    on screen, the same way a CSS ``rotate()`` does.

    :param degrees: Rotation angle in degrees
    :return: 2x2 rotation matrix
    """
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([[c, -s], [s, c]])


def rotate_vector(dx: float, dy: float, degrees: float) -> Tuple[float, float]:
    """
    Rotate a 2D delta by the given angle (clockwise-positive on screen).

    Used with ``-rotation`` to map a screen-space pointer delta into an
    element's local frame.

    :param dx: Delta x
    :param dy: Delta y
    :param degrees: Rotation angle in degrees
    :return: Rotated delta (dx', dy')
    """
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return dx * c - dy * s, dx * s + dy * c


def angle_of_point(cx: float, cy: float, px: float, py: float) -> float:
    """
    Angle of a point around a center, in degrees.

    0 is straight above the center (where the rotate handle sits), growing
    clockwise. The value is not normalized; see ``normalize_angle``.

    :param cx: Center x
    :param cy: Center y
    :param px: Point x
    :param py: Point y
    :return: Angle in degrees
    """
    return math.degrees(math.atan2(py - cy, px - cx)) + 90.0


def normalize_angle(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = float(degrees) % 360.0
    # -1e-15 % 360 rounds up to 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def element_center(element: Element) -> Tuple[float, float]:
    """Center of the element box in artboard coordinates."""
    return element.x + element.width / 2, element.y + element.height / 2


def element_corners(element: Element) -> np.ndarray:
    """
    Corner points of the rotated element box.

    Elements rotate around their center. Order is nw, ne, se, sw.

    :param element: Element
    :return: (4, 2) array of artboard coordinates
    """
    cx, cy = element_center(element)
    hw, hh = element.width / 2, element.height / 2
    local = np.array([[-hw, -hh], [hw, -hh], [hw, hh], [-hw, hh]])
    return local @ rotation_matrix(element.rotation).T + np.array([cx, cy])


def point_in_element(element: Element, px: float, py: float) -> bool:
    """
    Test whether a point lies inside the rotated element box.

    :param element: Element
    :param px: Point x in artboard coordinates
    :param py: Point y in artboard coordinates
    :return: True if the point is inside (edges included)
    """
    cx, cy = element_center(element)
    lx, ly = rotate_vector(px - cx, py - cy, -element.rotation)
    return abs(lx) <= element.width / 2 and abs(ly) <= element.height / 2
