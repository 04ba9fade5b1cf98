"""Signals emitted by scene mutations and interaction transitions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ElementChanged:
    """One element's geometry, style or content changed (partial refresh)."""
    element_id: str


@dataclass(frozen=True)
class SceneRebuilt:
    """Sibling order changed: created, deleted, reordered or loaded."""


@dataclass(frozen=True)
class SelectionChanged:
    selected_id: str | None


@dataclass(frozen=True)
class Checkpoint:
    """The scene should be saved."""


Effect = ElementChanged | SceneRebuilt | SelectionChanged | Checkpoint
