"""
Editor host - owns the scene and the interaction session, and delivers
effects to the projection and persistence ports.

One event is handled to completion before the next one starts:

    event -> interaction.apply -> effects -> projection / store
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from pastel.app.key_bindings import KeyBindings
from pastel.controllers import interaction
from pastel.controllers.events import (
    DeleteSelected, Direction, EditProperties, KeyArrow, KeyDelete, MoveLayer, PointerDown,
    PointerMove, PointerUp, SelectLayer, SetTool, Target,
)
from pastel.core.editor_config import EditorConfig
from pastel.core.effects import Checkpoint, Effect, ElementChanged, SceneRebuilt, SelectionChanged
from pastel.core.panel import LayerEntry, layer_entries, property_values
from pastel.core.scene import Scene
from pastel.core.states.interaction_session import InteractionMode, InteractionSession, Tool
from pastel.ports import export
from pastel.ports.projection import NullProjection, Projection
from pastel.ports.storage import CheckpointWriter, SceneStore

logger = logging.getLogger(__name__)


class Editor:
    """
    Pastel editor without any widget toolkit.

    Usage:
        editor = Editor(projection=view, store=JsonFileStore(path))
        editor.start()
        editor.set_tool(Tool.RECTANGLE)
        editor.pointer_down(120, 80, Target.canvas())
        editor.stop()

    With ``background_saves=True`` the store is wrapped in a
    CheckpointWriter and checkpoints are written on a worker thread.
    """

    def __init__(self,
                 scene: Optional[Scene] = None,
                 projection: Optional[Projection] = None,
                 store: Optional[SceneStore] = None,
                 config: Optional[EditorConfig] = None,
                 dev_mode: bool = False,
                 key_bindings: Optional[KeyBindings] = None,
                 background_saves: bool = False):
        self.config = config or (scene.config if scene is not None else EditorConfig())
        self.scene = scene or Scene(self.config)
        self.projection = projection or NullProjection()
        self.store = CheckpointWriter(store) if background_saves and store is not None else store
        self.dev_mode = dev_mode
        self.session = InteractionSession.default()

        self._mode_callbacks: list[Callable[[InteractionMode, InteractionMode], None]] = []

        self.key_bindings = key_bindings or KeyBindings(dev_mode=dev_mode)
        self._register_key_commands()

    # ----------------------
    # Lifecycle
    # ----------------------
    def start(self) -> None:
        """Load the saved scene (if any) and draw it."""
        elements = None
        if self.store is not None:
            try:
                elements = self.store.load()
            except Exception:
                logger.exception("Failed to load saved scene; starting empty")
                if self.dev_mode:
                    raise
        self.scene.replace_all(elements or [])
        self.session = InteractionSession.default()
        self._deliver(self.scene.drain_effects())
        logger.info("Editor started: %d elements (%s)", len(self.scene), self.config)

    def stop(self) -> None:
        """Flush pending background checkpoints."""
        if isinstance(self.store, CheckpointWriter):
            self.store.stop()

    def checkpoint(self) -> bool:
        """
        Save the scene. A failed save leaves the in-memory scene untouched.
        :return: True if the store accepted the checkpoint
        """
        if self.store is None:
            return False
        try:
            self.store.save(self.scene.elements_in_z_order())
        except Exception:
            logger.exception("Checkpoint failed")
            return False
        return True

    # ----------------------
    # Event dispatch
    # ----------------------
    def dispatch(self, event) -> list[Effect]:
        """
        Handle one event to completion.
        :param event: One of the events in ``pastel.controllers.events``
        :return: Effects that were delivered
        """
        previous = self.session.mode
        self.session, effects = interaction.apply(event, self.scene, self.session, self.config)
        if self.session.mode is not previous:
            self._notify_mode_changed(previous, self.session.mode)
        self._deliver(effects)
        return effects

    def add_mode_callback(self, cb: Callable[[InteractionMode, InteractionMode], None]) -> None:
        """Called with (old, new) whenever the interaction mode changes."""
        self._mode_callbacks.append(cb)

    def _notify_mode_changed(self, old: InteractionMode, new: InteractionMode) -> None:
        for cb in list(self._mode_callbacks):
            try:
                cb(old, new)
            except Exception:
                logger.exception("Mode change callback failed")

    def _deliver(self, effects: list[Effect]) -> None:
        selected_id = self.scene.selected_id
        for effect in effects:
            if isinstance(effect, Checkpoint):
                self.checkpoint()
                continue
            try:
                if isinstance(effect, ElementChanged):
                    element = self.scene.get(effect.element_id)
                    if element is not None:
                        self.projection.element_changed(element, element.id == selected_id)
                elif isinstance(effect, SceneRebuilt):
                    self.projection.rebuild(self.scene.elements_in_z_order(), selected_id)
                elif isinstance(effect, SelectionChanged):
                    self.projection.selection_changed(effect.selected_id)
            except Exception:
                logger.exception("Projection failed on %s", effect)
                if self.dev_mode:
                    raise

    # ----------------------
    # Pointer
    # ----------------------
    def pointer_down(self, x: float, y: float, target: Optional[Target] = None) -> list[Effect]:
        """
        Press on the artboard. Without an explicit target the topmost
        element under the point is hit-tested.
        """
        if target is None:
            ax, ay = self.config.to_artboard(x, y)
            element = self.scene.element_at(ax, ay)
            target = Target.element(element.id) if element is not None else Target.canvas()
        return self.dispatch(PointerDown(x, y, target))

    def pointer_move(self, x: float, y: float) -> list[Effect]:
        return self.dispatch(PointerMove(x, y))

    def pointer_up(self) -> list[Effect]:
        return self.dispatch(PointerUp())

    # ----------------------
    # Keyboard
    # ----------------------
    def _register_key_commands(self) -> None:
        commands: dict[str, Callable[[], object]] = {
            "delete": lambda: self.dispatch(KeyDelete()),
            "nudge_up": lambda: self.key_arrow(Direction.UP),
            "nudge_down": lambda: self.key_arrow(Direction.DOWN),
            "nudge_left": lambda: self.key_arrow(Direction.LEFT),
            "nudge_right": lambda: self.key_arrow(Direction.RIGHT),
            "tool_select": lambda: self.set_tool(Tool.SELECT),
            "tool_rectangle": lambda: self.set_tool(Tool.RECTANGLE),
            "tool_text": lambda: self.set_tool(Tool.TEXT),
        }
        available = set(self.key_bindings.commands())
        for cmd, cb in commands.items():
            if cmd in available:
                self.key_bindings.add_callback(cmd, cb)

    def key_pressed(self, key: str, text_input_focused: bool = False) -> bool:
        """
        Handle a key press.
        :param key: DOM style key name ("Delete", "ArrowLeft", ...)
        :param text_input_focused: True while a property field has focus
        :return: True if the key ran an editor command
        """
        if text_input_focused:
            return False
        return self.key_bindings.trigger(key)

    def key_arrow(self, direction: Direction | str, step: float | None = None) -> list[Effect]:
        return self.dispatch(KeyArrow(Direction(direction), step))

    # ----------------------
    # Toolbar / panel / layers
    # ----------------------
    def set_tool(self, tool: Tool | str) -> list[Effect]:
        return self.dispatch(SetTool(Tool(tool)))

    def edit_properties(self, **fields) -> list[Effect]:
        return self.dispatch(EditProperties(**fields))

    def move_layer_up(self) -> list[Effect]:
        return self.dispatch(MoveLayer(+1))

    def move_layer_down(self) -> list[Effect]:
        return self.dispatch(MoveLayer(-1))

    def delete_selected(self) -> list[Effect]:
        return self.dispatch(DeleteSelected())

    def select_layer(self, element_id: str | None) -> list[Effect]:
        return self.dispatch(SelectLayer(element_id))

    def properties(self) -> dict[str, str]:
        return property_values(self.scene.selected)

    def layers(self) -> list[LayerEntry]:
        return layer_entries(self.scene)

    # ----------------------
    # Export
    # ----------------------
    def export_json(self) -> str:
        return export.export_json(self.scene.elements_in_z_order())

    def export_html(self) -> str:
        return export.export_html(self.scene.elements_in_z_order(),
                                  self.config.canvas_width, self.config.canvas_height)
